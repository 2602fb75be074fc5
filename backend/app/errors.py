"""Application exception hierarchy.

Services raise these; the handlers registered in `app.main` turn them
into `{"error": message}` JSON responses with the matching status code.
"""

import enum


class AppError(Exception):
    """Base class for all application exceptions."""
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class AuthFailure(str, enum.Enum):
    MISSING = "missing"
    MALFORMED = "malformed"
    EXPIRED = "expired"
    INVALID = "invalid"


_AUTH_MESSAGES = {
    AuthFailure.MISSING: "missing or malformed JWT",
    AuthFailure.MALFORMED: "missing or malformed JWT",
    AuthFailure.EXPIRED: "token expired",
    AuthFailure.INVALID: "invalid token",
}


class AuthError(AppError):
    """Raised when a bearer token is absent or fails validation."""
    status_code = 401

    def __init__(self, kind: AuthFailure, message: str = None):
        self.kind = kind
        super().__init__(message or _AUTH_MESSAGES[kind])


class InvalidCredentialsError(AppError):
    """Login failure; the message never says which credential was wrong."""
    status_code = 401

    def __init__(self):
        super().__init__("invalid credentials")


class ValidationError(AppError):
    status_code = 400


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""
    status_code = 404

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found")


class ForbiddenError(AppError):
    """Raised when a resource exists but belongs to another user."""
    status_code = 403

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} does not belong to user")


class ConflictError(AppError):
    status_code = 409


class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    status_code = 500
