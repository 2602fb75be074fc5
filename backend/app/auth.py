"""Authentication gate: token issuance/validation and FastAPI dependencies.

`TokenService` signs and checks bearer tokens with a symmetric secret.
The `get_current_user_id` dependency validates the `Authorization`
header of every protected request, so handlers never run for a request
whose token is missing or bad. Validation failures raise `AuthError`,
which the application renders as HTTP 401.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from . import models, repositories
from .config import HMAC_ALGORITHMS, Settings, settings
from .database import get_session
from .errors import AuthError, AuthFailure

logger = logging.getLogger("app.auth")

bearer_scheme = HTTPBearer(auto_error=False)


class TokenService:
    """Issue and validate signed bearer tokens carrying a user id."""

    def __init__(self, cfg: Settings):
        self._secret = cfg.JWT_SECRET
        self._algorithm = cfg.JWT_ALGORITHM
        self._lifetime = timedelta(days=cfg.JWT_EXPIRE_DAYS)

    def issue_token(self, user_id: str, now: Optional[datetime] = None) -> str:
        """Return a token with `sub=user_id`, `iat` and `exp` claims."""
        issued = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": int(issued.timestamp()),
            "exp": int((issued + self._lifetime).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def validate_token(self, token: Optional[str]) -> str:
        """Verify `token` and return the user id in its `sub` claim.

        Raises `AuthError` with kind MISSING (no token), MALFORMED (not a
        parseable JWT, or its header names a non-HMAC algorithm), EXPIRED
        or INVALID (bad signature or claims).
        """
        if not token:
            raise AuthError(AuthFailure.MISSING)
        try:
            header = jwt.get_unverified_header(token)
        except jwt.DecodeError as e:
            raise AuthError(AuthFailure.MALFORMED) from e
        if header.get("alg") not in HMAC_ALGORITHMS:
            logger.info("rejected token signed with %r", header.get("alg"))
            raise AuthError(AuthFailure.MALFORMED, "unexpected signing method")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=list(HMAC_ALGORITHMS),
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthError(AuthFailure.EXPIRED) from e
        except jwt.InvalidSignatureError as e:
            raise AuthError(AuthFailure.INVALID) from e
        except jwt.DecodeError as e:
            # undecodable payload or signature segment
            raise AuthError(AuthFailure.MALFORMED) from e
        except jwt.InvalidTokenError as e:
            raise AuthError(AuthFailure.INVALID) from e
        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise AuthError(AuthFailure.INVALID, "invalid user ID in token")
        return user_id


token_service = TokenService(settings)


def get_token_service() -> TokenService:
    return token_service


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """FastAPI dependency returning the authenticated user's id.

    The id is also stored on `request.state.user_id` for the rest of the
    request.
    """
    if credentials is None:
        raise AuthError(AuthFailure.MISSING)
    user_id = tokens.validate_token(credentials.credentials)
    request.state.user_id = user_id
    return user_id


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_session),
) -> models.User:
    """FastAPI dependency that returns the authenticated `User` row."""
    user = repositories.UserRepository(db).get(user_id)
    if not user:
        raise AuthError(AuthFailure.INVALID, "user not found")
    return user
