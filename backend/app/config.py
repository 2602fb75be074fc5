"""Application settings and validation."""

import logging
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigurationError

BASE = Path(__file__).resolve().parent.parent
HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
DEFAULT_SECRET = "change-me-before-deploying-campus-pilot"
MIN_SECRET_BYTES = 32

logger = logging.getLogger("app.config")


class Settings:
    """Process configuration, read from the environment once.

    Instances are frozen after construction; components receive the
    instance they should use instead of reading the environment
    themselves.
    """
    ENV: str
    DATABASE_URL: str
    PORT: int
    JWT_SECRET: str
    JWT_ALGORITHM: str
    JWT_EXPIRE_DAYS: int
    TIMEZONE: str
    ALLOW_INSECURE_JWT: bool
    ALLOW_DEV_CORS: bool
    LOG_LEVEL: str

    def __init__(self, **overrides):
        values = {
            "ENV": os.getenv("ENV", "dev").lower(),
            "DATABASE_URL": os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'app.db'}"),
            "PORT": int(os.getenv("PORT", "8080")),
            "JWT_SECRET": os.getenv("JWT_SECRET", DEFAULT_SECRET),
            "JWT_ALGORITHM": os.getenv("JWT_ALGORITHM", "HS256").upper(),
            "JWT_EXPIRE_DAYS": int(os.getenv("JWT_EXPIRE_DAYS", "7")),
            "TIMEZONE": os.getenv("TIMEZONE", "UTC"),
            "ALLOW_INSECURE_JWT": os.getenv("ALLOW_INSECURE_JWT", "false").lower() == "true",
            "ALLOW_DEV_CORS": os.getenv("ALLOW_DEV_CORS", "true").lower() == "true",
            "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
        }
        unknown = set(overrides) - set(values)
        if unknown:
            raise ConfigurationError(f"unknown settings: {', '.join(sorted(unknown))}")
        values.update(overrides)
        for key, value in values.items():
            object.__setattr__(self, key, value)
        self._validate()
        object.__setattr__(self, "_frozen", True)

    def __setattr__(self, name, value):
        if getattr(self, "_frozen", False):
            raise AttributeError(f"settings are read-only; cannot set {name}")
        object.__setattr__(self, name, value)

    def _validate(self):
        if self.ENV != "dev" and not self.ALLOW_INSECURE_JWT and self.JWT_SECRET == DEFAULT_SECRET:
            raise ConfigurationError("JWT_SECRET must be set to a non-default value in non-dev environments")
        if len(self.JWT_SECRET.encode()) < MIN_SECRET_BYTES:
            if self.ENV != "dev" and not self.ALLOW_INSECURE_JWT:
                raise ConfigurationError(f"JWT_SECRET must be at least {MIN_SECRET_BYTES} bytes in non-dev environments")
            logger.warning("JWT_SECRET is shorter than %d bytes", MIN_SECRET_BYTES)
        if self.JWT_ALGORITHM not in HMAC_ALGORITHMS:
            raise ConfigurationError(f"JWT_ALGORITHM must be one of {', '.join(HMAC_ALGORITHMS)}")
        if self.JWT_EXPIRE_DAYS <= 0:
            raise ConfigurationError("JWT_EXPIRE_DAYS must be positive")
        try:
            ZoneInfo(self.TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"unknown TIMEZONE: {self.TIMEZONE}") from e

    @property
    def tzinfo(self) -> ZoneInfo:
        """Zone used to place time-of-day values on the calendar."""
        return ZoneInfo(self.TIMEZONE)


settings = Settings()
