"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine from
`settings.DATABASE_URL` (a local SQLite file by default) and provides the
session dependency used by the routers and tests.
"""

from sqlmodel import SQLModel, create_engine, Session

from .config import Settings, settings


def build_engine(cfg: Settings):
    """Create an engine for the configured database URL.

    SQLite needs `check_same_thread=False` because FastAPI runs sync
    endpoints in a threadpool.
    """
    connect_args = {}
    if cfg.DATABASE_URL.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(cfg.DATABASE_URL, echo=False, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(settings)


def create_db_and_tables():
    """Create database tables using SQLModel metadata.

    Intended for local development and tests; production deployments
    should manage the schema with a migration tool instead.
    """
    from . import models  # noqa: F401  registers the tables on the metadata

    SQLModel.metadata.create_all(engine)


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session
