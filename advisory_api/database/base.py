"""
Engine and session management for the advisory database.

The engine and session factory are built lazily from the global settings, so
tests can point DB_URL somewhere else and call ``reset_engine``.
"""

from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from advisory_api.config import Settings, get_global_settings

Base = declarative_base()

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def _engine_options(settings: Settings) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.is_development}
    if settings.uses_sqlite:
        # Flask may serve a request on a different thread than the one that connected
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_pre_ping"] = True
        options["pool_recycle"] = 3600
    return options


def get_engine() -> Engine:
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        settings = get_global_settings()
        _engine = create_engine(settings.db_url, **_engine_options(settings))
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


def get_session() -> Session:
    """Open a new session; the caller closes it."""
    return get_session_factory()()  # type: ignore[no-any-return]


def get_db() -> Generator[Session, None, None]:
    """Yield a session that is closed once the caller is done with it."""
    session = get_session()
    try:
        yield session
    finally:
        session.close()


# Context-manager form used by the blueprints
db_session = contextmanager(get_db)


def create_tables() -> None:
    """Create every table registered on Base."""
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def drop_tables() -> None:
    Base.metadata.drop_all(bind=get_engine())


def reset_engine() -> None:
    """Dispose of the current engine so the next call rebuilds it from settings."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
