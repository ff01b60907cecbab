"""Database session management."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from wastemap.config.settings import get_settings

from .models.base import Base

# Global engine and session factory
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _build_engine(database_url: str, echo: bool = False) -> Engine:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        # Cleanup workers delete from their own threads; they must all see one
        # in-memory database
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo, pool_pre_ping=True)


def get_engine() -> Engine:
    """Return the configured engine, building one from settings on first use."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = _build_engine(settings.database.url, echo=settings.database.echo)
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


@contextmanager
def get_db_session(
    session_factory: Optional[sessionmaker] = None,
) -> Generator[Session, None, None]:
    """Open a session that commits on success and rolls back on error.

    Stores pass their own factory; without one the global factory is used.
    """
    factory = session_factory or get_session_factory()
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create the detection tables if they do not exist."""
    Base.metadata.create_all(bind=get_engine())


def configure_engine(database_url: str, echo: bool = False) -> Engine:
    """Point the global engine and session factory at ``database_url``."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = _build_engine(database_url, echo=echo)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine
