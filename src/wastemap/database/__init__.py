"""Database module."""

from .models import Base, DetectionRecordRow
from .session import (
    configure_engine,
    get_db_session,
    get_engine,
    get_session_factory,
    init_db,
)

__all__ = [
    "Base",
    "DetectionRecordRow",
    "configure_engine",
    "get_db_session",
    "get_engine",
    "get_session_factory",
    "init_db",
]
