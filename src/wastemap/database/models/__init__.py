"""Database models."""

from .base import Base, TimestampMixin
from .detection import DetectionRecordRow

__all__ = [
    "Base",
    "TimestampMixin",
    "DetectionRecordRow",
]
