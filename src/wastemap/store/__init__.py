"""Detection stores."""

from .base import (
    DetectionNotFoundError,
    DetectionStore,
    StoreDeleteError,
    StoreError,
    StoreReadError,
)
from .memory import InMemoryDetectionStore
from .sql import SqlDetectionStore

__all__ = [
    "DetectionNotFoundError",
    "DetectionStore",
    "InMemoryDetectionStore",
    "SqlDetectionStore",
    "StoreDeleteError",
    "StoreError",
    "StoreReadError",
]
