"""Detection store contract and exceptions."""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from wastemap.core.records import DetectionRecord


class StoreError(Exception):
    """Base class for detection store failures."""


class StoreReadError(StoreError):
    """Listing detections failed; nothing can be reconciled."""


class StoreDeleteError(StoreError):
    """Deleting a single detection failed."""

    def __init__(self, record_id: str, message: str = ""):
        self.record_id = record_id
        super().__init__(message or f"Failed to delete detection {record_id}")


class DetectionNotFoundError(StoreError):
    """The detection is already absent from the store."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Detection {record_id} not found")


@runtime_checkable
class DetectionStore(Protocol):
    """Persistence boundary consumed by the cleanup scheduler.

    ``delete_detection`` returns True when the record was removed and False
    when it was already absent. Stores may raise :class:`DetectionNotFoundError`
    instead of returning False; callers treat both the same way.
    """

    def list_detections(self) -> List[DetectionRecord]:
        ...

    def delete_detection(self, record_id: str) -> bool:
        ...
