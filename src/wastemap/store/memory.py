"""In-process detection store."""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional

from wastemap.core.records import DetectionRecord


class InMemoryDetectionStore:
    """Dict-backed store, safe to share between scheduler threads."""

    def __init__(self, records: Optional[Iterable[DetectionRecord]] = None):
        self._records: Dict[str, DetectionRecord] = {}
        self._lock = threading.Lock()
        for record in records or ():
            self.add(record)

    def add(self, record: DetectionRecord) -> None:
        """Insert or replace a record."""
        with self._lock:
            self._records[record.id] = record

    def get(self, record_id: str) -> Optional[DetectionRecord]:
        with self._lock:
            return self._records.get(record_id)

    def list_detections(self) -> List[DetectionRecord]:
        with self._lock:
            return list(self._records.values())

    def delete_detection(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
