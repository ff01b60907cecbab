"""SQLAlchemy-backed detection store."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from wastemap.core.records import DetectionRecord, normalize_document
from wastemap.database.models import DetectionRecordRow
from wastemap.database.session import get_db_session

from .base import StoreDeleteError, StoreError, StoreReadError

logger = logging.getLogger(__name__)


class SqlDetectionStore:
    """Detection store over the ``detection_records`` table.

    Each operation runs in its own session so the store can be shared by
    concurrent deletions.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory

    def list_detections(self) -> List[DetectionRecord]:
        try:
            with get_db_session(self._session_factory) as db:
                rows = db.scalars(select(DetectionRecordRow)).all()
                return [row.to_record() for row in rows]
        except SQLAlchemyError as exc:
            raise StoreReadError(f"Failed to list detections: {exc}") from exc

    def get(self, record_id: str) -> Optional[DetectionRecord]:
        try:
            with get_db_session(self._session_factory) as db:
                row = db.get(DetectionRecordRow, record_id)
                return row.to_record() if row else None
        except SQLAlchemyError as exc:
            raise StoreReadError(f"Failed to read detection {record_id}: {exc}") from exc

    def delete_detection(self, record_id: str) -> bool:
        # Single statement; a row removed by an overlapping run matches 0 rows
        statement = delete(DetectionRecordRow).where(DetectionRecordRow.id == record_id)
        try:
            with get_db_session(self._session_factory) as db:
                return db.execute(statement).rowcount > 0
        except SQLAlchemyError as exc:
            raise StoreDeleteError(record_id, str(exc)) from exc

    def add(self, records: Iterable[DetectionRecord]) -> int:
        """Insert records, skipping ids that already exist.

        Returns:
            Number of records inserted
        """
        added = 0
        try:
            with get_db_session(self._session_factory) as db:
                for record in records:
                    if db.get(DetectionRecordRow, record.id) is not None:
                        logger.debug("Skipping existing detection %s", record.id)
                        continue
                    db.add(DetectionRecordRow.from_record(record))
                    added += 1
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to add detections: {exc}") from exc
        return added

    def add_documents(self, documents: Iterable[Mapping[str, Any]]) -> int:
        """Normalise raw detection documents and insert them.

        Documents without an ``id`` key get a generated one.
        """
        records = []
        for doc in documents:
            doc_id = doc.get("id") or uuid.uuid4().hex
            records.append(normalize_document(doc_id, doc))
        return self.add(records)

    def inventory(self) -> Dict[str, int]:
        """Count stored detections by classification."""
        records = self.list_detections()
        active = sum(1 for r in records if r.is_active)
        invalid = sum(1 for r in records if not r.is_valid)
        return {
            "total_detections": len(records),
            "active_detections": active,
            "cleaned_detections": len(records) - active,
            "invalid_detections": invalid,
        }
