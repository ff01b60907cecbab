"""Detection record model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from wastemap.core.records import (
    DEFAULT_ADDRESS,
    Coordinates,
    DetectionRecord,
    parse_timestamp,
)

from .base import Base, TimestampMixin


class DetectionRecordRow(Base, TimestampMixin):
    """Stored garbage detection event."""

    __tablename__ = "detection_records"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Location
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    accuracy_m: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    address: Mapped[str] = mapped_column(String(255), default=DEFAULT_ADDRESS)

    # Detection
    confidence_scores: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    model_version: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )

    def __repr__(self) -> str:
        return (
            f"<DetectionRecordRow(id={self.id}, lat={self.latitude}, "
            f"lon={self.longitude}, scores={self.confidence_scores})>"
        )

    def to_record(self) -> DetectionRecord:
        """Convert to the canonical domain record."""
        coordinates = None
        if self.latitude is not None and self.longitude is not None:
            coordinates = Coordinates(latitude=self.latitude, longitude=self.longitude)

        metadata = {}
        if self.model_version:
            metadata["model_version"] = self.model_version
        if self.image_url:
            metadata["image_url"] = self.image_url

        return DetectionRecord(
            id=self.id,
            coordinates=coordinates,
            confidence_scores=tuple(float(s) for s in self.confidence_scores or ()),
            address=self.address or DEFAULT_ADDRESS,
            # SQLite drops tzinfo on the way back
            created_at=parse_timestamp(self.created_at),
            accuracy_m=self.accuracy_m,
            metadata=metadata,
        )

    @classmethod
    def from_record(cls, record: DetectionRecord) -> "DetectionRecordRow":
        """Build a row from a canonical domain record."""
        return cls(
            id=record.id,
            latitude=record.latitude,
            longitude=record.longitude,
            accuracy_m=record.accuracy_m,
            address=record.address,
            confidence_scores=list(record.confidence_scores),
            model_version=record.metadata.get("model_version"),
            image_url=record.metadata.get("image_url"),
            created_at=record.created_at,
        )
