"""Heatmap point shaping and summary statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from wastemap.core.records import DetectionRecord

from .reconciler import ReconcileResult


@dataclass(frozen=True)
class HeatmapPoint:
    """A single point rendered on the heatmap."""

    lat: float
    lng: float
    intensity: float
    address: str
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "lat": self.lat,
            "lng": self.lng,
            "intensity": self.intensity,
            "address": self.address,
            "timestamp": self.timestamp,
        }


def heatmap_points(records: Iterable[DetectionRecord]) -> List[HeatmapPoint]:
    """Build heatmap points from active, valid records."""
    points = []
    for record in records:
        if not record.is_valid or not record.is_active:
            continue
        points.append(
            HeatmapPoint(
                lat=record.coordinates.latitude,
                lng=record.coordinates.longitude,
                intensity=record.representative_confidence,
                address=record.address,
                timestamp=record.created_at.isoformat() if record.created_at else None,
            )
        )
    return points


@dataclass
class HeatmapSummary:
    """Aggregate statistics of a reconciliation pass for the map view."""

    total_points: int
    average_intensity: float
    max_intensity: float
    removed_count: int
    cleaned_count: int
    invalid_count: int
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_result(cls, result: ReconcileResult) -> "HeatmapSummary":
        """Summarise the records left on the map after reconciliation."""
        intensities = [r.representative_confidence for r in result.active_records]
        return cls(
            total_points=len(intensities),
            average_intensity=sum(intensities) / len(intensities) if intensities else 0.0,
            max_intensity=max(intensities, default=0.0),
            removed_count=result.removed_count,
            cleaned_count=len(result.cleaned_records),
            invalid_count=len(result.invalid_records),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_points": self.total_points,
            "average_intensity": round(self.average_intensity, 4),
            "max_intensity": self.max_intensity,
            "removed_count": self.removed_count,
            "cleaned_count": self.cleaned_count,
            "invalid_count": self.invalid_count,
            "last_updated": self.last_updated.isoformat(),
        }
