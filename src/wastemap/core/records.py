"""Canonical detection records and raw document normalisation.

Detection documents arrive in several shapes: location nested under
``location`` or ``gps_location`` or flattened onto the document, confidence as
a ``confidence_scores`` array or a single ``confidence_score``, accuracy as a
number or a string such as ``"±78 meters"``. :func:`normalize_document` maps all
of them onto :class:`DetectionRecord` so the matching logic only ever sees one
shape.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

DEFAULT_ADDRESS = "Unknown Address"

_NUMBER_PATTERN = re.compile(r"[-+]?\d+(?:\.\d+)?")


@dataclass(frozen=True)
class Coordinates:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    @property
    def is_sentinel(self) -> bool:
        """(0, 0) is what clients send when they have no GPS fix."""
        return self.latitude == 0 and self.longitude == 0

    @property
    def is_valid(self) -> bool:
        """Check coordinates are finite, in range and not the sentinel."""
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            return False
        if not -90.0 <= self.latitude <= 90.0:
            return False
        if not -180.0 <= self.longitude <= 180.0:
            return False
        return not self.is_sentinel


@dataclass(frozen=True)
class DetectionRecord:
    """One garbage detection event tied to a location."""

    id: str
    coordinates: Optional[Coordinates]
    confidence_scores: Tuple[float, ...] = ()
    address: str = DEFAULT_ADDRESS
    created_at: Optional[datetime] = None
    accuracy_m: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_active(self) -> bool:
        """At least one object was detected with positive confidence."""
        return any(score > 0 for score in self.confidence_scores)

    @property
    def is_cleaned(self) -> bool:
        """All scores are zero. An empty score list counts as cleaned."""
        return not self.is_active

    @property
    def is_valid(self) -> bool:
        """Whether the record can take part in matching and display."""
        return self.coordinates is not None and self.coordinates.is_valid

    @property
    def representative_confidence(self) -> float:
        """Highest score when active, used as heatmap intensity."""
        if not self.is_active:
            return 0.0
        return max(self.confidence_scores)

    @property
    def latitude(self) -> Optional[float]:
        return self.coordinates.latitude if self.coordinates else None

    @property
    def longitude(self) -> Optional[float]:
        return self.coordinates.longitude if self.coordinates else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialisation."""
        return {
            "id": self.id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "confidence_scores": list(self.confidence_scores),
            "representative_confidence": self.representative_confidence,
            "is_active": self.is_active,
            "address": self.address,
            "accuracy_m": self.accuracy_m,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def _to_float(value: Any) -> Optional[float]:
    """Parse a finite float, returning None for anything unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _clamp_score(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def parse_confidence_scores(data: Mapping[str, Any]) -> Tuple[float, ...]:
    """Extract confidence scores from an array or a scalar fallback."""
    raw = data.get("confidence_scores")
    if isinstance(raw, (list, tuple)):
        values: Iterable[Any] = raw
    elif raw is not None:
        values = [raw]
    elif data.get("confidence_score") is not None:
        values = [data["confidence_score"]]
    else:
        values = []

    scores = []
    for value in values:
        number = _to_float(value)
        if number is not None:
            scores.append(_clamp_score(number))
    return tuple(scores)


def parse_accuracy(value: Any) -> Optional[float]:
    """Parse GPS accuracy in metres from a number or a string like "±78 meters"."""
    if isinstance(value, str):
        match = _NUMBER_PATTERN.search(value)
        if match is None:
            return None
        number = _to_float(match.group())
    else:
        number = _to_float(value)
    if number is None:
        return None
    return abs(number)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse ISO strings, epoch seconds/milliseconds or datetimes."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    number = _to_float(value)
    if number is None:
        return None
    # Browser clients store epoch milliseconds
    if number > 1e11:
        number /= 1000.0
    try:
        return datetime.fromtimestamp(number, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _location_of(data: Mapping[str, Any]) -> Mapping[str, Any]:
    for key in ("location", "gps_location"):
        location = data.get(key)
        if isinstance(location, Mapping):
            return location
    return {}


def normalize_document(doc_id: Any, data: Mapping[str, Any]) -> DetectionRecord:
    """Map a raw detection document onto a :class:`DetectionRecord`.

    Never raises on malformed content: missing or unparseable coordinates
    produce a record with ``coordinates=None`` which the reconciler treats as
    invalid.

    Args:
        doc_id: Store-assigned document identifier
        data: Raw document fields

    Returns:
        Normalised detection record
    """
    location = _location_of(data)

    latitude = _to_float(location.get("latitude", data.get("latitude")))
    longitude = _to_float(location.get("longitude", data.get("longitude")))
    coordinates = None
    if latitude is not None and longitude is not None:
        coordinates = Coordinates(latitude=latitude, longitude=longitude)

    address = location.get("address") or data.get("address") or DEFAULT_ADDRESS
    accuracy = location.get("accuracy", data.get("accuracy"))

    created_at = None
    for key in ("createdAt", "created_at", "timestamp"):
        created_at = parse_timestamp(data.get(key))
        if created_at is not None:
            break

    metadata = {
        key: data[key]
        for key in ("model_version", "image_url", "status")
        if data.get(key) is not None
    }

    return DetectionRecord(
        id=str(doc_id),
        coordinates=coordinates,
        confidence_scores=parse_confidence_scores(data),
        address=str(address),
        created_at=created_at,
        accuracy_m=parse_accuracy(accuracy),
        metadata=metadata,
    )
