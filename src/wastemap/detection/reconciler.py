"""Heatmap reconciliation of active detections and cleaned signals.

A cleaned signal (a detection whose confidence scores are all zero) retires the
closest still-active detection inside the proximity box. The reconciler only
decides; deleting retired records from the store is left to the caller so the
engine stays pure and testable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set, cast

from wastemap.core.records import Coordinates, DetectionRecord

from .proximity import (
    DEFAULT_LAT_THRESHOLD,
    DEFAULT_LON_THRESHOLD,
    coordinate_haversine,
    degree_distance,
    within_threshold,
)

logger = logging.getLogger(__name__)

REASON_NO_MATCH = "no nearby active detection"


class Outcome(str, Enum):
    """What happened to a record in a reconciliation pass."""

    KEPT = "kept"
    REMOVED = "removed"
    IGNORED = "ignored"


@dataclass(frozen=True)
class RetirementDecision:
    """Result of processing one cleaned signal."""

    cleaned_record_id: str
    retired_record_id: Optional[str]
    distance_degrees: Optional[float]
    outcome: Outcome
    reason: str
    distance_m: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialisation."""
        return {
            "cleaned_record_id": self.cleaned_record_id,
            "retired_record_id": self.retired_record_id,
            "distance_degrees": self.distance_degrees,
            "distance_m": self.distance_m,
            "outcome": self.outcome.value,
            "reason": self.reason,
        }


@dataclass
class ReconcileResult:
    """Output of :meth:`DetectionReconciler.reconcile`."""

    decisions: List[RetirementDecision] = field(default_factory=list)
    active_records: List[DetectionRecord] = field(default_factory=list)
    cleaned_records: List[DetectionRecord] = field(default_factory=list)
    invalid_records: List[DetectionRecord] = field(default_factory=list)
    _outcomes: Optional[Dict[str, Outcome]] = field(
        default=None, init=False, repr=False, compare=False
    )

    @property
    def removed_decisions(self) -> List[RetirementDecision]:
        return [d for d in self.decisions if d.outcome is Outcome.REMOVED]

    @property
    def retired_ids(self) -> List[str]:
        """Ids the caller should delete from the store."""
        return [
            d.retired_record_id
            for d in self.removed_decisions
            if d.retired_record_id is not None
        ]

    @property
    def removed_count(self) -> int:
        return len(self.removed_decisions)

    def outcome_for(self, record_id: str) -> Optional[Outcome]:
        """Status of a single record in this pass.

        Active records still on the map are ``kept``, active records retired by
        a cleaned signal are ``removed``, and cleaned or invalid records are
        ``ignored``. Returns None for ids that were not part of the input.
        """
        if self._outcomes is None:
            self._outcomes = self.outcomes()
        return self._outcomes.get(record_id)

    def outcomes(self) -> Dict[str, Outcome]:
        """Map every input record id to its outcome."""
        outcomes = {r.id: Outcome.IGNORED for r in self.invalid_records}
        outcomes.update((r.id, Outcome.IGNORED) for r in self.cleaned_records)
        outcomes.update((r.id, Outcome.KEPT) for r in self.active_records)
        outcomes.update((record_id, Outcome.REMOVED) for record_id in self.retired_ids)
        return outcomes


class DetectionReconciler:
    """Decides which detections stay on the heatmap.

    Each cleaned signal retires at most one active detection: the closest one
    by degree distance inside the threshold box, ties broken by smallest id.
    Cleaned signals are processed in ascending id order so the set of
    retirements does not depend on the order the store returned records in.

    Attributes:
        lat_threshold: Latitude box threshold in degrees
        lon_threshold: Longitude box threshold in degrees
    """

    def __init__(
        self,
        lat_threshold: float = DEFAULT_LAT_THRESHOLD,
        lon_threshold: float = DEFAULT_LON_THRESHOLD,
    ):
        self.lat_threshold = lat_threshold
        self.lon_threshold = lon_threshold

    def reconcile(self, records: Iterable[DetectionRecord]) -> ReconcileResult:
        """Classify records and match cleaned signals to active detections.

        Args:
            records: Snapshot of every detection in the store

        Returns:
            Decisions for each valid cleaned signal plus the records that
            remain active for display
        """
        result = ReconcileResult()
        active: List[DetectionRecord] = []

        for record in records:
            if not record.is_valid:
                result.invalid_records.append(record)
            elif record.is_active:
                active.append(record)
            else:
                result.cleaned_records.append(record)

        retired: Set[str] = set()
        for cleaned in sorted(result.cleaned_records, key=lambda r: r.id):
            decision = self._match(cleaned, active, retired)
            if decision.retired_record_id is not None:
                retired.add(decision.retired_record_id)
            result.decisions.append(decision)

        result.active_records = [r for r in active if r.id not in retired]

        logger.debug(
            "Reconciled %d records: %d active kept, %d retired, %d cleaned, %d invalid",
            len(active) + len(result.cleaned_records) + len(result.invalid_records),
            len(result.active_records),
            len(retired),
            len(result.cleaned_records),
            len(result.invalid_records),
        )
        return result

    def _match(
        self,
        cleaned: DetectionRecord,
        active: List[DetectionRecord],
        retired: Set[str],
    ) -> RetirementDecision:
        origin = cast(Coordinates, cleaned.coordinates)

        candidates = [
            record
            for record in active
            if record.id not in retired
            and within_threshold(
                origin,
                record.coordinates,
                self.lat_threshold,
                self.lon_threshold,
            )
        ]

        if not candidates:
            logger.debug("No nearby active detection for cleaned signal %s", cleaned.id)
            return RetirementDecision(
                cleaned_record_id=cleaned.id,
                retired_record_id=None,
                distance_degrees=None,
                outcome=Outcome.IGNORED,
                reason=REASON_NO_MATCH,
            )

        closest = min(
            candidates,
            key=lambda r: (degree_distance(origin, r.coordinates), r.id),
        )
        distance = degree_distance(origin, closest.coordinates)
        distance_m = coordinate_haversine(origin, closest.coordinates)

        logger.debug(
            "Cleaned signal %s retires %s (%.6f degrees, %.0f m away)",
            cleaned.id,
            closest.id,
            distance,
            distance_m,
        )
        return RetirementDecision(
            cleaned_record_id=cleaned.id,
            retired_record_id=closest.id,
            distance_degrees=distance,
            outcome=Outcome.REMOVED,
            reason=f"retired nearby detection {closest.id} ({distance:.6f} degrees away)",
            distance_m=distance_m,
        )
