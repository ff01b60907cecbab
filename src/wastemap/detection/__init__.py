"""Heatmap reconciliation engine."""

from .heatmap import HeatmapPoint, HeatmapSummary, heatmap_points
from .proximity import degree_distance, haversine_distance, within_threshold
from .reconciler import (
    DetectionReconciler,
    Outcome,
    ReconcileResult,
    RetirementDecision,
)

__all__ = [
    "DetectionReconciler",
    "HeatmapPoint",
    "HeatmapSummary",
    "Outcome",
    "ReconcileResult",
    "RetirementDecision",
    "degree_distance",
    "haversine_distance",
    "heatmap_points",
    "within_threshold",
]
