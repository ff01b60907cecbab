"""Automated cleanup of retired detections."""

from .scheduler import CleanupScheduler, CleanupStats, ScheduleHandle

__all__ = ["CleanupScheduler", "CleanupStats", "ScheduleHandle"]
