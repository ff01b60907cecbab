"""Core domain types."""

from .records import Coordinates, DetectionRecord, normalize_document

__all__ = ["Coordinates", "DetectionRecord", "normalize_document"]
