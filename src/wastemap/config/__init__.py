"""Configuration module."""

from .settings import (
    CleanupSettings,
    DatabaseSettings,
    ReconcileSettings,
    Settings,
    configure_settings,
    get_settings,
)

__all__ = [
    "CleanupSettings",
    "DatabaseSettings",
    "ReconcileSettings",
    "Settings",
    "configure_settings",
    "get_settings",
]
