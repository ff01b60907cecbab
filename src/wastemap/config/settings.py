"""Pydantic settings for application configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration."""

    url: str = Field(default="sqlite:///wastemap.db", description="Database URL")
    echo: bool = Field(default=False, description="Echo SQL statements")


class ReconcileSettings(BaseSettings):
    """Heatmap reconciliation thresholds."""

    lat_threshold: float = Field(
        default=0.005, gt=0, description="Latitude box threshold in degrees"
    )
    lon_threshold: float = Field(
        default=0.005, gt=0, description="Longitude box threshold in degrees"
    )


class CleanupSettings(BaseSettings):
    """Automated cleanup configuration."""

    interval_seconds: float = Field(
        default=300.0, gt=0, description="Interval between scheduled cleanups"
    )
    batch_size: int = Field(
        default=500, gt=0, description="Maximum deletions per store batch"
    )
    max_workers: int = Field(
        default=4, gt=0, description="Concurrent deletions within a batch"
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="WASTEMAP_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="WasteMap Heatmap Engine")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    reconcile: ReconcileSettings = Field(default_factory=ReconcileSettings)
    cleanup: CleanupSettings = Field(default_factory=CleanupSettings)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "Settings":
        """Load settings from YAML file."""
        import yaml

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure_settings(settings: Settings) -> None:
    """Configure the global settings instance."""
    global _settings
    _settings = settings
