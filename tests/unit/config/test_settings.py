"""Tests for application settings."""

from wastemap.config.settings import Settings, configure_settings, get_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.reconcile.lat_threshold == 0.005
        assert settings.reconcile.lon_threshold == 0.005
        assert settings.cleanup.interval_seconds == 300.0
        assert settings.cleanup.batch_size == 500

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("WASTEMAP_RECONCILE__LAT_THRESHOLD", "0.01")
        monkeypatch.setenv("WASTEMAP_CLEANUP__INTERVAL_SECONDS", "60")

        settings = Settings()

        assert settings.reconcile.lat_threshold == 0.01
        assert settings.cleanup.interval_seconds == 60.0

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "database:\n"
            "  url: sqlite:///test.db\n"
            "cleanup:\n"
            "  batch_size: 100\n"
        )

        settings = Settings.from_yaml(path)

        assert settings.database.url == "sqlite:///test.db"
        assert settings.cleanup.batch_size == 100
        assert settings.reconcile.lon_threshold == 0.005

    def test_configure_settings(self):
        custom = Settings(app_name="Test")
        configure_settings(custom)
        try:
            assert get_settings() is custom
        finally:
            configure_settings(Settings())
