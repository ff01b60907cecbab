"""Tests for database session helpers."""

import threading

import pytest
from sqlalchemy import inspect

from wastemap.config import settings as settings_module
from wastemap.config.settings import Settings, configure_settings
from wastemap.core.records import Coordinates, DetectionRecord
from wastemap.database import session as session_module
from wastemap.database.models import DetectionRecordRow
from wastemap.database.session import (
    configure_engine,
    get_db_session,
    get_engine,
    get_session_factory,
    init_db,
)
from wastemap.store import SqlDetectionStore


@pytest.fixture(autouse=True)
def isolated_globals(monkeypatch):
    """Restore the module-level engine and settings after each test."""
    monkeypatch.setattr(session_module, "_engine", None)
    monkeypatch.setattr(session_module, "_SessionLocal", None)
    monkeypatch.setattr(settings_module, "_settings", None)
    yield
    if session_module._engine is not None:
        session_module._engine.dispose()


@pytest.fixture
def file_url(tmp_path):
    return f"sqlite:///{tmp_path / 'session.db'}"


def make_row(record_id="A"):
    return DetectionRecordRow.from_record(
        DetectionRecord(record_id, Coordinates(22.6950, 88.3794), (0.8,))
    )


class TestEngine:
    """Tests for engine configuration."""

    def test_configure_engine_replaces_globals(self, file_url):
        engine = configure_engine(file_url)

        assert get_engine() is engine
        assert get_session_factory().kw["bind"] is engine

    def test_get_engine_uses_settings(self, file_url):
        custom = Settings()
        custom.database.url = file_url
        configure_settings(custom)

        assert str(get_engine().url) == file_url

    def test_init_db_creates_tables(self, file_url):
        configure_engine(file_url)
        init_db()

        assert "detection_records" in inspect(get_engine()).get_table_names()

    def test_in_memory_database_shared_across_threads(self):
        configure_engine("sqlite://")
        init_db()
        store = SqlDetectionStore()
        store.add([DetectionRecord("A", Coordinates(22.6950, 88.3794), (0.8,))])

        deleted = []
        worker = threading.Thread(target=lambda: deleted.append(store.delete_detection("A")))
        worker.start()
        worker.join()

        assert deleted == [True]
        assert store.get("A") is None


class TestGetDbSession:
    """Tests for the get_db_session context manager."""

    def test_commits_on_success(self, file_url):
        configure_engine(file_url)
        init_db()

        with get_db_session() as db:
            db.add(make_row())

        with get_db_session() as db:
            assert db.get(DetectionRecordRow, "A") is not None

    def test_rolls_back_on_error(self, file_url):
        configure_engine(file_url)
        init_db()

        with pytest.raises(RuntimeError):
            with get_db_session() as db:
                db.add(make_row())
                db.flush()
                raise RuntimeError("boom")

        with get_db_session() as db:
            assert db.get(DetectionRecordRow, "A") is None
