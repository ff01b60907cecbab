"""Tests for database models."""

from datetime import datetime, timezone

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from wastemap.core.records import Coordinates, DetectionRecord
from wastemap.database.models import Base, DetectionRecordRow


def get_test_session() -> Session:
    """Create an in-memory test database session."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return session_factory()


class TestDetectionRecordRow:
    """Tests for DetectionRecordRow model."""

    def test_create_row(self):
        """Test creating a detection row."""
        session = get_test_session()

        row = DetectionRecordRow(
            id="TEST_001",
            latitude=22.6950,
            longitude=88.3794,
            confidence_scores=[0.8, 0.4],
            address="Belur Math Road",
            created_at=datetime.now(timezone.utc),
        )

        session.add(row)
        session.commit()

        stored = session.get(DetectionRecordRow, "TEST_001")
        assert stored is not None
        assert stored.confidence_scores == [0.8, 0.4]
        assert stored.inserted_at is not None

        session.close()

    def test_row_defaults(self):
        """Test default values."""
        session = get_test_session()

        row = DetectionRecordRow(id="TEST_002", latitude=22.0, longitude=88.0)
        session.add(row)
        session.commit()

        assert row.confidence_scores == []
        assert row.address == "Unknown Address"
        assert row.accuracy_m is None

        session.close()

    def test_round_trip_through_domain_record(self):
        """Rows convert to and from DetectionRecord."""
        session = get_test_session()

        record = DetectionRecord(
            id="TEST_003",
            coordinates=Coordinates(22.5726, 88.3639),
            confidence_scores=(0.0, 0.0),
            address="Esplanade",
            created_at=datetime(2025, 5, 1, 8, 0, tzinfo=timezone.utc),
            accuracy_m=25.0,
            metadata={"model_version": "v2"},
        )
        session.add(DetectionRecordRow.from_record(record))
        session.commit()
        session.expunge_all()

        loaded = session.get(DetectionRecordRow, "TEST_003").to_record()

        assert loaded == record
        assert loaded.is_cleaned is True
        assert loaded.created_at.tzinfo is not None
        assert loaded.metadata == {"model_version": "v2"}

        session.close()

    def test_missing_location_round_trips_as_invalid(self):
        session = get_test_session()

        session.add(DetectionRecordRow(id="TEST_004", confidence_scores=[0.9]))
        session.commit()

        record = session.get(DetectionRecordRow, "TEST_004").to_record()
        assert record.coordinates is None
        assert record.is_valid is False

        session.close()

    def test_query_by_id(self):
        session = get_test_session()

        for i in range(3):
            session.add(
                DetectionRecordRow(
                    id=f"Q{i}", latitude=22.0 + i, longitude=88.0, confidence_scores=[0.5]
                )
            )
        session.commit()

        ids = session.scalars(select(DetectionRecordRow.id).order_by(DetectionRecordRow.id)).all()
        assert ids == ["Q0", "Q1", "Q2"]

        session.close()
