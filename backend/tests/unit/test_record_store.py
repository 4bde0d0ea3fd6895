"""
Tests for the check result record store.
"""

import pytest
from datetime import datetime, timedelta
from typing import Callable
from unittest.mock import Mock

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from image_checker.exceptions import CheckValidationError, StorageError
from image_checker.models.check_result import CheckOutcome
from image_checker.schemas.check_result import CheckResultCreate
from image_checker.services.record_store import CheckResultStore


def db_down() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("could not connect to server"))


class TestCheckResultStore:
    """Test the CheckResultStore class against SQLite."""

    @pytest.fixture
    def store(self, test_db: Session) -> CheckResultStore:
        """Create store bound to the test session."""
        return CheckResultStore(test_db)

    def test_create_assigns_id_and_timestamps(self, store: CheckResultStore, make_submission: Callable) -> None:
        """Test created record carries the submitted fields plus generated ones."""
        record = store.create(make_submission(recognized_face="alice"))

        assert record.id is not None
        assert record.created_at is not None
        assert record.updated_at is not None
        assert record.image_url == "https://res.cloudinary.com/test-cloud/image/upload/sample.jpg"
        assert record.social_media_name == "instagram"
        assert record.recognized_face == "alice"
        assert record.result == "REAL"
        assert record.confidence == pytest.approx(0.92)

    def test_create_keeps_fields_as_submitted(self, store: CheckResultStore, make_submission: Callable) -> None:
        """Test surrounding whitespace is stored, not trimmed."""
        record = store.create(make_submission(image_url=" https://x.test/a.png ", social_media_name=" insta "))

        assert record.image_url == " https://x.test/a.png "
        assert record.social_media_name == " insta "
        assert store.count_by_social_media() == [(" insta ", 1)]

    def test_create_assigns_distinct_ids(self, store: CheckResultStore, make_submission: Callable) -> None:
        """Test every record gets its own id."""
        ids = {store.create(make_submission()).id for _ in range(5)}

        assert len(ids) == 5

    def test_create_without_result_or_confidence(self, store: CheckResultStore) -> None:
        """Test result and confidence are optional."""
        record = store.create(CheckResultCreate(image_url="https://x.test/a.png", social_media_name="x"))

        assert record.result is None
        assert record.confidence is None

    @pytest.mark.parametrize("field, message", [
        ("image_url", "Image URL not provided"),
        ("social_media_name", "Social media name not provided"),
    ])
    def test_create_rejects_missing_required_field(self, store: CheckResultStore, make_submission: Callable,
                                                   field: str, message: str) -> None:
        """Test records missing a required field are not written."""
        submission = make_submission(**{field: "   "})

        with pytest.raises(CheckValidationError, match=message):
            store.create(submission)

        assert store.count_where() == 0

    def test_create_rejects_unknown_result(self, store: CheckResultStore) -> None:
        """Test results outside the outcome set are refused."""
        submission = CheckResultCreate.model_construct(
            image_url="https://x.test/a.png",
            social_media_name="x",
            recognized_face=None,
            result="MAYBE",
            confidence=None
        )

        with pytest.raises(CheckValidationError, match="Result must be one of"):
            store.create(submission)

    def test_create_rejects_confidence_out_of_range(self, store: CheckResultStore) -> None:
        """Test confidence must lie within [0, 1]."""
        submission = CheckResultCreate.model_construct(
            image_url="https://x.test/a.png",
            social_media_name="x",
            recognized_face=None,
            result=None,
            confidence=1.5
        )

        with pytest.raises(CheckValidationError, match="Confidence"):
            store.create(submission)

    def test_list_all_newest_first(self, store: CheckResultStore, test_db: Session, make_submission: Callable) -> None:
        """Test records are returned in descending creation time."""
        first = store.create(make_submission(social_media_name="first"))
        second = store.create(make_submission(social_media_name="second"))
        third = store.create(make_submission(social_media_name="third"))

        base = datetime(2024, 1, 1, 12, 0, 0)
        first.created_at = base + timedelta(minutes=2)
        second.created_at = base + timedelta(minutes=3)
        third.created_at = base
        test_db.commit()

        names = [r.social_media_name for r in store.list_all()]

        assert names == ["second", "first", "third"]

    def test_list_all_breaks_ties_by_insertion_order(self, store: CheckResultStore, test_db: Session,
                                                     make_submission: Callable) -> None:
        """Test records with the same timestamp come back most recently inserted first."""
        records = [store.create(make_submission(social_media_name=f"p{i}")) for i in range(3)]
        same_time = datetime(2024, 1, 1, 12, 0, 0)
        for record in records:
            record.created_at = same_time
        test_db.commit()

        names = [r.social_media_name for r in store.list_all()]

        assert names == ["p2", "p1", "p0"]

    def test_list_all_empty(self, store: CheckResultStore) -> None:
        """Test listing an empty store."""
        assert store.list_all() == []

    def test_count_where(self, store: CheckResultStore, make_submission: Callable) -> None:
        """Test counting all records and records of one outcome."""
        store.create(make_submission(result=CheckOutcome.REAL))
        store.create(make_submission(result=CheckOutcome.FAKE))
        store.create(make_submission(result=CheckOutcome.FAKE))

        assert store.count_where() == 3
        assert store.count_where(CheckOutcome.REAL) == 1
        assert store.count_where(CheckOutcome.FAKE) == 2
        assert store.count_where(CheckOutcome.UNKNOWN) == 0

    def test_count_by_social_media(self, store: CheckResultStore, make_submission: Callable) -> None:
        """Test grouping by platform, most frequent first."""
        for name in ["x", "insta", "insta", "facebook"]:
            store.create(make_submission(social_media_name=name))

        assert store.count_by_social_media() == [("insta", 2), ("facebook", 1), ("x", 1)]


class TestCheckResultStoreFailures:
    """Test that database failures surface as StorageError."""

    @pytest.fixture
    def mock_db(self) -> Mock:
        """Create mock database session."""
        return Mock()

    @pytest.fixture
    def store(self, mock_db: Mock) -> CheckResultStore:
        """Create store with mocked DB."""
        return CheckResultStore(mock_db)

    def test_create_rolls_back_on_write_failure(self, store: CheckResultStore, mock_db: Mock,
                                                make_submission: Callable) -> None:
        """Test failed writes are rolled back and reported."""
        mock_db.commit.side_effect = db_down()

        with pytest.raises(StorageError, match="Failed to store check result"):
            store.create(make_submission())

        mock_db.rollback.assert_called_once()

    def test_list_all_failure(self, store: CheckResultStore, mock_db: Mock) -> None:
        """Test failed history reads."""
        mock_db.query.side_effect = db_down()

        with pytest.raises(StorageError):
            store.list_all()

    def test_count_where_failure(self, store: CheckResultStore, mock_db: Mock) -> None:
        """Test failed counts."""
        mock_db.query.side_effect = db_down()

        with pytest.raises(StorageError):
            store.count_where(CheckOutcome.REAL)

    def test_count_by_social_media_failure(self, store: CheckResultStore, mock_db: Mock) -> None:
        """Test failed grouping."""
        mock_db.query.side_effect = db_down()

        with pytest.raises(StorageError):
            store.count_by_social_media()
