"""
Tests for the statistics aggregator.
"""

import pytest
from typing import Callable
from unittest.mock import Mock

from sqlalchemy.orm import Session

from image_checker.exceptions import StorageError
from image_checker.models.check_result import CheckOutcome, CheckResult
from image_checker.services.record_store import CheckResultStore
from image_checker.services.statistics_service import StatisticsAggregator


class TestStatisticsAggregator:
    """Test the StatisticsAggregator class."""

    @pytest.fixture
    def store(self, test_db: Session) -> CheckResultStore:
        return CheckResultStore(test_db)

    @pytest.fixture
    def aggregator(self, store: CheckResultStore) -> StatisticsAggregator:
        return StatisticsAggregator(store)

    def test_validity_stats_empty_store(self, aggregator: StatisticsAggregator) -> None:
        """Test all counts are zero without records."""
        stats = aggregator.validity_stats()

        assert (stats.total, stats.real, stats.fake, stats.unknown) == (0, 0, 0, 0)

    def test_validity_stats_counts_outcomes(self, aggregator: StatisticsAggregator, store: CheckResultStore,
                                            make_submission: Callable) -> None:
        """Test a record without a result counts towards the total only."""
        for outcome in [CheckOutcome.REAL, CheckOutcome.REAL, CheckOutcome.FAKE, CheckOutcome.UNKNOWN, None]:
            store.create(make_submission(result=outcome))

        stats = aggregator.validity_stats()

        assert stats.total == 5
        assert stats.real == 2
        assert stats.fake == 1
        assert stats.unknown == 1

    def test_validity_stats_total_includes_unrecognised_results(self, aggregator: StatisticsAggregator,
                                                                store: CheckResultStore, test_db: Session,
                                                                make_submission: Callable) -> None:
        """Test rows holding a legacy result value are part of the total but of no outcome."""
        store.create(make_submission(result=CheckOutcome.FAKE))
        test_db.add(CheckResult(image_url="https://x.test/legacy.png", social_media_name="x", result="real"))
        test_db.commit()

        stats = aggregator.validity_stats()

        assert stats.total == 2
        assert stats.real + stats.fake + stats.unknown == 1

    def test_validity_stats_serializes_with_wire_names(self, aggregator: StatisticsAggregator) -> None:
        """Test the aliases used on the wire."""
        payload = aggregator.validity_stats().model_dump(by_alias=True)

        assert payload == {"totalImages": 0, "realImages": 0, "fakeImages": 0, "unknownImages": 0}

    def test_social_media_stats_groups_by_platform(self, aggregator: StatisticsAggregator,
                                                   store: CheckResultStore, make_submission: Callable) -> None:
        """Test one entry per platform with its record count."""
        for name in ["insta", "insta", "x"]:
            store.create(make_submission(social_media_name=name))

        stats = aggregator.social_media_stats()

        assert {s.platform: s.count for s in stats} == {"insta": 2, "x": 1}

    def test_social_media_stats_counts_every_result(self, aggregator: StatisticsAggregator,
                                                    store: CheckResultStore, make_submission: Callable) -> None:
        """Test grouping ignores the result field."""
        store.create(make_submission(social_media_name="x", result=CheckOutcome.REAL))
        store.create(make_submission(social_media_name="x", result=None))

        stats = aggregator.social_media_stats()

        assert len(stats) == 1
        assert stats[0].model_dump(by_alias=True) == {"_id": "x", "count": 2}

    def test_social_media_stats_empty_store(self, aggregator: StatisticsAggregator) -> None:
        """Test no entries without records."""
        assert aggregator.social_media_stats() == []

    def test_failures_propagate(self) -> None:
        """Test store failures are not swallowed."""
        store = Mock()
        store.count_where.side_effect = StorageError("database unavailable")
        store.count_by_social_media.side_effect = StorageError("database unavailable")
        aggregator = StatisticsAggregator(store)

        with pytest.raises(StorageError):
            aggregator.validity_stats()
        with pytest.raises(StorageError):
            aggregator.social_media_stats()
