"""
Read-only statistics over stored check results.
"""

from typing import List

from image_checker.models.check_result import CheckOutcome
from image_checker.schemas.check_result import SocialMediaCount, ValidityStats
from image_checker.services.record_store import CheckResultStore
from image_checker.utils.logger import get_logger

logger = get_logger(__name__)


class StatisticsAggregator:
    """
    Computes outcome and platform counts on demand from the record store.

    ``total`` counts every record, including rows whose result is empty or
    outside the known outcomes, so it can exceed ``real + fake + unknown``.
    """

    def __init__(self, store: CheckResultStore) -> None:
        self.store = store

    def validity_stats(self) -> ValidityStats:
        """Count all records and the records of each outcome."""
        stats = ValidityStats(
            total=self.store.count_where(),
            real=self.store.count_where(CheckOutcome.REAL),
            fake=self.store.count_where(CheckOutcome.FAKE),
            unknown=self.store.count_where(CheckOutcome.UNKNOWN)
        )

        logger.info("Computed validity stats",
                   total=stats.total,
                   real=stats.real,
                   fake=stats.fake,
                   unknown=stats.unknown)
        return stats

    def social_media_stats(self) -> List[SocialMediaCount]:
        """Count records per source platform, most frequent first."""
        stats = [
            SocialMediaCount(platform=platform, count=count)
            for platform, count in self.store.count_by_social_media()
        ]

        logger.info("Computed social media stats", platforms=len(stats))
        return stats
