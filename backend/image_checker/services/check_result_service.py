"""
Service layer for check result submission, history and statistics.
Entry point used by the HTTP routes; coordinates the record store and the
statistics aggregator.
"""

from typing import List
from sqlalchemy.orm import Session

from image_checker.exceptions import CheckValidationError
from image_checker.models.check_result import CheckResult
from image_checker.schemas.check_result import (
    CheckResultCreate, CombinedStats, SocialMediaCount, ValidityStats
)
from image_checker.services.record_store import CheckResultStore
from image_checker.services.statistics_service import StatisticsAggregator
from image_checker.utils.logger import get_logger

logger = get_logger(__name__)


class CheckResultService:
    """
    Service class for handling check result operations.

    Validates submissions before they reach the store and surfaces every
    failure to the caller as a typed exception.
    """

    def __init__(self, db: Session) -> None:
        """
        Initialize the check result service.

        Args:
            db: Database session for operations
        """
        self.store = CheckResultStore(db)
        self.aggregator = StatisticsAggregator(self.store)

    def submit(self, data: CheckResultCreate) -> CheckResult:
        """
        Validate and store the outcome of a face verification.

        Args:
            data: Submitted check result

        Returns:
            Stored CheckResult

        Raises:
            CheckValidationError: If imageUrl or socialMediaName is missing
            StorageError: If the record cannot be written
        """
        if not data.image_url or not data.image_url.strip():
            logger.warning("Check result rejected", reason="missing image url")
            raise CheckValidationError("Image URL not provided")
        if not data.social_media_name or not data.social_media_name.strip():
            logger.warning("Check result rejected", reason="missing social media name")
            raise CheckValidationError("Social media name not provided")

        record = self.store.create(data)

        logger.info("Check result submitted",
                   record_id=record.id,
                   result=record.result,
                   confidence=record.confidence)
        return record

    def history(self) -> List[CheckResult]:
        """Return every stored check result, newest first."""
        return self.store.list_all()

    def validity_stats(self) -> ValidityStats:
        """Return counts of check results by outcome."""
        return self.aggregator.validity_stats()

    def social_media_stats(self) -> List[SocialMediaCount]:
        """Return counts of check results per source platform."""
        return self.aggregator.social_media_stats()

    def stats(self) -> CombinedStats:
        """Return validity and per-platform statistics together."""
        return CombinedStats(
            validity=self.aggregator.validity_stats(),
            by_social_media=self.aggregator.social_media_stats()
        )
