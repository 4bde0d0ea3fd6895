"""
Persistence for check results.
Append-only storage with recency-ordered retrieval and counting primitives.
"""

from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from image_checker.exceptions import CheckValidationError, StorageError
from image_checker.models.check_result import CheckOutcome, CheckResult
from image_checker.schemas.check_result import CheckResultCreate
from image_checker.utils.logger import get_logger

logger = get_logger(__name__)


class CheckResultStore:
    """
    Store for ``CheckResult`` rows.

    Offers create, list and count operations only; records are never updated
    or deleted. Database failures are raised as ``StorageError``.
    """

    def __init__(self, db: Session) -> None:
        """
        Initialize the store.

        Args:
            db: Database session for operations
        """
        self.db: Session = db

    @staticmethod
    def validate(data: CheckResultCreate) -> None:
        """
        Check the constraints a record must satisfy before it is written.

        Raises:
            CheckValidationError: If a required field is missing or a value is out of range
        """
        if not data.image_url or not data.image_url.strip():
            raise CheckValidationError("Image URL not provided")
        if not data.social_media_name or not data.social_media_name.strip():
            raise CheckValidationError("Social media name not provided")
        if data.result is not None and data.result not in list(CheckOutcome):
            raise CheckValidationError(f"Result must be one of {', '.join(o.value for o in CheckOutcome)}")
        if data.confidence is not None and not 0.0 <= data.confidence <= 1.0:
            raise CheckValidationError("Confidence must be between 0 and 1")

    def create(self, data: CheckResultCreate) -> CheckResult:
        """
        Persist a new check result.

        Args:
            data: Validated submission

        Returns:
            Stored CheckResult with its id and timestamps assigned

        Raises:
            CheckValidationError: If the submission violates a constraint
            StorageError: If the database rejects the write or is unreachable
        """
        self.validate(data)

        record = CheckResult(
            image_url=data.image_url,
            social_media_name=data.social_media_name,
            recognized_face=data.recognized_face,
            result=CheckOutcome(data.result).value if data.result is not None else None,
            confidence=data.confidence
        )

        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to store check result",
                        social_media_name=data.social_media_name,
                        error=str(e))
            raise StorageError(f"Failed to store check result: {e}") from e

        logger.info("Check result stored",
                   record_id=record.id,
                   social_media_name=record.social_media_name,
                   result=record.result)
        return record

    def list_all(self) -> List[CheckResult]:
        """
        Return every record, newest first.

        Records sharing a ``created_at`` are ordered by descending id, i.e.
        the most recently inserted one first.

        Raises:
            StorageError: If the database cannot be read
        """
        try:
            records = (self.db.query(CheckResult)
                       .order_by(CheckResult.created_at.desc(), CheckResult.id.desc())
                       .all())
        except SQLAlchemyError as e:
            logger.error("Failed to list check results", error=str(e))
            raise StorageError(f"Failed to list check results: {e}") from e

        logger.debug("Listed check results", count=len(records))
        return records

    def count_where(self, outcome: Optional[CheckOutcome] = None) -> int:
        """
        Count records, optionally only those with the given outcome.

        Args:
            outcome: Outcome to match, or None to count every record

        Raises:
            StorageError: If the database cannot be read
        """
        try:
            query = self.db.query(func.count(CheckResult.id))
            if outcome is not None:
                query = query.filter(CheckResult.result == CheckOutcome(outcome).value)
            return query.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Failed to count check results", outcome=outcome, error=str(e))
            raise StorageError(f"Failed to count check results: {e}") from e

    def count_by_social_media(self) -> List[Tuple[str, int]]:
        """
        Group records by source platform.

        Returns:
            List of (social_media_name, count) pairs, most frequent first,
            ties ordered by platform name

        Raises:
            StorageError: If the database cannot be read
        """
        count = func.count(CheckResult.id)
        try:
            rows = (self.db.query(CheckResult.social_media_name, count)
                    .group_by(CheckResult.social_media_name)
                    .order_by(count.desc(), CheckResult.social_media_name.asc())
                    .all())
        except SQLAlchemyError as e:
            logger.error("Failed to group check results", error=str(e))
            raise StorageError(f"Failed to group check results: {e}") from e

        return [(name, total) for name, total in rows]
