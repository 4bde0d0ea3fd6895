"""
API routes for check result statistics.
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from image_checker.db.database import get_db
from image_checker.schemas.check_result import CombinedStats, SocialMediaCount, ValidityStats
from image_checker.services.check_result_service import CheckResultService
from image_checker.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=CombinedStats)
def get_stats(db: Session = Depends(get_db)) -> CombinedStats:
    """Validity and per-platform statistics in one response."""
    logger.info("Combined stats request")
    return CheckResultService(db).stats()


@router.get("/validity", response_model=ValidityStats)
def get_validity_stats(db: Session = Depends(get_db)) -> ValidityStats:
    """
    Count checked images by outcome.

    totalImages counts every record, including those without a result.
    """
    logger.info("Validity stats request")
    return CheckResultService(db).validity_stats()


@router.get("/social-media", response_model=List[SocialMediaCount])
def get_social_media_stats(db: Session = Depends(get_db)) -> List[SocialMediaCount]:
    """Count checked images per source platform."""
    logger.info("Social media stats request")
    return CheckResultService(db).social_media_stats()
