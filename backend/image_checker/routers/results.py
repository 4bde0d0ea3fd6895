"""
API routes for check results.
Handles submission of verification outcomes and retrieval of history.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from image_checker.db.database import get_db
from image_checker.schemas.check_result import (
    CheckResultCreate, CheckResultResponse, HistoryResponse, SubmitResultResponse
)
from image_checker.services.check_result_service import CheckResultService
from image_checker.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/results", tags=["results"])


@router.post("", response_model=SubmitResultResponse)
def submit_result(
    payload: CheckResultCreate,
    db: Session = Depends(get_db)
) -> SubmitResultResponse:
    """
    Record the outcome of an image check.

    Requires imageUrl and socialMediaName; result must be REAL, FAKE or
    UNKNOWN and confidence within [0, 1] when given.
    """
    logger.info("Submit result request",
               social_media_name=payload.social_media_name,
               result=payload.result)

    service = CheckResultService(db)
    record = service.submit(payload)

    return SubmitResultResponse(
        message="Data saved successfully",
        record=CheckResultResponse.model_validate(record)
    )


@router.get("", response_model=HistoryResponse)
def list_results(db: Session = Depends(get_db)) -> HistoryResponse:
    """
    List every check result, newest first.
    """
    logger.info("History request")

    service = CheckResultService(db)
    records = service.history()

    return HistoryResponse(results=[CheckResultResponse.model_validate(r) for r in records])
