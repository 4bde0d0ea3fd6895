"""
API routes for the face descriptor gallery.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from image_checker.db.database import get_db
from image_checker.schemas.face import (
    FaceLabelsResponse, FaceMatchRequest, FaceMatchResponse, FaceRegisterRequest, FaceRegisterResponse
)
from image_checker.services.face_service import FaceService
from image_checker.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/faces", tags=["faces"])


@router.post("", response_model=FaceRegisterResponse)
def register_face(
    payload: FaceRegisterRequest,
    db: Session = Depends(get_db)
) -> FaceRegisterResponse:
    """
    Register a person under a unique label.

    Descriptors are produced by an external face model, one vector per
    reference photo.
    """
    logger.info("Register face request", label=payload.label, descriptor_count=len(payload.descriptors))

    face_set = FaceService(db).register(payload.label, payload.descriptors)

    return FaceRegisterResponse(
        message="Face data stored successfully",
        label=face_set.label,
        descriptor_count=len(face_set.descriptors)
    )


@router.get("", response_model=FaceLabelsResponse)
def list_faces(db: Session = Depends(get_db)) -> FaceLabelsResponse:
    """List registered labels."""
    return FaceLabelsResponse(labels=FaceService(db).list_labels())


@router.post("/match", response_model=FaceMatchResponse)
def match_faces(
    payload: FaceMatchRequest,
    db: Session = Depends(get_db)
) -> FaceMatchResponse:
    """
    Match each probe descriptor against the gallery.

    Probes farther than the configured threshold from every label are
    reported as "unknown".
    """
    logger.info("Match faces request", probes=len(payload.descriptors))
    return FaceMatchResponse(match_results=FaceService(db).match(payload.descriptors))
