"""
Pydantic schemas for check result requests, responses and statistics.
Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from image_checker.models.check_result import CheckOutcome


class CheckResultCreate(BaseModel):
    """
    Schema for submitting a check result.

    ``imageUrl`` and ``socialMediaName`` are optional here so that a missing
    value reaches the service and is reported with a specific message.
    """
    image_url: Optional[str] = Field(None, alias="imageUrl", max_length=2048)
    social_media_name: Optional[str] = Field(None, alias="socialMediaName", max_length=255)
    recognized_face: Optional[str] = Field(None, alias="recognizedFace", max_length=255)
    result: Optional[CheckOutcome] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)

    class Config:
        populate_by_name = True


class CheckResultResponse(BaseModel):
    """Schema for a stored check result."""
    id: int
    image_url: str = Field(..., alias="imageUrl")
    social_media_name: str = Field(..., alias="socialMediaName")
    recognized_face: Optional[str] = Field(None, alias="recognizedFace")
    result: Optional[str] = None  # legacy rows may hold values outside CheckOutcome
    confidence: Optional[float] = None
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    class Config:
        from_attributes = True
        populate_by_name = True


class SubmitResultResponse(BaseModel):
    """Schema for the submit endpoint response."""
    message: str
    record: CheckResultResponse


class HistoryResponse(BaseModel):
    """Schema for the history endpoint response, newest first."""
    results: List[CheckResultResponse]


class ValidityStats(BaseModel):
    """Counts of check results by outcome."""
    total: int = Field(..., alias="totalImages", ge=0)
    real: int = Field(..., alias="realImages", ge=0)
    fake: int = Field(..., alias="fakeImages", ge=0)
    unknown: int = Field(..., alias="unknownImages", ge=0)

    class Config:
        populate_by_name = True


class SocialMediaCount(BaseModel):
    """Number of check results for one source platform."""
    platform: str = Field(..., alias="_id")
    count: int = Field(..., ge=0)

    class Config:
        populate_by_name = True


class CombinedStats(BaseModel):
    """Both statistics views in one response."""
    validity: ValidityStats
    by_social_media: List[SocialMediaCount] = Field(..., alias="bySocialMedia")

    class Config:
        populate_by_name = True
