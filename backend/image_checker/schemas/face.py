"""
Pydantic schemas for the face descriptor gallery.
"""

from typing import Optional, List

from pydantic import BaseModel, Field


class FaceRegisterRequest(BaseModel):
    """Schema for registering a labelled set of face descriptors."""
    label: str = Field(..., min_length=1, max_length=255)
    descriptors: List[List[float]] = Field(..., min_length=1)


class FaceRegisterResponse(BaseModel):
    """Schema for the face registration response."""
    message: str
    label: str
    descriptor_count: int = Field(..., alias="descriptorCount")

    class Config:
        populate_by_name = True


class FaceLabelsResponse(BaseModel):
    """Schema for listing registered labels."""
    labels: List[str]


class FaceMatchRequest(BaseModel):
    """Schema for matching probe descriptors against the gallery."""
    descriptors: List[List[float]] = Field(..., min_length=1)


class FaceMatch(BaseModel):
    """Best gallery match for one probe descriptor."""
    label: str
    distance: Optional[float] = None  # None when the gallery is empty


class FaceMatchResponse(BaseModel):
    """Schema for the face matching response."""
    match_results: List[FaceMatch] = Field(..., alias="matchResults")

    class Config:
        populate_by_name = True
