"""
Pydantic schemas for image hosting and reverse image search.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ReverseSearchRequest(BaseModel):
    """Schema for a reverse image search request."""
    image_src: Optional[str] = Field(None, alias="imageSrc", max_length=2048)

    class Config:
        populate_by_name = True


class UploadedImage(BaseModel):
    """Schema for an image stored on the image host."""
    url: str
    public_id: Optional[str] = Field(None, alias="publicId")

    class Config:
        populate_by_name = True
