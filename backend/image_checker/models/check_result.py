"""
SQLAlchemy model for image check results.
"""

import enum
from sqlalchemy import Column, Integer, String, DateTime, Float

from image_checker.db.database import Base, utc_now


class CheckOutcome(str, enum.Enum):
    """Classification assigned to an image by the verification step."""
    REAL = "REAL"
    FAKE = "FAKE"
    UNKNOWN = "UNKNOWN"


class CheckResult(Base):
    """
    Database model for one image verification attempt.

    Rows are append-only. ``result`` is a plain string column so that rows
    written before the outcome set was enforced can still be read; only
    REAL, FAKE and UNKNOWN are accepted on new writes.
    """

    __tablename__ = "image_check_results"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    image_url = Column(String(2048), nullable=False)
    social_media_name = Column(String(255), nullable=False, index=True)
    recognized_face = Column(String(255), nullable=True)
    result = Column(String(20), nullable=True, index=True)
    confidence = Column(Float, nullable=True)  # 0.0 to 1.0
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    def __repr__(self) -> str:
        return f"<CheckResult(id={self.id}, social_media_name='{self.social_media_name}', result='{self.result}')>"
