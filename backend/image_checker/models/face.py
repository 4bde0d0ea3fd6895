"""
SQLAlchemy model for labelled face descriptor sets.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON

from image_checker.db.database import Base, utc_now


class FaceDescriptorSet(Base):
    """
    Gallery entry for one registered person.

    ``descriptors`` holds a list of fixed-length float vectors produced by an
    external face model; the label is unique across the gallery.
    """

    __tablename__ = "face_descriptor_sets"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    label = Column(String(255), nullable=False, unique=True, index=True)
    descriptors = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def __repr__(self) -> str:
        return f"<FaceDescriptorSet(id={self.id}, label='{self.label}', descriptors={len(self.descriptors or [])})>"
