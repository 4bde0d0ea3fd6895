"""
Service layer for the face descriptor gallery.
Handles registration of labelled descriptor sets and matching of probes.
"""

import math
from typing import List
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from image_checker.config import get_settings
from image_checker.exceptions import CheckValidationError, StorageError
from image_checker.models.face import FaceDescriptorSet
from image_checker.schemas.face import FaceMatch
from image_checker.services.face_matcher import FaceMatcher, UNKNOWN_LABEL
from image_checker.utils.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()


class FaceLabelExistsError(Exception):
    """Raised when a descriptor set is registered under a label already in use."""
    pass


class FaceService:
    """
    Service class for the face gallery.

    Descriptors are extracted by an external face model; this service only
    validates, stores and compares them.
    """

    def __init__(self, db: Session) -> None:
        """
        Initialize the face service.

        Args:
            db: Database session for operations
        """
        self.db: Session = db
        self.descriptor_length: int = settings.face_descriptor_length
        self.threshold: float = settings.face_match_threshold

    def validate_descriptors(self, descriptors: List[List[float]]) -> None:
        """
        Check that every descriptor is a finite vector of the configured length.

        Raises:
            CheckValidationError: If the list is empty or a descriptor is malformed
        """
        if not descriptors:
            raise CheckValidationError("At least one face descriptor is required")

        for index, descriptor in enumerate(descriptors):
            if len(descriptor) != self.descriptor_length:
                raise CheckValidationError(
                    f"Descriptor {index} has {len(descriptor)} values, expected {self.descriptor_length}"
                )
            if not all(math.isfinite(value) for value in descriptor):
                raise CheckValidationError(f"Descriptor {index} contains non-finite values")

    def register(self, label: str, descriptors: List[List[float]]) -> FaceDescriptorSet:
        """
        Store a labelled descriptor set.

        Args:
            label: Unique name of the registered person
            descriptors: Face descriptors for that person

        Returns:
            Created FaceDescriptorSet

        Raises:
            CheckValidationError: If the label or descriptors are invalid
            FaceLabelExistsError: If the label is already registered
            StorageError: If the database rejects the write
        """
        label = (label or "").strip()
        if not label:
            raise CheckValidationError("Label not provided")
        self.validate_descriptors(descriptors)

        face_set = FaceDescriptorSet(
            label=label,
            descriptors=[[float(value) for value in descriptor] for descriptor in descriptors]
        )

        try:
            self.db.add(face_set)
            self.db.commit()
            self.db.refresh(face_set)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Face label already registered", label=label)
            raise FaceLabelExistsError(f"Label '{label}' is already registered") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to store face descriptors", label=label, error=str(e))
            raise StorageError(f"Failed to store face descriptors: {e}") from e

        logger.info("Face descriptors stored",
                   label=label,
                   descriptor_count=len(descriptors))
        return face_set

    def list_labels(self) -> List[str]:
        """Return every registered label in alphabetical order."""
        try:
            rows = self.db.query(FaceDescriptorSet.label).order_by(FaceDescriptorSet.label.asc()).all()
        except SQLAlchemyError as e:
            logger.error("Failed to list face labels", error=str(e))
            raise StorageError(f"Failed to list face labels: {e}") from e
        return [label for (label,) in rows]

    def load_matcher(self) -> FaceMatcher:
        """
        Build a matcher over the whole gallery.

        Sets stored under a different descriptor length than the one now
        configured cannot be compared with probes and are left out.
        """
        try:
            face_sets = self.db.query(FaceDescriptorSet).all()
        except SQLAlchemyError as e:
            logger.error("Failed to load face gallery", error=str(e))
            raise StorageError(f"Failed to load face gallery: {e}") from e

        gallery = {}
        for face_set in face_sets:
            descriptors = face_set.descriptors or []
            if any(len(descriptor) != self.descriptor_length for descriptor in descriptors):
                logger.warning("Skipping face set with mismatched descriptor length",
                              label=face_set.label,
                              expected=self.descriptor_length)
                continue
            gallery[face_set.label] = descriptors

        return FaceMatcher(gallery, threshold=self.threshold)

    def match(self, probes: List[List[float]]) -> List[FaceMatch]:
        """
        Find the best gallery label for each probe descriptor.

        Raises:
            CheckValidationError: If a probe is malformed
            StorageError: If the gallery cannot be read
        """
        self.validate_descriptors(probes)
        matcher = self.load_matcher()
        results = matcher.match_all(probes)

        logger.info("Matched face descriptors",
                   probes=len(probes),
                   gallery_size=len(matcher.gallery),
                   matched=sum(1 for r in results if r.label != UNKNOWN_LABEL))
        return results
