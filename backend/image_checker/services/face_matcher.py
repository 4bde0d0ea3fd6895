"""
Nearest-descriptor face matching against a labelled gallery.
"""

from typing import Dict, List, Sequence, Union

import numpy as np

from image_checker.schemas.face import FaceMatch

UNKNOWN_LABEL = "unknown"


class FaceMatcher:
    """
    Matches probe descriptors to gallery labels.

    The distance from a probe to a label is the mean Euclidean distance to
    each of that label's descriptors. The closest label wins unless its
    distance reaches ``threshold``, in which case the match is reported as
    ``unknown`` with the distance of the closest label.
    """

    def __init__(self, gallery: Dict[str, List[List[float]]], threshold: float = 0.6) -> None:
        # One (n, d) float32 matrix per label
        self.gallery: Dict[str, np.ndarray] = {
            label: np.asarray(descriptors, dtype=np.float32)
            for label, descriptors in gallery.items()
            if descriptors
        }
        self.threshold = threshold

    @staticmethod
    def mean_distance(probe: Union[Sequence[float], np.ndarray],
                      descriptors: Union[List[List[float]], np.ndarray]) -> float:
        descriptors = np.asarray(descriptors, dtype=np.float32)
        probe = np.asarray(probe, dtype=np.float32)
        return float(np.linalg.norm(descriptors - probe, axis=1).mean())

    def find_best_match(self, probe: Sequence[float]) -> FaceMatch:
        if not self.gallery:
            return FaceMatch(label=UNKNOWN_LABEL, distance=None)

        probe_vec = np.asarray(probe, dtype=np.float32)
        best_label, best_distance = min(
            ((label, self.mean_distance(probe_vec, descriptors)) for label, descriptors in self.gallery.items()),
            key=lambda pair: pair[1]
        )

        if best_distance >= self.threshold:
            return FaceMatch(label=UNKNOWN_LABEL, distance=best_distance)
        return FaceMatch(label=best_label, distance=best_distance)

    def match_all(self, probes: List[List[float]]) -> List[FaceMatch]:
        return [self.find_best_match(probe) for probe in probes]
