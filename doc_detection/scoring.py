"""
Candidate scoring, best-of selection and quality tiers
"""

from typing import Iterable, Optional, Tuple

import cv2
import numpy as np

from .config import DetectorConfig
from .types import Candidate, Polygon, QualityTier


def extents(vertices: np.ndarray) -> Tuple[float, float]:
    """Width and height of the axis-aligned bounding box of the vertices"""
    pts = np.asarray(vertices, dtype=np.float64).reshape(-1, 2)
    width, height = np.ptp(pts, axis=0)
    return float(width), float(height)


def rectangularity(polygon: Polygon) -> float:
    """Enclosed area / bounding box area, 1.0 for an axis-aligned rectangle"""
    width, height = extents(polygon.vertices)
    box_area = width * height
    if box_area <= 0:
        return 0.0
    return min(polygon.source_area / box_area, 1.0)


def convexity(polygon: Polygon) -> float:
    """Enclosed area / convex hull area, lower for concave or twisted quads"""
    pts = np.asarray(polygon.vertices, dtype=np.float32).reshape(-1, 1, 2)
    hull_area = float(cv2.contourArea(cv2.convexHull(pts)))
    if hull_area <= 0:
        return 0.0
    return min(polygon.source_area / hull_area, 1.0)


def classify_quality(score: float, config: DetectorConfig = None) -> QualityTier:
    """
    Map an accepted score to its quality tier.

    Boundaries are exclusive: 80 is "good", anything above is "excellent".
    """
    config = config or DetectorConfig()
    if score > config.excellent_threshold:
        return QualityTier.EXCELLENT
    if score > config.good_threshold:
        return QualityTier.GOOD
    return QualityTier.POOR


class AcceptancePolicy:
    """
    Decides whether the best candidate of a pass becomes a detection.

    Kept apart from the geometry so that cross-frame smoothing can replace
    it without changing the scorer.
    """

    def __init__(self, config: DetectorConfig = None):
        self.config = config or DetectorConfig()

    def accept(self, candidate: Optional[Candidate]) -> bool:
        return candidate is not None and candidate.score > self.config.acceptance_threshold

    def quality(self, candidate: Candidate) -> QualityTier:
        return classify_quality(candidate.score, self.config)


class CandidateScorer:
    """
    Scores quadrilaterals on size, aspect ratio, rectangularity and convexity.

    The four sub-scores are summed; with the default weights a clean,
    mid-sized, axis-aligned rectangle scores 100.
    """

    def __init__(self, config: DetectorConfig = None):
        self.config = config or DetectorConfig()
        self.policy = AcceptancePolicy(self.config)

    def size_score(self, area_ratio: float) -> float:
        low, high = self.config.size_band
        return self.config.size_weight if low <= area_ratio <= high else 0.0

    def aspect_score(self, width: float, height: float) -> float:
        if height <= 0:
            return 0.0
        low, high = self.config.aspect_band
        return self.config.aspect_weight if low <= width / height <= high else 0.0

    def score(self, polygon: Polygon, frame_area: float) -> Candidate:
        area_ratio = polygon.source_area / frame_area if frame_area > 0 else 0.0
        width, height = extents(polygon.vertices)

        size = self.size_score(area_ratio)
        aspect = self.aspect_score(width, height)
        rect = rectangularity(polygon) * self.config.rectangularity_weight
        convex = convexity(polygon) * self.config.convexity_weight

        return Candidate(
            polygon=polygon,
            score=size + aspect + rect + convex,
            size_score=size,
            aspect_score=aspect,
            rectangularity_score=rect,
            convexity_score=convex,
        )

    def best(self, candidates: Iterable[Candidate]) -> Optional[Candidate]:
        """Highest scoring candidate; the earlier one wins a tie"""
        best = None
        for candidate in candidates:
            if best is None or candidate.score > best.score:
                best = candidate
        return best

    def accept(self, candidate: Optional[Candidate]) -> bool:
        return self.policy.accept(candidate)

    def quality(self, candidate: Candidate) -> QualityTier:
        return self.policy.quality(candidate)
