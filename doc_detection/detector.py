"""
Document detector for video frames using OpenCV
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from .config import DetectorConfig
from .contours import PolygonApproximator, find_contours
from .corners import label_corners, to_display
from .edges import EdgeExtractor
from .exceptions import FrameError
from .sampler import downsample
from .scoring import CandidateScorer
from .types import Candidate, CoordinateSpace, DetectedQuadrilateral, Frame

logger = logging.getLogger(__name__)


class DocumentDetector:
    """
    Class for document detection in frames.

    Runs edge extraction, contour tracing and polygon approximation, scores
    every quadrilateral and reports the best one if it scores high enough.
    No state is carried from one call to the next.
    """

    def __init__(self, config: DetectorConfig = None):
        """
        Initialize the detector.

        Args:
            config: Pipeline parameters (defaults used when omitted)
        """
        self.config = config or DetectorConfig()
        self.extractor = EdgeExtractor(self.config)
        self.approximator = PolygonApproximator(
            min_area_ratio=self.config.min_area_ratio,
            epsilon=self.config.approx_epsilon
        )
        self.scorer = CandidateScorer(self.config)

    def analyze_frame(self, frame: Frame) -> Optional[DetectedQuadrilateral]:
        """
        Detect a document in a processing-resolution frame.

        Any failure inside the pipeline is logged and reported as no
        detection; it never propagates to the caller.

        Args:
            frame: Frame produced by the FrameSampler

        Returns:
            Detection in processing coordinates, or None
        """
        if frame is None:
            return None

        try:
            edge_map = self.extractor.extract(frame)
            return self.analyze_edge_map(edge_map)
        except Exception:
            logger.exception("Detection pass failed")
            return None

    def analyze_edge_map(self, edge_map: np.ndarray) -> Optional[DetectedQuadrilateral]:
        """
        Detect a document in an already extracted binary edge map.

        Returns:
            Detection in the edge map's coordinates, or None
        """
        best = self.scorer.best(self.find_candidates(edge_map))

        if not self.scorer.accept(best):
            if best is not None:
                logger.debug("Best candidate scored %.1f, below threshold", best.score)
            return None

        tl, tr, bl, br = label_corners(best.polygon.vertices)
        return DetectedQuadrilateral(
            top_left=tl,
            top_right=tr,
            bottom_left=bl,
            bottom_right=br,
            confidence=best.score / 100.0,
            quality=self.scorer.quality(best),
        )

    def find_candidates(self, edge_map: np.ndarray) -> List[Candidate]:
        """Score every quadrilateral found on the edge map, in discovery order"""
        frame_area = float(edge_map.shape[0] * edge_map.shape[1])
        quads = self.approximator.quadrilaterals(find_contours(edge_map), frame_area)
        return [self.scorer.score(quad, frame_area) for quad in quads]

    def analyze_image(
        self,
        image: np.ndarray,
        display_size: Optional[Tuple[float, float]] = None
    ) -> Optional[DetectedQuadrilateral]:
        """
        Detect a document in a full-resolution still image.

        The image is downsampled like a video frame, analyzed, and the result
        scaled back to the image's own pixels (or to display_size if given).

        Args:
            image: BGR/BGRA/grayscale image
            display_size: Optional (width, height) the image is shown at

        Returns:
            Detection in native (or display) coordinates, or None
        """
        if image is None or image.size == 0:
            return None

        try:
            frame = Frame(downsample(image, self.config.downsample_factor))
        except FrameError:
            logger.exception("Cannot build frame from image")
            return None

        quad = self.analyze_frame(frame)
        if quad is None:
            return None

        # downsample() rounds the target size, so scale by the actual ratio
        h, w = image.shape[:2]
        native = quad.scaled(w / frame.width, h / frame.height, CoordinateSpace.NATIVE)
        if display_size is None:
            return native
        return to_display(native, (w, h), display_size)
