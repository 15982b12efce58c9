"""
Contour tracing and polygon approximation
"""

import logging
from typing import Iterable, Iterator, Optional

import cv2
import numpy as np

from .types import Contour, Polygon

logger = logging.getLogger(__name__)


def find_contours(edge_map: np.ndarray) -> Iterator[Contour]:
    """
    Yield the outermost closed boundaries of an edge map in discovery order.

    Nested boundaries are not followed; only a document's outer silhouette
    matters. A blank edge map yields nothing.
    """
    binary = edge_map
    if binary.dtype != np.uint8:
        binary = binary.astype(np.uint8)

    contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    for contour in contours:
        yield Contour(contour)


class PolygonApproximator:
    """
    Reduces contours to minimal polygons and keeps the quadrilaterals.

    Args:
        min_area_ratio: Contours enclosing less than this share of the frame
            are rejected before approximation
        epsilon: Approximation tolerance as a ratio of the contour perimeter
    """

    def __init__(self, min_area_ratio: float = 0.05, epsilon: float = 0.02):
        self.min_area_ratio = min_area_ratio
        self.epsilon = epsilon

    def approximate(self, contour: Contour, frame_area: float) -> Optional[Polygon]:
        """
        Approximate one contour (Douglas-Peucker).

        Returns:
            Polygon of any vertex count, or None if the contour is too small
        """
        if contour.enclosed_area < self.min_area_ratio * frame_area:
            return None

        approx = cv2.approxPolyDP(
            contour.points.reshape(-1, 1, 2),
            self.epsilon * contour.perimeter_length,
            True
        )
        return Polygon(vertices=approx.reshape(-1, 2), source_area=contour.enclosed_area)

    def quadrilaterals(self, contours: Iterable[Contour], frame_area: float) -> Iterator[Polygon]:
        """Yield only the approximations with exactly four vertices"""
        for contour in contours:
            polygon = self.approximate(contour, frame_area)
            if polygon is None:
                continue
            if not polygon.is_quadrilateral:
                logger.debug("Discarding %d-vertex polygon", polygon.vertex_count)
                continue
            yield polygon
