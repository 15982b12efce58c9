"""
Overlay rendering of detected documents
"""

from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from .types import DetectedQuadrilateral, QualityTier

# BGR
DEFAULT_TIER_COLORS: Dict[QualityTier, Tuple[int, int, int]] = {
    QualityTier.POOR: (0, 0, 255),
    QualityTier.GOOD: (0, 200, 255),
    QualityTier.EXCELLENT: (0, 255, 0),
}


class OverlayRenderer:
    """
    Draws a detection on top of an image.

    The outline colour follows the quality tier so the user can tell a
    shaky detection from a solid one.
    """

    def __init__(
        self,
        tier_colors: Optional[Dict[QualityTier, Tuple[int, int, int]]] = None,
        border_thickness: int = 3,
        corner_radius: int = 6,
        overlay_alpha: float = 0.2
    ):
        """
        Initialize the renderer.

        Args:
            tier_colors: Outline colour per quality tier (BGR)
            border_thickness: Outline thickness in pixels
            corner_radius: Radius of the corner dots
            overlay_alpha: Fill transparency (0.0 = none, 1.0 = opaque)
        """
        self.tier_colors = dict(DEFAULT_TIER_COLORS)
        if tier_colors:
            self.tier_colors.update(tier_colors)
        self.border_thickness = border_thickness
        self.corner_radius = corner_radius
        self.overlay_alpha = overlay_alpha

    def color_for(self, quad: DetectedQuadrilateral) -> Tuple[int, int, int]:
        return self.tier_colors[quad.quality]

    def render(
        self,
        image: np.ndarray,
        quad: Optional[DetectedQuadrilateral],
        draw_fill: bool = True,
        draw_label: bool = True
    ) -> np.ndarray:
        """
        Draw the detection on a copy of the image.

        Args:
            image: BGR image in the same coordinate space as the quad
            quad: Detection to draw; the image is returned unchanged when None
            draw_fill: Whether to draw the transparent fill
            draw_label: Whether to print tier and confidence

        Returns:
            Image with overlay
        """
        if image is None or quad is None:
            return image

        result = image.copy()
        color = self.color_for(quad)
        corners = np.round(quad.as_array()).astype(np.int32)

        if draw_fill:
            overlay = result.copy()
            cv2.fillPoly(overlay, [corners], color)
            result = cv2.addWeighted(overlay, self.overlay_alpha, result, 1 - self.overlay_alpha, 0)

        h, w = result.shape[:2]
        for i in range(4):
            p1 = tuple(int(v) for v in corners[i])
            p2 = tuple(int(v) for v in corners[(i + 1) % 4])
            visible, c1, c2 = cv2.clipLine((0, 0, w, h), p1, p2)
            if visible:
                cv2.line(result, c1, c2, color, self.border_thickness)

        for x, y in corners:
            if 0 <= x < w and 0 <= y < h:
                cv2.circle(result, (int(x), int(y)), self.corner_radius, color, -1)

        if draw_label:
            self._draw_label(result, f"{quad.quality.value} {quad.confidence * 100:.0f}%", color)

        return result

    def _draw_label(self, image: np.ndarray, text: str, color: Tuple[int, int, int]):
        # Dark outline under the coloured text
        cv2.putText(image, text, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 0, 0), 3, cv2.LINE_AA)
        cv2.putText(image, text, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.8, color, 1, cv2.LINE_AA)
