"""
Edge extraction: grayscale -> blur -> edges -> closing
"""

import cv2
import numpy as np

from .config import DetectorConfig
from .types import Frame


def to_grayscale(pixels: np.ndarray) -> np.ndarray:
    """Convert BGR/BGRA/gray pixels to a single luma channel"""
    if pixels.ndim == 2:
        return pixels
    channels = pixels.shape[2]
    if channels == 1:
        return pixels[:, :, 0]
    if channels == 4:
        return cv2.cvtColor(pixels, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(pixels, cv2.COLOR_BGR2GRAY)


def blur(gray: np.ndarray, ksize: int = 5) -> np.ndarray:
    return cv2.GaussianBlur(gray, (ksize, ksize), 0)


def detect_edges(blurred: np.ndarray, config: DetectorConfig) -> np.ndarray:
    """
    Binary edge map from a blurred grayscale image.

    With the "adaptive" strategy the image is first binarised by a local
    threshold, which evens out shadows before Canny links the edges.
    """
    source = blurred
    if config.edge_strategy == "adaptive":
        source = cv2.adaptiveThreshold(
            blurred,
            255,
            cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
            cv2.THRESH_BINARY,
            config.adaptive_block_size,
            config.adaptive_c
        )
    return cv2.Canny(source, config.canny_low, config.canny_high)


def close_gaps(edges: np.ndarray, ksize: int = 3) -> np.ndarray:
    """Morphological closing so broken document borders form closed loops"""
    kernel = np.ones((ksize, ksize), np.uint8)
    return cv2.morphologyEx(edges, cv2.MORPH_CLOSE, kernel)


class EdgeExtractor:
    """
    Produces the binary edge map for a frame.

    Every step is a pure transform; the extractor holds only its config.
    """

    def __init__(self, config: DetectorConfig = None):
        self.config = config or DetectorConfig()

    def extract(self, frame: Frame) -> np.ndarray:
        gray = to_grayscale(frame.pixels)
        blurred = blur(gray, self.config.blur_kernel)
        edges = detect_edges(blurred, self.config)
        return close_gaps(edges, self.config.close_kernel)
