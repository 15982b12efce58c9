"""
Value types passed between the stages of a detection pass
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, NamedTuple, Tuple

import cv2
import numpy as np

from .exceptions import FrameError


class QualityTier(Enum):
    """Quality bucket derived from the composite detection score"""
    POOR = "poor"
    GOOD = "good"
    EXCELLENT = "excellent"


class CoordinateSpace(Enum):
    """Coordinate space the corners of a detection are expressed in"""
    PROCESSING = "processing"
    NATIVE = "native"
    DISPLAY = "display"


def to_uint8(pixels: np.ndarray) -> np.ndarray:
    """
    Copy of pixels as 8-bit values.

    16-bit images keep their high byte. Float images in [0, 1] are scaled to
    [0, 255]; other float ranges are taken as 8-bit intensities and saturated.
    """
    if pixels.dtype == np.uint8:
        return pixels.copy()
    if pixels.dtype == np.uint16:
        return (pixels >> 8).astype(np.uint8)
    if np.issubdtype(pixels.dtype, np.floating):
        values = pixels.astype(np.float32)
        if not np.isfinite(values).all():
            raise FrameError("Pixel array contains NaN or infinite values")
        alpha = 255.0 if values.max() <= 1.0 else 1.0
        return cv2.convertScaleAbs(values, alpha=alpha).reshape(pixels.shape)
    raise FrameError(f"Unsupported pixel type: {pixels.dtype}")


@dataclass(frozen=True, eq=False)
class Frame:
    """
    Immutable pixel grid sampled from a video source.

    The pixel array is copied and marked read-only, so nothing downstream
    can modify the buffer a pass is working on.
    """
    pixels: np.ndarray
    timestamp: float = field(default_factory=time.monotonic)

    def __post_init__(self):
        pixels = np.asarray(self.pixels)
        if pixels.ndim not in (2, 3) or pixels.size == 0:
            raise FrameError(f"Expected a 2D or 3D pixel array, got shape {pixels.shape}")
        if pixels.ndim == 3 and pixels.shape[2] not in (1, 3, 4):
            raise FrameError(f"Unsupported channel count: {pixels.shape[2]}")

        pixels = to_uint8(pixels)
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    @property
    def area(self) -> int:
        return self.width * self.height


class Contour:
    """
    Closed boundary traced on an edge map, in processing-resolution pixels.
    """

    def __init__(self, points: np.ndarray):
        self.points = np.asarray(points, dtype=np.int32).reshape(-1, 2)
        self._area = None
        self._perimeter = None

    def __len__(self) -> int:
        return len(self.points)

    @property
    def enclosed_area(self) -> float:
        if self._area is None:
            self._area = float(cv2.contourArea(self.points.reshape(-1, 1, 2)))
        return self._area

    @property
    def perimeter_length(self) -> float:
        if self._perimeter is None:
            self._perimeter = float(cv2.arcLength(self.points.reshape(-1, 1, 2), True))
        return self._perimeter


@dataclass(frozen=True, eq=False)
class Polygon:
    """Contour reduced to its minimal vertices; keeps the source contour's area"""
    vertices: np.ndarray
    source_area: float

    @property
    def vertex_count(self) -> int:
        return int(len(self.vertices))

    @property
    def is_quadrilateral(self) -> bool:
        return self.vertex_count == 4


@dataclass(frozen=True, eq=False)
class Candidate:
    """4-vertex polygon together with its composite score (0-100)"""
    polygon: Polygon
    score: float
    size_score: float = 0.0
    aspect_score: float = 0.0
    rectangularity_score: float = 0.0
    convexity_score: float = 0.0


class Corner(NamedTuple):
    x: float
    y: float

    def scaled(self, sx: float, sy: float) -> "Corner":
        return Corner(self.x * sx, self.y * sy)


@dataclass(frozen=True)
class DetectedQuadrilateral:
    """
    Final result of a successful detection pass.

    Corners carry geometric roles; confidence is the accepted score / 100.
    """
    top_left: Corner
    top_right: Corner
    bottom_left: Corner
    bottom_right: Corner
    confidence: float
    quality: QualityTier
    space: CoordinateSpace = CoordinateSpace.PROCESSING

    def corners(self) -> Tuple[Corner, Corner, Corner, Corner]:
        """Corners in drawing order: top-left, top-right, bottom-right, bottom-left"""
        return (self.top_left, self.top_right, self.bottom_right, self.bottom_left)

    def as_array(self) -> np.ndarray:
        return np.array(self.corners(), dtype=np.float32)

    def scaled(self, sx: float, sy: float, space: CoordinateSpace) -> "DetectedQuadrilateral":
        return DetectedQuadrilateral(
            top_left=self.top_left.scaled(sx, sy),
            top_right=self.top_right.scaled(sx, sy),
            bottom_left=self.bottom_left.scaled(sx, sy),
            bottom_right=self.bottom_right.scaled(sx, sy),
            confidence=self.confidence,
            quality=self.quality,
            space=space,
        )

    def to_dict(self) -> Dict:
        def point(c: Corner) -> Dict[str, float]:
            return {"x": float(c.x), "y": float(c.y)}

        return {
            "topLeft": point(self.top_left),
            "topRight": point(self.top_right),
            "bottomLeft": point(self.bottom_left),
            "bottomRight": point(self.bottom_right),
            "confidence": round(float(self.confidence), 4),
            "qualityTier": self.quality.value,
            "space": self.space.value,
        }
