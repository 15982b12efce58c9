"""
Corner labelling and coordinate rescaling
"""

from typing import Sequence, Tuple

import numpy as np

from common.bounds import Bounds

from .types import Corner, CoordinateSpace, DetectedQuadrilateral


def label_corners(points: Sequence[Sequence[float]]) -> Tuple[Corner, Corner, Corner, Corner]:
    """
    Assign geometric roles to four unordered vertices.

    The smallest x + y is top-left and the largest is bottom-right. Of the
    other two, the one above the midpoint of those two corners is top-right.
    If both lie on the same side, the one with the smaller x is bottom-left.

    Only reliable for quads rotated less than about 45 degrees.

    Args:
        points: Four (x, y) pairs

    Returns:
        (top_left, top_right, bottom_left, bottom_right)
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) != 4:
        raise ValueError(f"Expected 4 points, got {len(pts)}")

    order = np.argsort(pts.sum(axis=1), kind="stable")
    tl, a, b, br = (Corner(float(p[0]), float(p[1])) for p in pts[order])

    mid_y = (tl.y + br.y) / 2.0
    a_above = a.y < mid_y
    b_above = b.y < mid_y

    if a_above and not b_above:
        tr, bl = a, b
    elif b_above and not a_above:
        tr, bl = b, a
    elif a.x <= b.x:
        bl, tr = a, b
    else:
        bl, tr = b, a

    return tl, tr, bl, br


def to_native(quad: DetectedQuadrilateral, downsample_factor: float) -> DetectedQuadrilateral:
    """Processing-resolution corners -> native video resolution"""
    scale = 1.0 / downsample_factor
    return quad.scaled(scale, scale, CoordinateSpace.NATIVE)


def to_display(
    quad: DetectedQuadrilateral,
    native_size: Tuple[int, int],
    display_size: Tuple[float, float]
) -> DetectedQuadrilateral:
    """Native video corners -> on-screen overlay coordinates (per-axis scaling)"""
    native_w, native_h = native_size
    display_w, display_h = display_size
    if native_w <= 0 or native_h <= 0:
        raise ValueError(f"Invalid native size: {native_size}")
    return quad.scaled(display_w / native_w, display_h / native_h, CoordinateSpace.DISPLAY)


def rescale(
    quad: DetectedQuadrilateral,
    downsample_factor: float,
    native_size: Tuple[int, int],
    display_size: Tuple[float, float]
) -> Tuple[DetectedQuadrilateral, DetectedQuadrilateral]:
    """
    Apply both scalings in sequence.

    Returns:
        (native-space quad, display-space quad)
    """
    native = to_native(quad, downsample_factor)
    return native, to_display(native, native_size, display_size)


def crop_hint(quad: DetectedQuadrilateral, image_size: Tuple[int, int]) -> Bounds:
    """
    Initial crop rectangle suggested by a detection.

    Args:
        quad: Detection in the image's own pixel space
        image_size: (width, height) of that image

    Returns:
        Axis-aligned bounds of the quad, clamped to the image. The whole
        image when the quad is centred outside it.
    """
    width, height = image_size
    image = Bounds(0, 0, width, height)
    bounds = Bounds.from_points(quad.corners())

    if bounds.isInside(image):
        return bounds
    if not bounds.isInside(image, checkCenterOnly=True):
        return image
    return bounds.clamp(width, height)
