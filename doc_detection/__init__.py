"""
Document Detection Module

Finds the quadrilateral outline of a document in live video frames using
OpenCV, scores it and reports labelled corners with a quality tier.
"""

from .config import DetectorConfig
from .corners import crop_hint, label_corners, rescale, to_display, to_native
from .detector import DocumentDetector
from .exceptions import ConfigError, DetectionError, FrameError
from .loop import DetectionCell, DetectionLoop, LoopHandle, detection_step
from .sampler import ArrayVideoSource, CaptureVideoSource, FrameSampler, LatestFrameSource
from .types import CoordinateSpace, Corner, DetectedQuadrilateral, Frame, QualityTier
from .visualizer import OverlayRenderer

__all__ = [
    'ArrayVideoSource',
    'CaptureVideoSource',
    'ConfigError',
    'CoordinateSpace',
    'Corner',
    'DetectedQuadrilateral',
    'DetectionCell',
    'DetectionError',
    'DetectionLoop',
    'DetectorConfig',
    'DocumentDetector',
    'Frame',
    'FrameError',
    'FrameSampler',
    'LatestFrameSource',
    'LoopHandle',
    'OverlayRenderer',
    'QualityTier',
    'crop_hint',
    'detection_step',
    'label_corners',
    'rescale',
    'to_display',
    'to_native',
]
