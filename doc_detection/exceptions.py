"""
Exceptions raised by the document detection package
"""


class DetectionError(Exception):
    """Base class for all detection errors"""


class ConfigError(DetectionError):
    """Raised when a DetectorConfig holds values the pipeline cannot use"""


class FrameError(DetectionError):
    """Raised when a pixel buffer cannot be turned into a Frame"""
