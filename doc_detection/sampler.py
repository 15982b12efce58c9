"""
Frame sampling from live video sources
"""

import logging
from typing import Iterable, Optional, Protocol, Tuple

import cv2
import numpy as np

from .types import Frame

logger = logging.getLogger(__name__)


class VideoSource(Protocol):
    """What the pipeline needs from a video source"""

    def is_ready(self) -> bool:
        ...

    @property
    def native_size(self) -> Tuple[int, int]:
        """(width, height) of frames returned by read()"""
        ...

    def read(self) -> Optional[np.ndarray]:
        ...


class CaptureVideoSource:
    """
    Video source backed by cv2.VideoCapture (webcam index or stream URL).
    """

    def __init__(self, device=0):
        self.device = device
        self.capture = cv2.VideoCapture(device)
        self._frame_size: Tuple[int, int] = (0, 0)

    def is_ready(self) -> bool:
        return bool(self.capture.isOpened())

    @property
    def native_size(self) -> Tuple[int, int]:
        width = int(self.capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(self.capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        if width <= 0 or height <= 0:
            return self._frame_size
        return width, height

    def read(self) -> Optional[np.ndarray]:
        ret, frame = self.capture.read()
        if not ret:
            return None
        h, w = frame.shape[:2]
        self._frame_size = (w, h)
        return frame

    def release(self):
        self.capture.release()


class ArrayVideoSource:
    """
    Replays in-memory images as a video source.

    The last image keeps being returned once the sequence is exhausted,
    like a paused video.
    """

    def __init__(self, frames: Iterable[np.ndarray]):
        self._frames = list(frames)
        self._index = 0

    def is_ready(self) -> bool:
        return len(self._frames) > 0

    @property
    def native_size(self) -> Tuple[int, int]:
        if not self._frames:
            return 0, 0
        h, w = self._frames[0].shape[:2]
        return w, h

    def read(self) -> Optional[np.ndarray]:
        if not self._frames:
            return None
        frame = self._frames[min(self._index, len(self._frames) - 1)]
        self._index += 1
        return frame


class LatestFrameSource:
    """
    Source fed by the host, which owns the camera and pushes each frame it shows.
    """

    def __init__(self):
        self._frame: Optional[np.ndarray] = None

    def push(self, frame: np.ndarray) -> None:
        self._frame = frame

    def is_ready(self) -> bool:
        return self._frame is not None

    @property
    def native_size(self) -> Tuple[int, int]:
        frame = self._frame
        if frame is None:
            return 0, 0
        h, w = frame.shape[:2]
        return w, h

    def read(self) -> Optional[np.ndarray]:
        return self._frame


def downsample(pixels: np.ndarray, factor: float) -> np.ndarray:
    """Resize an image by factor, keeping at least one pixel per axis"""
    if factor == 1.0:
        return pixels
    h, w = pixels.shape[:2]
    size = (max(1, int(round(w * factor))), max(1, int(round(h * factor))))
    return cv2.resize(pixels, size, interpolation=cv2.INTER_AREA)


class FrameSampler:
    """
    Turns the current image of a video source into a processing-resolution Frame.
    """

    def __init__(self, downsample_factor: float = 0.5):
        self.downsample_factor = downsample_factor
        self.last_native_size: Tuple[int, int] = (0, 0)

    def sample(self, source: VideoSource) -> Optional[Frame]:
        """
        Sample one frame.

        Returns:
            Downsampled Frame, or None when the source has nothing to offer yet
        """
        if not source.is_ready():
            logger.debug("Video source not ready, skipping pass")
            return None

        pixels = source.read()
        if pixels is None or pixels.size == 0:
            logger.debug("No frame decoded yet, skipping pass")
            return None

        # sized from the decoded image, some capture backends report 0x0
        height, width = pixels.shape[:2]
        self.last_native_size = (width, height)
        return Frame(downsample(pixels, self.downsample_factor))
