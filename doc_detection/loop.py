"""
Cancelable detection loop running one pass per cadence tick

A pass samples the video source, analyzes the frame and publishes the
result into a DetectionCell. The next pass is scheduled only after the
current one finished, so passes never overlap.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Tuple

from .config import DetectorConfig
from .corners import rescale, to_native
from .detector import DocumentDetector
from .sampler import FrameSampler, VideoSource
from .types import DetectedQuadrilateral

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Optional[DetectedQuadrilateral]], None]


class Cancellable(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> Cancellable:
        ...


class ThreadingScheduler:
    """Runs each callback on a daemon threading.Timer"""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay_s, callback)
        timer.daemon = True
        timer.start()
        return timer


class DetectionCell:
    """
    Latest detection, written by the loop and read by any number of consumers.

    Replacing the value is a single reference assignment.
    """

    def __init__(self):
        self._value: Optional[DetectedQuadrilateral] = None

    def get(self) -> Optional[DetectedQuadrilateral]:
        return self._value

    def set(self, value: Optional[DetectedQuadrilateral]) -> None:
        self._value = value

    def clear(self) -> None:
        self._value = None


@dataclass(frozen=True)
class StepResult:
    detection: Optional[DetectedQuadrilateral]
    delay_s: float
    sampled: bool


def detection_step(
    source: VideoSource,
    sampler: FrameSampler,
    detector: DocumentDetector,
    config: DetectorConfig,
    display_size: Optional[Tuple[float, float]] = None
) -> StepResult:
    """
    One pass of the loop, without any scheduling.

    Returns:
        StepResult with the detection in native coordinates (display
        coordinates when display_size is given), the delay before the next
        pass, and whether a frame was sampled at all
    """
    frame = sampler.sample(source)
    if frame is None:
        return StepResult(detection=None, delay_s=config.cadence_s, sampled=False)

    detection = detector.analyze_frame(frame)
    if detection is not None:
        if display_size is not None:
            _, detection = rescale(detection, config.downsample_factor, sampler.last_native_size, display_size)
        else:
            detection = to_native(detection, config.downsample_factor)

    return StepResult(detection=detection, delay_s=config.cadence_s, sampled=True)


class LoopHandle:
    """Identifies one started loop; cancelling it turns its pending callback into a no-op"""

    def __init__(
        self,
        source: VideoSource,
        config: DetectorConfig,
        detector: DocumentDetector,
        display_size: Optional[Tuple[float, float]] = None
    ):
        self.source = source
        self.config = config
        self.detector = detector
        self.sampler = FrameSampler(config.downsample_factor)
        self.display_size = display_size
        self.passes = 0
        self._cancelled = threading.Event()
        self._pending: Optional[Cancellable] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()
        pending, self._pending = self._pending, None
        if pending is not None:
            pending.cancel()


class DetectionLoop:
    """
    Drives detection passes at the configured cadence.

    Args:
        detector: Detector to use; rebuilt from the config passed to start()
            when omitted
        scheduler: Timer primitive, ThreadingScheduler by default
        cell: Where the latest detection is published
        on_result: Called with the detection (or None) after every sampled pass
    """

    def __init__(
        self,
        detector: Optional[DocumentDetector] = None,
        scheduler: Optional[Scheduler] = None,
        cell: Optional[DetectionCell] = None,
        on_result: Optional[ResultCallback] = None
    ):
        self.detector = detector
        self.scheduler = scheduler or ThreadingScheduler()
        self.cell = cell or DetectionCell()
        self.on_result = on_result
        self._handle: Optional[LoopHandle] = None
        self._lock = threading.RLock()

    @property
    def running(self) -> bool:
        handle = self._handle
        return handle is not None and not handle.cancelled

    @property
    def handle(self) -> Optional[LoopHandle]:
        return self._handle

    def start(
        self,
        source: VideoSource,
        config: Optional[DetectorConfig] = None,
        display_size: Optional[Tuple[float, float]] = None
    ) -> LoopHandle:
        """
        Start (or restart) the loop on a video source.

        A loop that is already running is cancelled first. With
        config.enabled False the returned handle is already cancelled and
        nothing is scheduled.
        """
        config = config or DetectorConfig()

        with self._lock:
            self._stop_locked()

            detector = self.detector or DocumentDetector(config)
            handle = LoopHandle(source, config, detector, display_size)
            self._handle = handle

            if not config.enabled:
                logger.info("Detection disabled, loop not started")
                handle.cancel()
                return handle

            logger.info("Starting detection loop (cadence %d ms, factor %.2f)",
                        config.cadence_ms, config.downsample_factor)
            self._schedule(handle, 0.0)
            return handle

    def stop(self) -> None:
        with self._lock:
            self._stop_locked()

    def _stop_locked(self) -> None:
        if self._handle is not None and not self._handle.cancelled:
            logger.info("Stopping detection loop after %d passes", self._handle.passes)
            self._handle.cancel()
        self.cell.clear()

    def _schedule(self, handle: LoopHandle, delay_s: float) -> None:
        handle._pending = self.scheduler.call_later(delay_s, lambda: self._tick(handle))

    def _tick(self, handle: LoopHandle) -> None:
        if handle.cancelled or handle is not self._handle:
            return

        try:
            result = detection_step(
                handle.source, handle.sampler, handle.detector, handle.config, handle.display_size
            )
        except Exception:
            # A broken pass must not end the loop
            logger.exception("Detection step failed")
            result = StepResult(detection=None, delay_s=handle.config.cadence_s, sampled=False)

        with self._lock:
            if handle.cancelled or handle is not self._handle:
                return

            if result.sampled:
                handle.passes += 1
                self.cell.set(result.detection)

            self._schedule(handle, result.delay_s)

            if result.sampled and self.on_result is not None:
                self.on_result(result.detection)
