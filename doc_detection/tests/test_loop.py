"""
Tests for the detection loop
"""

import time

import numpy as np
import pytest

from doc_detection import (
    ArrayVideoSource,
    CoordinateSpace,
    DetectionCell,
    DetectionLoop,
    DetectorConfig,
    DocumentDetector,
    FrameSampler,
    detection_step,
)

from conftest import document_image


class BrokenSource(ArrayVideoSource):
    """Source whose reads fail a given number of times"""

    def __init__(self, frames, failures=1):
        super().__init__(frames)
        self.failures = failures

    def read(self):
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("camera glitch")
        return super().read()


class UnsizedArraySource(ArrayVideoSource):
    """Replays frames without reporting their size"""

    @property
    def native_size(self):
        return 0, 0


def assert_near(corner, expected, tolerance=5):
    assert corner.x == pytest.approx(expected[0], abs=tolerance)
    assert corner.y == pytest.approx(expected[1], abs=tolerance)


class TestDetectionStep:

    @pytest.fixture
    def config(self):
        return DetectorConfig()

    def test_native_coordinates(self, config):
        source = ArrayVideoSource([document_image()])
        result = detection_step(source, FrameSampler(0.5), DocumentDetector(config), config)

        assert result.sampled
        assert result.delay_s == pytest.approx(0.1)
        assert result.detection.space == CoordinateSpace.NATIVE
        assert_near(result.detection.top_left, (160, 120))
        assert_near(result.detection.bottom_right, (640, 480))

    def test_display_coordinates(self, config):
        source = ArrayVideoSource([document_image()])
        result = detection_step(source, FrameSampler(0.5), DocumentDetector(config), config,
                                display_size=(400, 300))

        assert result.detection.space == CoordinateSpace.DISPLAY
        assert_near(result.detection.top_left, (80, 60), tolerance=3)
        assert_near(result.detection.bottom_right, (320, 240), tolerance=3)

    def test_display_coordinates_without_reported_size(self, config):
        source = UnsizedArraySource([document_image()])
        result = detection_step(source, FrameSampler(0.5), DocumentDetector(config), config,
                                display_size=(400, 300))

        assert result.detection.space == CoordinateSpace.DISPLAY
        assert_near(result.detection.top_left, (80, 60), tolerance=3)
        assert_near(result.detection.bottom_right, (320, 240), tolerance=3)

    def test_source_not_ready(self, config):
        result = detection_step(ArrayVideoSource([]), FrameSampler(), DocumentDetector(config), config)
        assert not result.sampled
        assert result.detection is None
        assert result.delay_s == pytest.approx(0.1)

    def test_nothing_visible(self, config):
        source = ArrayVideoSource([np.full((600, 800, 3), 40, dtype=np.uint8)])
        result = detection_step(source, FrameSampler(), DocumentDetector(config), config)
        assert result.sampled
        assert result.detection is None


class TestDetectionCell:

    def test_set_get_clear(self):
        cell = DetectionCell()
        assert cell.get() is None
        cell.set("value")
        assert cell.get() == "value"
        cell.clear()
        assert cell.get() is None


class TestDetectionLoop:

    @pytest.fixture
    def source(self):
        return ArrayVideoSource([document_image()])

    def test_first_pass_runs_immediately(self, scheduler, source):
        loop = DetectionLoop(scheduler=scheduler)
        loop.start(source)

        assert loop.running
        assert len(scheduler.pending) == 1
        assert scheduler.pending[0].delay_s == 0.0

    def test_pass_publishes_and_reschedules(self, scheduler, source):
        results = []
        loop = DetectionLoop(scheduler=scheduler, on_result=results.append)
        handle = loop.start(source, DetectorConfig(cadence_ms=250))

        scheduler.run_next()

        assert loop.cell.get() is not None
        assert results == [loop.cell.get()]
        assert handle.passes == 1
        assert len(scheduler.pending) == 1
        assert scheduler.pending[0].delay_s == pytest.approx(0.25)

    def test_passes_never_overlap(self, scheduler, source):
        """Exactly one callback is pending at any time"""
        loop = DetectionLoop(scheduler=scheduler)
        handle = loop.start(source)

        for _ in range(5):
            assert len(scheduler.pending) == 1
            scheduler.run_next()

        assert handle.passes == 5

    def test_no_detection_replaces_previous(self, scheduler):
        blank = np.full((600, 800, 3), 40, dtype=np.uint8)
        source = ArrayVideoSource([document_image(), blank])
        results = []
        loop = DetectionLoop(scheduler=scheduler, on_result=results.append)
        loop.start(source)

        scheduler.run_next()
        assert loop.cell.get() is not None
        scheduler.run_next()
        assert loop.cell.get() is None
        assert results[1] is None

    def test_not_ready_source_keeps_polling(self, scheduler):
        results = []
        loop = DetectionLoop(scheduler=scheduler, on_result=results.append)
        handle = loop.start(ArrayVideoSource([]))

        scheduler.run_next()
        scheduler.run_next()

        assert handle.passes == 0
        assert results == []
        assert len(scheduler.pending) == 1

    def test_stop_cancels_pending(self, scheduler, source):
        loop = DetectionLoop(scheduler=scheduler)
        handle = loop.start(source)
        scheduler.run_next()

        loop.stop()

        assert not loop.running
        assert handle.cancelled
        assert scheduler.pending == []
        assert loop.cell.get() is None

    def test_dangling_callback_is_noop(self, scheduler, source):
        """A callback that fires after stop() changes nothing"""
        results = []
        loop = DetectionLoop(scheduler=scheduler, on_result=results.append)
        loop.start(source)
        stale = scheduler.tasks[0]

        loop.stop()
        stale.fire()

        assert results == []
        assert loop.cell.get() is None
        assert scheduler.pending == []

    def test_restart_replaces_loop(self, scheduler, source):
        loop = DetectionLoop(scheduler=scheduler)
        first = loop.start(source)
        stale = scheduler.tasks[0]

        second = loop.start(source, DetectorConfig(cadence_ms=500))

        assert first.cancelled
        assert not second.cancelled
        assert loop.handle is second

        stale.fire()
        assert first.passes == 0
        assert len(scheduler.pending) == 1

        scheduler.run_next()
        assert second.passes == 1
        assert scheduler.pending[0].delay_s == pytest.approx(0.5)

    def test_disabled_config_schedules_nothing(self, scheduler, source):
        loop = DetectionLoop(scheduler=scheduler)
        handle = loop.start(source, DetectorConfig(enabled=False))

        assert handle.cancelled
        assert not loop.running
        assert scheduler.tasks == []

    def test_failure_does_not_halt_loop(self, scheduler, caplog):
        source = BrokenSource([document_image()], failures=1)
        loop = DetectionLoop(scheduler=scheduler)
        handle = loop.start(source)

        scheduler.run_next()
        assert "Detection step failed" in caplog.text
        assert handle.passes == 0
        assert len(scheduler.pending) == 1

        scheduler.run_next()
        assert handle.passes == 1
        assert loop.cell.get() is not None

    def test_display_size_passed_through(self, scheduler, source):
        loop = DetectionLoop(scheduler=scheduler)
        loop.start(source, display_size=(400, 300))
        scheduler.run_next()

        quad = loop.cell.get()
        assert quad.space == CoordinateSpace.DISPLAY
        assert_near(quad.top_left, (80, 60), tolerance=3)

    def test_shared_detector(self, scheduler, source):
        detector = DocumentDetector()
        loop = DetectionLoop(detector=detector, scheduler=scheduler)
        handle = loop.start(source)
        assert handle.detector is detector

    def test_threading_scheduler(self, source):
        """Real timers publish a detection and stop cleanly"""
        loop = DetectionLoop()
        loop.start(source, DetectorConfig(cadence_ms=10))
        try:
            deadline = time.monotonic() + 5
            while loop.cell.get() is None and time.monotonic() < deadline:
                time.sleep(0.01)
            assert loop.cell.get() is not None
        finally:
            loop.stop()

        assert not loop.running
        assert loop.cell.get() is None
