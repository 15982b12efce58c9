"""
Shared fixtures for doc_detection tests
"""

import cv2
import numpy as np
import pytest


class ScheduledTask:
    """Callback captured by ManualScheduler"""

    def __init__(self, delay_s, callback):
        self.delay_s = delay_s
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Run the callback even if cancelled, like a timer that already fired"""
        self.callback()


class ManualScheduler:
    """Scheduler that only runs callbacks when the test asks it to"""

    def __init__(self):
        self.tasks = []

    def call_later(self, delay_s, callback):
        task = ScheduledTask(delay_s, callback)
        self.tasks.append(task)
        return task

    @property
    def pending(self):
        return [t for t in self.tasks if not t.cancelled]

    def run_next(self):
        task = self.pending[0]
        self.tasks.remove(task)
        task.fire()
        return task


def document_image(width=800, height=600, rect=(160, 120, 640, 480), channels=3):
    """Dark image with one bright filled rectangle (x1, y1, x2, y2)"""
    shape = (height, width) if channels == 1 else (height, width, channels)
    image = np.full(shape, 30, dtype=np.uint8)
    x1, y1, x2, y2 = rect
    color = 230 if channels == 1 else (230,) * channels
    cv2.rectangle(image, (x1, y1), (x2, y2), color, -1)
    return image


def rectangle_edge_map(width=1000, height=1000, rect=(100, 100, 700, 900)):
    """Binary edge map with a one pixel rectangle outline"""
    edge_map = np.zeros((height, width), dtype=np.uint8)
    x1, y1, x2, y2 = rect
    cv2.rectangle(edge_map, (x1, y1), (x2, y2), 255, 1)
    return edge_map


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def document():
    return document_image()


@pytest.fixture
def edge_map():
    return rectangle_edge_map()
