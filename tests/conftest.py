"""
Shared pytest fixtures for dragble tests.
"""
import os

# Must be set before any Qt platform plugin is loaded.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QEventPoint, QPointingDevice, QTouchEvent

from dragble.core.gesture import GestureMachine
from dragble.core.models import AxisLimits, AxisLock, Position
from dragble.core.scheduler import RenderScheduler


class ManualFrames:
    """Frame source driven by the test: nothing runs until tick()."""

    def __init__(self):
        self.pending = []

    def __call__(self, callback):
        self.pending.append(callback)

    def tick(self):
        callbacks, self.pending = self.pending, []
        for cb in callbacks:
            cb()


class FakeHost:
    """Records every side effect the gesture machine asks for."""

    def __init__(self, translation=None):
        self.translation = translation or Position()
        self.capturing = False
        self.dragging = False
        self.dragging_changes = []
        self.applied = []
        self.starts = []
        self.moves = []
        self.ends = []

    def read_translation(self):
        return self.translation.copy()

    def begin_capture(self):
        self.capturing = True

    def end_capture(self):
        self.capturing = False

    def set_dragging(self, dragging):
        self.dragging = dragging
        self.dragging_changes.append(dragging)

    def apply_position(self, position):
        self.applied.append(position)
        self.translation = position.copy()

    def gesture_started(self, event):
        self.starts.append(event)

    def gesture_moved(self, event, delta):
        self.moves.append((event, delta))

    def gesture_ended(self, event, delta):
        self.ends.append((event, delta))


@pytest.fixture
def frames():
    return ManualFrames()


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def make_machine(host, frames):
    """Build a GestureMachine wired to the fake host and manual frames."""

    def _make(*, lock=AxisLock(), x=None, y=None, threshold=0.0, stop_propagation=True, machine_host=None):
        scheduler = RenderScheduler(frame_source=frames)
        limits = (x or AxisLimits.unbounded(), y or AxisLimits.unbounded())
        return GestureMachine(
            host=machine_host or host,
            scheduler=scheduler,
            lock=lock,
            limits=limits,
            threshold=threshold,
            stop_propagation=stop_propagation,
        )

    return _make


class Box:
    """Layout stand-in: offset inside a parent box, plus a size."""

    def __init__(self, x, y, w=0, h=0, parent=None):
        self._x, self._y, self._w, self._h = x, y, w, h
        self._parent = parent

    def offset(self):
        return self._x, self._y

    def offset_parent(self):
        return self._parent

    def size(self):
        return self._w, self._h


def touch(kind, *points):
    """Touch event whose points are (x, y) global positions, first point first."""
    state = {
        QEvent.Type.TouchBegin: QEventPoint.State.Pressed,
        QEvent.Type.TouchUpdate: QEventPoint.State.Updated,
        QEvent.Type.TouchEnd: QEventPoint.State.Released,
        QEvent.Type.TouchCancel: QEventPoint.State.Released,
    }[kind]
    pts = [QEventPoint(i, state, QPointF(x, y), QPointF(x, y)) for i, (x, y) in enumerate(points)]
    return QTouchEvent(kind, QPointingDevice.primaryPointingDevice(), Qt.KeyboardModifier.NoModifier, pts)
