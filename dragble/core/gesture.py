"""Drag gesture state machine.

One `GestureMachine` drives one draggable surface. It turns pointer samples into
clamped translation commits and reports lifecycle changes to its host (the Qt
controller in production, a fake in tests):

    IDLE --press--> PENDING --first decisive move--> ACTIVE --release/cancel--> IDLE
                       |                                 ^
                       +--move on a locked axis (abort)--+--> IDLE

Per-gesture data lives in an explicit `GestureSession` created on press and
dropped when the gesture ends; nothing about the gesture is stored on the surface.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Protocol

from dragble.core.models import AxisLimits, AxisLock, DragDelta, GestureState, PointerEvent, Position
from dragble.core.scheduler import RenderScheduler

logger = logging.getLogger(__name__)


class GestureHost(Protocol):
    """Side effects the state machine delegates to its owner."""

    def read_translation(self) -> Position:
        """Current translation of the surface (baseline for a new gesture)."""
        ...

    def begin_capture(self) -> None:
        """Start receiving move/release events from everywhere, not just the handle."""
        ...

    def end_capture(self) -> None:
        ...

    def set_dragging(self, dragging: bool) -> None:
        ...

    def apply_position(self, position: Position) -> None:
        ...

    def gesture_started(self, event: PointerEvent) -> None:
        ...

    def gesture_moved(self, event: PointerEvent, delta: DragDelta) -> None:
        ...

    def gesture_ended(self, event: PointerEvent, delta: DragDelta) -> None:
        ...


@dataclass
class GestureSession:
    """
    State of one pointer-down .. pointer-up cycle.

    Fields:
    - start_x/start_y: pointer position at press (global coordinates).
    - last_x/last_y: pointer reference per axis. Only advanced when the candidate
      position for that axis is inside its limits, so overshoot is remembered.
    - baseline: surface translation at press; deltas are reported against it.
    - relative: latest (clamped) translation computed by the gesture.
    - direction_committed: set once the first decisive move passed the axis-lock check.
    - dragging_applied: whether the host's "is dragging" flag was switched on.
    """
    start_x: float
    start_y: float
    last_x: float
    last_y: float
    baseline: Position
    relative: Position
    direction_committed: bool = False
    dragging_applied: bool = False

    @classmethod
    def begin(cls, event: PointerEvent, baseline: Position) -> "GestureSession":
        return cls(
            start_x=event.x,
            start_y=event.y,
            last_x=event.x,
            last_y=event.y,
            baseline=baseline.copy(),
            relative=baseline.copy(),
        )

    def delta_of(self, position: Position) -> DragDelta:
        return DragDelta(position.x - self.baseline.x, position.y - self.baseline.y)


def _step_axis(relative: float, last: float, current: float, limits: AxisLimits) -> tuple[float, float]:
    """
    Advance one axis by the pointer movement since `last`.

    Returns (new_relative, new_last). In range: accept and move the pointer
    reference. Out of range: pin to the nearest bound and keep the old reference.
    """
    candidate = relative + (current - last)
    if limits.contains(candidate):
        return candidate, current
    return limits.clamp(candidate), last


class GestureMachine:
    """
    Owns gesture lifecycle, axis lock, limits and the committed position.

    Commits never happen synchronously from move(): they are queued through the
    RenderScheduler, so only the latest position per tick becomes observable.
    """

    def __init__(
        self,
        *,
        host: GestureHost,
        scheduler: RenderScheduler,
        lock: AxisLock = AxisLock(),
        limits: Optional[tuple[AxisLimits, AxisLimits]] = None,
        threshold: float = 0.0,
        stop_propagation: bool = True,
    ) -> None:
        self._host = host
        self._scheduler = scheduler
        self._lock = lock
        self._limits_x, self._limits_y = limits or (AxisLimits.unbounded(), AxisLimits.unbounded())
        self._threshold = max(0.0, float(threshold))
        self._stop_propagation = bool(stop_propagation)

        self._state = GestureState.IDLE
        self._session: Optional[GestureSession] = None

        # Last committed translation (what the surface currently shows).
        self._position = Position()

        # Latest uncommitted (position, event) waiting for the scheduler tick.
        self._queued: Optional[tuple[Position, PointerEvent]] = None

    # ---- read-only views ----

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def session(self) -> Optional[GestureSession]:
        return self._session

    @property
    def position(self) -> Position:
        return self._position.copy()

    @property
    def lock(self) -> AxisLock:
        return self._lock

    @property
    def limits(self) -> tuple[AxisLimits, AxisLimits]:
        return self._limits_x, self._limits_y

    @property
    def stop_propagation(self) -> bool:
        return self._stop_propagation

    def set_limits(self, x: AxisLimits, y: AxisLimits) -> None:
        # Takes effect on the next move; an in-flight gesture is not re-clamped retroactively.
        self._limits_x = x
        self._limits_y = y

    # ---- pointer input ----

    def press(self, event: PointerEvent) -> bool:
        """
        Start a gesture. Returns False if one is already in progress.
        """
        if self._session is not None:
            return False

        baseline = self._host.read_translation()
        self._position = baseline.copy()
        self._session = GestureSession.begin(event, baseline)
        self._state = GestureState.PENDING

        # Nested draggables: keep the outer one from starting its own gesture.
        if self._stop_propagation:
            event.stop_propagation()

        logger.debug("gesture pending at (%s, %s), baseline=%s", event.x, event.y, baseline)
        self._host.gesture_started(event)
        self._host.begin_capture()
        return True

    def move(self, event: PointerEvent) -> None:
        s = self._session
        if s is None:
            return

        if self._state is GestureState.PENDING:
            if not self._commit_direction(s, event):
                return

        if not s.dragging_applied:
            s.dragging_applied = True
            self._host.set_dragging(True)

        if not self._lock.x:
            s.relative.x, s.last_x = _step_axis(s.relative.x, s.last_x, event.x, self._limits_x)
        if not self._lock.y:
            s.relative.y, s.last_y = _step_axis(s.relative.y, s.last_y, event.y, self._limits_y)

        self._queued = (s.relative.copy(), event)
        self._scheduler.schedule(self._commit)

    def release(self, event: PointerEvent) -> Optional[DragDelta]:
        """
        End the gesture (pointer-up or cancel).

        Returns the final delta if the gesture ever became active, else None.
        """
        s = self._session
        if s is None:
            return None

        was_active = self._state is GestureState.ACTIVE
        self._host.end_capture()

        if not was_active:
            logger.debug("gesture ended before committing a direction; no-op drag")
            self._clear()
            return None

        # The final position must reach the surface before the end callback sees it.
        self._scheduler.flush()
        delta = s.delta_of(self._position)
        if s.dragging_applied:
            self._host.set_dragging(False)
        self._clear()

        logger.debug("gesture ended, delta=(%s, %s)", delta.x, delta.y)
        self._host.gesture_ended(event, delta)
        return delta

    def cancel(self, event: PointerEvent) -> Optional[DragDelta]:
        return self.release(event)

    def abandon(self) -> None:
        """
        Drop an in-flight gesture without callbacks and discard its queued commit.
        """
        s = self._session
        if s is None:
            return
        self._host.end_capture()
        self._scheduler.cancel()
        self._queued = None
        if s.dragging_applied:
            self._host.set_dragging(False)
        self._clear()
        logger.debug("gesture abandoned")

    def reset(self) -> None:
        """Move the surface back to its untransformed origin, right away."""
        self.abandon()
        if self._queued is not None:
            self._scheduler.cancel()
            self._queued = None
        self._position = Position()
        self._host.apply_position(self._position.copy())

    # ---- internals ----

    def _commit_direction(self, s: GestureSession, event: PointerEvent) -> bool:
        """
        PENDING -> ACTIVE decision. Returns True if the move should be applied.
        """
        moved_x = event.x - s.start_x
        moved_y = event.y - s.start_y
        ax = abs(moved_x)
        ay = abs(moved_y)

        if ax <= self._threshold and ay <= self._threshold:
            return False

        # Dominant direction lands on a forbidden axis: the user is not dragging this element.
        if (ax > ay and self._lock.x) or (ay > ax and self._lock.y):
            logger.debug("gesture aborted: dominant movement (%s, %s) on locked axis", moved_x, moved_y)
            self._host.end_capture()
            self._clear()
            return False

        s.direction_committed = True
        self._state = GestureState.ACTIVE
        logger.debug("gesture active")
        return True

    def _commit(self) -> None:
        queued = self._queued
        self._queued = None
        if queued is None:
            return
        position, event = queued
        self._position = position
        self._host.apply_position(position.copy())

        s = self._session
        baseline = s.baseline if s is not None else Position()
        self._host.gesture_moved(event, DragDelta(position.x - baseline.x, position.y - baseline.y))

    def _clear(self) -> None:
        self._session = None
        self._state = GestureState.IDLE
