"""Frame-coalescing commit scheduler.

Pointer events can arrive far faster than the display refreshes. `RenderScheduler`
keeps at most one commit pending per refresh tick: scheduling again before the tick
replaces the pending payload instead of queueing a second one.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer

logger = logging.getLogger(__name__)

Commit = Callable[[], None]

# A frame source registers a callback to run at the next display refresh.
FrameSource = Callable[[Callable[[], None]], None]

DEFAULT_FALLBACK_FPS = 60.0


class RenderScheduler(QObject):
    """
    Runs the latest scheduled commit once per refresh tick.

    Tick sources:
    - frame_source: host-provided refresh hook (e.g. a compositor's frame callback).
    - otherwise a single-shot QTimer at `fallback_fps`.

    Guarantees:
    - at most one commit per tick (last-write-wins, no backlog)
    - flush() runs the pending commit immediately, so a gesture's final state is never lost
    - after cancel(), a tick that was already requested does nothing
    """

    def __init__(
        self,
        *,
        fallback_fps: float = DEFAULT_FALLBACK_FPS,
        frame_source: Optional[FrameSource] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        if fallback_fps <= 0:
            raise ValueError("fallback_fps must be > 0")

        self._fallback_fps = float(fallback_fps)
        self._frame_source = frame_source

        # Latest payload waiting for the next tick.
        self._pending: Optional[Commit] = None

        # Bumped on every arm/cancel so stale frame-source callbacks can be recognized.
        self._generation = 0
        self._armed = False

        # Created lazily; hosts with a frame source never need a timer.
        self._timer: Optional[QTimer] = None

    @property
    def interval_ms(self) -> int:
        return max(1, int(round(1000.0 / self._fallback_fps)))

    @property
    def fallback_fps(self) -> float:
        return self._fallback_fps

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def schedule(self, fn: Commit) -> None:
        """Queue `fn` for the next tick, replacing any commit still waiting."""
        self._pending = fn
        if self._armed:
            return
        self._arm()

    def flush(self) -> None:
        """Run the pending commit now, if any, and disarm the tick."""
        if self._pending is None:
            return
        self._disarm()
        self._run_pending()

    def cancel(self) -> None:
        """Discard the pending commit; it will never run."""
        self._pending = None
        self._disarm()

    def _arm(self) -> None:
        self._armed = True
        self._generation += 1
        gen = self._generation

        if self._frame_source is not None:
            self._frame_source(lambda: self._on_tick(gen))
            return

        if self._timer is None:
            self._timer = QTimer(self)
            self._timer.setSingleShot(True)
            self._timer.timeout.connect(lambda: self._on_tick(self._generation))  # type: ignore[arg-type]
        self._timer.setInterval(self.interval_ms)
        self._timer.start()

    def _disarm(self) -> None:
        self._armed = False
        self._generation += 1
        if self._timer is not None:
            self._timer.stop()

    def _on_tick(self, gen: int) -> None:
        if gen != self._generation or not self._armed:
            # Superseded by flush()/cancel() after this tick was requested.
            return
        self._armed = False
        self._run_pending()

    def _run_pending(self) -> None:
        fn = self._pending
        self._pending = None
        if fn is not None:
            fn()
