"""Qt facade that makes a QWidget draggable.

`Draggable` composes the Qt-independent pieces (limit resolver, render scheduler,
gesture state machine) with a `WidgetSurface` and Qt event filters:

- a press filter on the handle widget starts gestures
- while a gesture runs, an application-wide filter tracks moves and the release,
  so the drag keeps going when the pointer leaves the handle

Host code observes drags through plain callbacks and/or Qt signals.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from PySide6.QtCore import QCoreApplication, QEvent, QObject, Qt, Signal
from PySide6.QtWidgets import QApplication, QWidget

from dragble.config.config import DragConfigError, DragOptions, parse_options, with_overrides
from dragble.core import limits as limit_resolver
from dragble.core.geometry import parse_current_translation
from dragble.core.gesture import GestureMachine
from dragble.core.models import AxisLimits, AxisLock, DragDelta, GestureState, PointerEvent, Position
from dragble.core.scheduler import FrameSource, RenderScheduler
from dragble.ui.events import PRESS_TYPES, TRACK_TYPES, pointer_from_event
from dragble.ui.surface import WidgetSurface

logger = logging.getLogger(__name__)

StartCallback = Callable[[PointerEvent], None]
DeltaCallback = Callable[[PointerEvent, DragDelta], None]


def resolve_widget(ref: Any, key: str, *, scope: Optional[QWidget] = None) -> QWidget:
    """
    Turn a widget reference into a QWidget.

    - QWidget -> returned as is
    - str -> objectName lookup, first under `scope` (if given), then across the application

    Raises:
        DragConfigError: reference missing, of the wrong type, or not found.
    """
    if isinstance(ref, QWidget):
        return ref
    if isinstance(ref, str) and ref.strip():
        name = ref.strip()
        if scope is not None:
            if scope.objectName() == name:
                return scope
            found = scope.findChild(QWidget, name)
            if found is not None:
                return found
        app = QApplication.instance()
        if isinstance(app, QApplication):
            for w in app.allWidgets():
                if w.objectName() == name:
                    return w
        raise DragConfigError(f"No widget named '{name}' for '{key}'")
    raise DragConfigError(f"Missing or invalid '{key}' (expected QWidget or object name)")


class _QtGestureHost:
    """
    GestureHost implementation backed by a Draggable's widgets.

    Kept separate so the gesture callbacks do not leak into Draggable's public API.
    """

    def __init__(self, owner: "Draggable") -> None:
        self._owner = owner

    def read_translation(self) -> Position:
        surface = self._owner._surface
        if surface is None:
            return Position()
        return parse_current_translation(surface.transform())

    def begin_capture(self) -> None:
        self._owner._set_capturing(True)

    def end_capture(self) -> None:
        self._owner._set_capturing(False)

    def set_dragging(self, dragging: bool) -> None:
        surface = self._owner._surface
        if surface is not None:
            surface.set_flag(self._owner._options.dragging_property, dragging)

    def apply_position(self, position: Position) -> None:
        surface = self._owner._surface
        if surface is not None:
            surface.apply(position)

    def gesture_started(self, event: PointerEvent) -> None:
        o = self._owner
        o.dragStarted.emit()
        if o._on_drag_start is not None:
            o._on_drag_start(event)

    def gesture_moved(self, event: PointerEvent, delta: DragDelta) -> None:
        o = self._owner
        o.dragMoved.emit(delta.x, delta.y)
        if o._on_drag_move is not None:
            o._on_drag_move(event, delta)

    def gesture_ended(self, event: PointerEvent, delta: DragDelta) -> None:
        o = self._owner
        o.dragEnded.emit(delta.x, delta.y)
        if o._on_drag_end is not None:
            o._on_drag_end(event, delta)


class Draggable(QObject):
    """
    Drag controller for one widget.

    Lifecycle:
    - constructed enabled
    - enable()/disable() attach/detach the press filter; limits and any in-flight
      gesture are kept
    - destroy() detaches everything, discards a pending commit and releases the
      widget references; safe to call twice and in the middle of a gesture
    - apply_containment() recomputes limits from a container's current geometry

    Commits always move the target inside its parent. The "render_mode" option
    changes only how the current translation is read back (QTransform or
    QMatrix4x4), not what appears on screen.

    Signals:
    - dragStarted(): pointer went down on the handle
    - dragMoved(dx, dy): a position commit became visible
    - dragEnded(dx, dy): an active gesture finished
    """

    dragStarted = Signal()
    dragMoved = Signal(float, float)
    dragEnded = Signal(float, float)

    def __init__(
        self,
        target: Any,
        *,
        options: Optional[DragOptions] = None,
        on_drag_start: Optional[StartCallback] = None,
        on_drag_move: Optional[DeltaCallback] = None,
        on_drag_end: Optional[DeltaCallback] = None,
        frame_source: Optional[FrameSource] = None,
        parent: Optional[QObject] = None,
        **option_kwargs: Any,
    ) -> None:
        super().__init__(parent)

        # Options: explicit DragOptions, keyword options, or both (keywords win).
        if options is None:
            opts = parse_options(option_kwargs)
        else:
            opts = with_overrides(options, **option_kwargs)
        self._options = opts

        self._on_drag_start = on_drag_start
        self._on_drag_move = on_drag_move
        self._on_drag_end = on_drag_end

        # Widgets. Resolution failures abort construction before anything is attached.
        target_w = resolve_widget(target, "target")
        if opts.handle is None:
            handle_w = target_w
        else:
            handle_w = resolve_widget(opts.handle, "handle", scope=target_w)
            if handle_w is not target_w and not target_w.isAncestorOf(handle_w):
                raise DragConfigError("'handle' must be the target widget or one of its descendants")

        container_w: Optional[QWidget] = None
        if opts.containment is not None:
            container_w = resolve_widget(opts.containment, "containment")

        self._target: Optional[QWidget] = target_w
        self._handle: Optional[QWidget] = handle_w
        self._surface: Optional[WidgetSurface] = WidgetSurface(target_w, render_mode=opts.render_mode)  # type: ignore[arg-type]

        self._lock = AxisLock.from_axis(opts.axis)  # type: ignore[arg-type]
        initial_limits = limit_resolver.resolve(
            explicit=opts.limits,
            draggable=self._surface,
            container=WidgetSurface(container_w) if container_w is not None else None,
            lock=self._lock,
        )

        self._scheduler = RenderScheduler(
            fallback_fps=opts.fallback_fps,
            frame_source=frame_source,
            parent=self,
        )
        self._machine = GestureMachine(
            host=_QtGestureHost(self),
            scheduler=self._scheduler,
            lock=self._lock,
            limits=initial_limits,
            threshold=opts.threshold,
            stop_propagation=opts.stop_propagation,
        )

        self._enabled = False
        self._capturing = False
        self._destroyed = False

        # The target can be deleted by Qt before destroy() is called.
        target_w.destroyed.connect(self._on_target_destroyed)  # type: ignore[arg-type]

        self.enable()
        logger.debug(
            "draggable ready: target=%r axis=%s limits=%s",
            target_w.objectName() or target_w,
            opts.axis,
            [lim.as_list() for lim in initial_limits],
        )

    # ---- state ----

    @property
    def options(self) -> DragOptions:
        return self._options

    @property
    def target(self) -> Optional[QWidget]:
        return self._target

    @property
    def handle(self) -> Optional[QWidget]:
        return self._handle

    @property
    def position(self) -> Position:
        return self._machine.position

    @property
    def limits(self) -> tuple[AxisLimits, AxisLimits]:
        return self._machine.limits

    @property
    def state(self) -> GestureState:
        return self._machine.state

    @property
    def is_dragging(self) -> bool:
        return self._machine.state is GestureState.ACTIVE

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    # ---- lifecycle ----

    def enable(self) -> None:
        if self._destroyed or self._enabled or self._handle is None:
            return
        self._handle.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        self._handle.installEventFilter(self)
        self._enabled = True

    def disable(self) -> None:
        """Stop new gestures from starting. A gesture already running continues."""
        if self._destroyed or not self._enabled:
            return
        self._remove_filter(self._handle)
        self._enabled = False

    def destroy(self) -> None:
        if self._destroyed:
            return
        self.disable()
        self._machine.abandon()
        self._scheduler.cancel()
        self._set_capturing(False)

        self._destroyed = True
        self._target = None
        self._handle = None
        self._surface = None
        self._on_drag_start = None
        self._on_drag_move = None
        self._on_drag_end = None
        logger.debug("draggable destroyed")

    def apply_containment(self, container: Any) -> None:
        """
        Recompute limits so the target stays inside `container`.

        Uses both widgets' current geometry; call again after either one moves or
        resizes. Overrides any limits set before. An unknown container is ignored.
        """
        if self._destroyed or self._surface is None:
            return
        try:
            container_w = resolve_widget(container, "containment")
        except DragConfigError as e:
            logger.warning("containment ignored: %s", e)
            return
        lx, ly = limit_resolver.from_containment(self._surface, WidgetSurface(container_w), self._lock)
        self._machine.set_limits(lx, ly)

    def set_limits(self, *, x: Optional[AxisLimits] = None, y: Optional[AxisLimits] = None) -> None:
        """Replace the limits of one or both axes."""
        if self._destroyed:
            return
        cur_x, cur_y = self._machine.limits
        self._machine.set_limits(x if x is not None else cur_x, y if y is not None else cur_y)

    def reset(self) -> None:
        """Move the target back to where it was when the controller was created."""
        if self._destroyed:
            return
        self._machine.reset()

    # ---- Qt plumbing ----

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # type: ignore[override]
        if self._destroyed:
            return False

        et = event.type()

        if et in PRESS_TYPES and watched is self._handle and self._enabled:
            pe = pointer_from_event(event)
            if pe is None or pe.kind != "press":
                return False
            if not self._machine.press(pe):
                return False
            # Consuming the press keeps it from reaching an enclosing draggable.
            if pe.propagation_stopped:
                event.accept()
                return True
            return False

        if self._capturing and et in TRACK_TYPES:
            pe = pointer_from_event(event)
            if pe is None:
                return False
            # A propagated event can be seen once per hop; the global position is
            # identical each time, so repeated moves do not change the outcome.
            if pe.kind == "move":
                self._machine.move(pe)
            else:
                self._machine.release(pe)
            return False

        return False

    def _set_capturing(self, on: bool) -> None:
        if on == self._capturing:
            return
        app = QCoreApplication.instance()
        if app is None:
            self._capturing = False
            return
        if on:
            app.installEventFilter(self)
        else:
            app.removeEventFilter(self)
        self._capturing = on

    def _remove_filter(self, w: Optional[QWidget]) -> None:
        if w is None:
            return
        try:
            w.removeEventFilter(self)
        except RuntimeError:
            # Underlying C++ widget already deleted.
            pass

    def _on_target_destroyed(self, _: Optional[QObject] = None) -> None:
        # Qt deleted the widgets; forget them before running the normal teardown.
        self._handle = None
        self._surface = None
        self._enabled = False
        self.destroy()
