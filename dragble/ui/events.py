"""Qt event -> PointerEvent conversion."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QEvent, Qt
from PySide6.QtGui import QMouseEvent, QTouchEvent

from dragble.core.models import PointerEvent, PointerKind

PRESS_TYPES = (QEvent.Type.MouseButtonPress, QEvent.Type.TouchBegin)

TRACK_TYPES = (
    QEvent.Type.MouseMove,
    QEvent.Type.MouseButtonRelease,
    QEvent.Type.TouchUpdate,
    QEvent.Type.TouchEnd,
    QEvent.Type.TouchCancel,
)

_MOUSE_KINDS: dict[QEvent.Type, PointerKind] = {
    QEvent.Type.MouseButtonPress: "press",
    QEvent.Type.MouseMove: "move",
    QEvent.Type.MouseButtonRelease: "release",
}

_TOUCH_KINDS: dict[QEvent.Type, PointerKind] = {
    QEvent.Type.TouchBegin: "press",
    QEvent.Type.TouchUpdate: "move",
    QEvent.Type.TouchEnd: "release",
    QEvent.Type.TouchCancel: "cancel",
}


def _modifiers(event: QMouseEvent | QTouchEvent) -> int:
    return int(event.modifiers().value)


def pointer_from_event(event: QEvent) -> Optional[PointerEvent]:
    """
    Copy the relevant parts of a Qt mouse/touch event into a PointerEvent.

    Returns None for unrelated events and for mouse buttons other than the left one.
    Touch events use the first touch point only.
    """
    et = event.type()

    kind = _MOUSE_KINDS.get(et)
    if kind is not None and isinstance(event, QMouseEvent):
        if kind != "move" and event.button() != Qt.MouseButton.LeftButton:
            return None
        gp = event.globalPosition()
        return PointerEvent(
            kind=kind,
            x=float(gp.x()),
            y=float(gp.y()),
            source="mouse",
            timestamp=int(event.timestamp()),
            modifiers=_modifiers(event),
        )

    kind = _TOUCH_KINDS.get(et)
    if kind is not None and isinstance(event, QTouchEvent):
        points = event.points()
        if not points:
            # TouchCancel may carry no points; position is irrelevant then.
            if kind != "cancel":
                return None
            return PointerEvent(kind=kind, x=0.0, y=0.0, source="touch", timestamp=int(event.timestamp()))
        gp = points[0].globalPosition()
        return PointerEvent(
            kind=kind,
            x=float(gp.x()),
            y=float(gp.y()),
            source="touch",
            timestamp=int(event.timestamp()),
            modifiers=_modifiers(event),
        )

    return None
