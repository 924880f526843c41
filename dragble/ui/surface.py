# dragble/ui/surface.py
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QPoint
from PySide6.QtGui import QMatrix4x4, QTransform
from PySide6.QtWidgets import QWidget

from dragble.core.geometry import translation_matrix
from dragble.core.models import Position, RenderMode


class WidgetSurface:
    """
    Layout and transform view of a QWidget for the drag core.

    Plain widgets have no transform property, so a translation is expressed by moving
    the widget relative to the position it had when the surface was created (its
    "origin"). The origin lives here, never on the widget.

    Offsets are in the coordinate system of the widget's top-level window:
    - offset(): the *untransformed* position inside the parent (origin)
    - offset_parent(): the parent, until the top-level window is reached
    """

    def __init__(self, widget: QWidget, *, render_mode: RenderMode = "2d") -> None:
        self._w = widget
        self._render_mode: RenderMode = render_mode

        # Untransformed position in parent coordinates.
        self._origin = QPoint(widget.pos())

    @property
    def widget(self) -> QWidget:
        return self._w

    @property
    def origin(self) -> QPoint:
        return QPoint(self._origin)

    def offset(self) -> tuple[float, float]:
        # A top-level window is the root of the coordinate system.
        if self._w.isWindow():
            return 0.0, 0.0
        return float(self._origin.x()), float(self._origin.y())

    def offset_parent(self) -> Optional["WidgetSurface"]:
        if self._w.isWindow():
            return None
        parent = self._w.parentWidget()
        if parent is None:
            return None
        return WidgetSurface(parent)

    def size(self) -> tuple[float, float]:
        return float(self._w.width()), float(self._w.height())

    def translation(self) -> Position:
        p = self._w.pos() - self._origin
        return Position(float(p.x()), float(p.y()))

    def transform(self) -> QTransform | QMatrix4x4:
        """Current translation expressed as a Qt matrix for the configured render mode."""
        return translation_matrix(self.translation(), self._render_mode)

    def apply(self, position: Position) -> None:
        # Widget geometry is integral; round rather than truncate to avoid drift.
        target = self._origin + QPoint(int(round(position.x)), int(round(position.y)))
        if target != self._w.pos():
            self._w.move(target)

    def set_flag(self, name: str, on: bool) -> None:
        """
        Toggle a dynamic property and re-polish so style sheets such as
        `QWidget[dragging="true"]` pick up the change.
        """
        if bool(self._w.property(name)) == bool(on):
            return
        self._w.setProperty(name, bool(on))
        st = self._w.style()
        st.unpolish(self._w)
        st.polish(self._w)
        self._w.update()
