import pytest
from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QMouseEvent

from dragble.ui.events import pointer_from_event

from conftest import touch


def mouse(kind, x, y, button=Qt.MouseButton.LeftButton):
    gp = QPointF(x, y)
    return QMouseEvent(kind, gp, gp, button, button, Qt.KeyboardModifier.NoModifier)


@pytest.mark.parametrize(
    "kind, expected",
    [
        (QEvent.Type.TouchBegin, "press"),
        (QEvent.Type.TouchUpdate, "move"),
        (QEvent.Type.TouchEnd, "release"),
        (QEvent.Type.TouchCancel, "cancel"),
    ],
)
def test_touch_kinds(qapp, kind, expected):
    pe = pointer_from_event(touch(kind, (12, 34)))
    assert pe is not None
    assert pe.kind == expected
    assert pe.source == "touch"
    assert (pe.x, pe.y) == (12.0, 34.0)


def test_touch_uses_the_first_point(qapp):
    pe = pointer_from_event(touch(QEvent.Type.TouchUpdate, (5, 6), (300, 400)))
    assert (pe.x, pe.y) == (5.0, 6.0)


def test_touch_cancel_without_points(qapp):
    pe = pointer_from_event(touch(QEvent.Type.TouchCancel))
    assert pe is not None
    assert pe.kind == "cancel"
    assert pe.source == "touch"


def test_touch_begin_without_points_is_ignored(qapp):
    assert pointer_from_event(touch(QEvent.Type.TouchBegin)) is None


def test_mouse_press_with_left_button(qapp):
    pe = pointer_from_event(mouse(QEvent.Type.MouseButtonPress, 7, 8))
    assert pe.kind == "press"
    assert pe.source == "mouse"
    assert (pe.x, pe.y) == (7.0, 8.0)
    assert pe.modifiers == 0


def test_other_mouse_buttons_are_ignored(qapp):
    assert pointer_from_event(mouse(QEvent.Type.MouseButtonPress, 1, 1, Qt.MouseButton.RightButton)) is None
    assert pointer_from_event(mouse(QEvent.Type.MouseButtonRelease, 1, 1, Qt.MouseButton.MiddleButton)) is None


def test_unrelated_events_are_ignored(qapp):
    assert pointer_from_event(QEvent(QEvent.Type.Resize)) is None
