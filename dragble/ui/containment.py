# dragble/ui/containment.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QEvent, QObject
from PySide6.QtWidgets import QWidget

from dragble.ui.draggable import Draggable


@dataclass(frozen=True)
class WatcherConfig:
    on_container_move: bool = True
    on_container_resize: bool = True
    on_target_resize: bool = True


class ContainmentWatcher(QObject):
    """
    Re-applies containment when the geometry it was computed from changes.

    Containment limits are a snapshot; this watches the container (move/resize)
    and the draggable's target (resize only: the target moves on every commit)
    and calls Draggable.apply_containment() again.
    """

    def __init__(
        self,
        *,
        draggable: Draggable,
        container: QWidget,
        cfg: WatcherConfig = WatcherConfig(),
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._drag = draggable
        self._container: Optional[QWidget] = container
        self._target: Optional[QWidget] = draggable.target
        self._cfg = cfg

        self._container.installEventFilter(self)
        if self._target is not None:
            self._target.installEventFilter(self)

        self._container.destroyed.connect(lambda _=None: self._forget())  # type: ignore[arg-type]

    def detach(self) -> None:
        for w in (self._container, self._target):
            if w is None:
                continue
            try:
                w.removeEventFilter(self)
            except RuntimeError:
                pass
        self._forget()

    def _forget(self) -> None:
        self._container = None
        self._target = None

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # type: ignore[override]
        if self._container is None or self._drag.is_destroyed:
            return False

        et = event.type()
        if et not in (QEvent.Type.Move, QEvent.Type.Resize):
            return False

        if watched is self._container:
            if et == QEvent.Type.Move and not self._cfg.on_container_move:
                return False
            if et == QEvent.Type.Resize and not self._cfg.on_container_resize:
                return False
        elif watched is self._target:
            if et != QEvent.Type.Resize or not self._cfg.on_target_resize:
                return False
        else:
            return False

        self._drag.apply_containment(self._container)
        return False
