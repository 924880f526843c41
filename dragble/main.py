"""Demo composition root for dragble.

Builds a small Qt window that exercises the library end to end:
- a "board" container
- a "card" dragged inside the board by its title bar (containment)
- a "chip" nested in the card, locked to the x axis with explicit limits
- a status line fed by the drag callbacks and signals

Options for the card can be loaded from a JSON file (see dragble.config.config).
"""

from __future__ import annotations

import argparse
import logging
from typing import Any, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication, QFrame, QLabel, QVBoxLayout, QWidget

from dragble.config.config import DragOptions, load_config, parse_options
from dragble.core.models import DragDelta, PointerEvent
from dragble.ui.containment import ContainmentWatcher
from dragble.ui.draggable import Draggable, resolve_widget

logger = logging.getLogger("dragble.demo")

_STYLE = """
QFrame#board { background: #20242b; }
QFrame#card { background: #3b4252; border: 1px solid #4c566a; border-radius: 6px; }
QFrame#card[dragging="true"] { border: 1px solid #88c0d0; }
QLabel#cardTitle { background: #434c5e; color: #eceff4; padding: 4px; }
QLabel#chip { background: #a3be8c; color: #2e3440; border-radius: 4px; padding: 2px 6px; }
QLabel#chip[dragging="true"] { background: #ebcb8b; }
QLabel#status { color: #d8dee9; }
"""


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="dragble-demo")
    p.add_argument("--config", default=None, help="JSON file with options for the card.")
    p.add_argument("--fps", type=float, default=None, help="Override fallback_fps for both draggables.")
    p.add_argument(
        "--no-stop-propagation",
        action="store_true",
        help="Let presses on the chip also start a drag of the card.",
    )
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def _build_window() -> dict[str, QWidget]:
    """
    Create the demo widget tree. Widgets are positioned manually: a layout
    manager would move draggable widgets back on every relayout.
    """
    root = QWidget()
    root.setWindowTitle("dragble demo")
    root.resize(640, 480)

    outer = QVBoxLayout(root)
    board = QFrame(root)
    board.setObjectName("board")
    status = QLabel("idle", root)
    status.setObjectName("status")
    outer.addWidget(board, 1)
    outer.addWidget(status)

    card = QFrame(board)
    card.setObjectName("card")
    card.setGeometry(40, 40, 220, 140)

    title = QLabel("drag me by the title", card)
    title.setObjectName("cardTitle")
    title.setGeometry(0, 0, 220, 26)

    chip = QLabel("x only", card)
    chip.setObjectName("chip")
    chip.setAlignment(Qt.AlignmentFlag.AlignCenter)
    chip.setGeometry(20, 70, 60, 24)

    return {"root": root, "board": board, "card": card, "title": title, "chip": chip, "status": status}


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    app = QApplication.instance() or QApplication([])
    app.setStyleSheet(_STYLE)

    w = _build_window()
    w["root"].show()

    # Card options: file first, then the demo's own wiring on top.
    card_opts: DragOptions = load_config(args.config) if args.config else parse_options({})
    overrides: dict[str, Any] = {}
    if card_opts.handle is None:
        overrides["handle"] = "cardTitle"
    if card_opts.containment is None and not card_opts.has_explicit_limits:
        overrides["containment"] = w["board"]
    if args.fps is not None:
        overrides["fallback_fps"] = float(args.fps)

    status: QLabel = w["status"]  # type: ignore[assignment]

    def on_move(name: str):
        def _cb(event: PointerEvent, delta: DragDelta) -> None:
            status.setText(f"{name}: moving dx={delta.x:.0f} dy={delta.y:.0f} ({event.source})")
        return _cb

    def on_end(name: str):
        def _cb(event: PointerEvent, delta: DragDelta) -> None:
            status.setText(f"{name}: dropped at dx={delta.x:.0f} dy={delta.y:.0f}")
            logger.info("%s dropped, delta=(%s, %s)", name, delta.x, delta.y)
        return _cb

    card = Draggable(
        w["card"],
        options=card_opts,
        on_drag_move=on_move("card"),
        on_drag_end=on_end("card"),
        parent=app,
        **overrides,
    )

    chip_kwargs: dict[str, Any] = {
        "axis": "x-locked",
        "limits": {"x": [-20, 140]},
        "stop_propagation": not args.no_stop_propagation,
    }
    if args.fps is not None:
        chip_kwargs["fallback_fps"] = float(args.fps)
    chip = Draggable(
        w["chip"],
        on_drag_move=on_move("chip"),
        on_drag_end=on_end("chip"),
        parent=app,
        **chip_kwargs,
    )

    card.dragStarted.connect(lambda: status.setText("card: pressed"))  # type: ignore[arg-type]
    chip.dragStarted.connect(lambda: status.setText("chip: pressed"))  # type: ignore[arg-type]

    # The board is only laid out once the window is shown; recompute containment on resize.
    watcher: Optional[ContainmentWatcher] = None
    if card.options.containment is not None:
        container = resolve_widget(card.options.containment, "containment")
        watcher = ContainmentWatcher(draggable=card, container=container)
        card.apply_containment(container)

    try:
        return int(app.exec())
    finally:
        if watcher is not None:
            watcher.detach()
        chip.destroy()
        card.destroy()


if __name__ == "__main__":
    raise SystemExit(main())
