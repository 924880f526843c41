"""Position, size and transform helpers used by the drag core.

These helpers are pure functions of whatever the surface reports *right now*.
Nothing is cached: layouts move between calls, so every caller asks again.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Optional, Protocol, Sequence

from PySide6.QtGui import QMatrix4x4, QTransform

from dragble.core.models import Position, RenderMode

logger = logging.getLogger(__name__)

# `name(arg, arg, ...)` as produced by CSS-style transform serializations.
_FUNC_RE = re.compile(r"^\s*([A-Za-z][\w-]*)\((.*)\)\s*$")

# Translation component indices inside a flattened matrix:
# - 6 components: affine 2D matrix (a, b, c, d, tx, ty)
# - 16 components: column-major 4x4 matrix, translation lives in the 4th column
_TRANSLATION_INDEX = {6: (4, 5), 16: (12, 13)}


class LayoutSurface(Protocol):
    """Minimal layout view of a surface needed for offset and containment math."""

    def offset(self) -> tuple[float, float]:
        ...

    def offset_parent(self) -> Optional["LayoutSurface"]:
        ...

    def size(self) -> tuple[float, float]:
        ...


def cumulative_offset(surface: LayoutSurface) -> tuple[float, float]:
    """
    Sum the offsets of a surface and each of its offset ancestors.

    The walk stops at the first surface that reports no offset parent, so the
    result is the surface's position relative to the root of its chain.
    """
    x = 0.0
    y = 0.0
    node: Optional[LayoutSurface] = surface
    while node is not None:
        ox, oy = node.offset()
        x += float(ox)
        y += float(oy)
        node = node.offset_parent()
    return x, y


def _to_float(raw: Any) -> float:
    # Tolerates CSS units ("12px") and garbage; anything unusable reads as 0.
    if isinstance(raw, (int, float)):
        v = float(raw)
    else:
        text = str(raw).strip().lower()
        if text.endswith("px"):
            text = text[:-2].strip()
        try:
            v = float(text)
        except ValueError:
            return 0.0
    return v if math.isfinite(v) else 0.0


def _matrix_components(value: Any) -> Optional[Sequence[Any]]:
    """
    Flatten a resolved transform into its matrix components.

    Returns None when the value is not a matrix at all (e.g. "none").
    """
    if isinstance(value, QTransform):
        return [value.m11(), value.m12(), value.m21(), value.m22(), value.dx(), value.dy()]

    if isinstance(value, QMatrix4x4):
        out: list[float] = []
        for i in range(4):
            col = value.column(i)
            out.extend([col.x(), col.y(), col.z(), col.w()])
        return out

    if isinstance(value, str):
        m = _FUNC_RE.match(value)
        if m is None:
            return None
        name = m.group(1).lower()
        args = [a for a in (p.strip() for p in m.group(2).split(",")) if a]
        if name.startswith("translate"):
            # translate(x, y) / translate3d(x, y, z): expand into an identity 2D matrix.
            tx = args[0] if len(args) > 0 else 0
            ty = args[1] if len(args) > 1 else 0
            return [1, 0, 0, 1, tx, ty]
        if name in ("matrix", "matrix3d"):
            return args
        return None

    if isinstance(value, (list, tuple)):
        return value

    return None


def parse_current_translation(value: Any) -> Position:
    """
    Extract the translation pair from a surface's resolved transform.

    Accepts QTransform, QMatrix4x4, CSS-style "matrix(...)" / "matrix3d(...)" /
    "translate(...)" strings, or flat sequences of 6 or 16 numbers. A 6-component
    matrix keeps the translation at indices 4/5, a 16-component one at 12/13.

    Never raises: a missing or unparseable transform reads as Position(0, 0).
    """
    if value is None:
        return Position()
    try:
        comps = _matrix_components(value)
    except Exception:
        logger.debug("unreadable transform %r", value, exc_info=True)
        return Position()
    if comps is None:
        return Position()

    idx = _TRANSLATION_INDEX.get(len(comps))
    if idx is None:
        logger.debug("transform %r has %d components; treating as untranslated", value, len(comps))
        return Position()

    return Position(_to_float(comps[idx[0]]), _to_float(comps[idx[1]]))


def translation_matrix(position: Position, render_mode: RenderMode = "2d") -> QTransform | QMatrix4x4:
    """Build the Qt matrix expressing a translation in the given render mode."""
    if render_mode == "3d":
        m = QMatrix4x4()
        m.translate(float(position.x), float(position.y), 0.0)
        return m
    return QTransform.fromTranslate(float(position.x), float(position.y))
