# dragble/core/limits.py
from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from dragble.core.geometry import LayoutSurface, cumulative_offset
from dragble.core.models import AxisLimits, AxisLock

logger = logging.getLogger(__name__)

LimitsPair = tuple[AxisLimits, AxisLimits]


def unbounded() -> LimitsPair:
    return AxisLimits.unbounded(), AxisLimits.unbounded()


def from_config(limits: Mapping[str, Optional[Sequence[float]]]) -> LimitsPair:
    """
    Use explicit per-axis ranges as given.

    `limits` maps "x"/"y" to a [min, max] pair; an absent axis stays unbounded.
    Values are expected to be validated already (see dragble.config.config).
    """
    out = []
    for axis in ("x", "y"):
        rng = limits.get(axis)
        if rng is None:
            out.append(AxisLimits.unbounded())
        else:
            out.append(AxisLimits(float(rng[0]), float(rng[1])))
    return out[0], out[1]


def _axis_from_containment(
    *,
    container_offset: float,
    draggable_offset: float,
    container_size: float,
    draggable_size: float,
) -> AxisLimits:
    # limit1: travel until the leading edges line up (<= 0 when the draggable sits inside).
    # limit2: remaining room on the trailing side.
    limit1 = container_offset - draggable_offset
    limit2 = (container_size - draggable_size) - abs(limit1)
    if limit2 < limit1:
        logger.debug(
            "draggable does not fit container (limit1=%s, limit2=%s); pinning axis to %s",
            limit1,
            limit2,
            limit1,
        )
    # AxisLimits collapses an inverted range onto limit1.
    return AxisLimits(limit1, limit2)


def from_containment(draggable: LayoutSurface, container: LayoutSurface, lock: AxisLock) -> LimitsPair:
    """
    Derive limits that keep the draggable's box inside the container's box.

    Both boxes are measured at their *current* positions, which become the zero
    reference for translation. Locked axes always resolve to [0, 0].

    This is a snapshot: call again after either surface moves or resizes.
    """
    dx, dy = cumulative_offset(draggable)
    cx, cy = cumulative_offset(container)
    dw, dh = draggable.size()
    cw, ch = container.size()

    # Sizes are whole pixels, as layout engines report them.
    dw, dh, cw, ch = int(dw), int(dh), int(cw), int(ch)

    if lock.x:
        lx = AxisLimits.point(0.0)
    else:
        lx = _axis_from_containment(
            container_offset=cx, draggable_offset=dx, container_size=cw, draggable_size=dw
        )

    if lock.y:
        ly = AxisLimits.point(0.0)
    else:
        ly = _axis_from_containment(
            container_offset=cy, draggable_offset=dy, container_size=ch, draggable_size=dh
        )

    logger.debug("containment limits x=%s y=%s", lx.as_list(), ly.as_list())
    return lx, ly


def resolve(
    *,
    explicit: Optional[Mapping[str, Optional[Sequence[float]]]],
    draggable: Optional[LayoutSurface],
    container: Optional[LayoutSurface],
    lock: AxisLock,
) -> LimitsPair:
    """
    Pick the initial limits for a controller.

    Priority:
    1) explicit limits from configuration
    2) containment against `container`
    3) unbounded
    """
    if explicit:
        return from_config(explicit)
    if container is not None and draggable is not None:
        return from_containment(draggable, container, lock)
    return unbounded()
