# File commentary: dragble/core/models.py - value types shared by the drag core.
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Literal


# Which axis the element is locked to.
# - "none": free movement on both axes
# - "x-locked": movement locked to the x axis (y is forbidden)
# - "y-locked": movement locked to the y axis (x is forbidden)
AxisMode = Literal["none", "x-locked", "y-locked"]

# How a committed translation is expressed on the surface.
RenderMode = Literal["2d", "3d"]

# Raw pointer event kinds fed into the gesture state machine.
PointerKind = Literal["press", "move", "release", "cancel"]


class GestureState(Enum):
    IDLE = "idle"
    PENDING = "pending"
    ACTIVE = "active"


@dataclass
class Position:
    """
    Translation offsets in pixels relative to the element's untransformed origin.
    """
    x: float = 0.0
    y: float = 0.0

    def copy(self) -> "Position":
        return Position(self.x, self.y)


@dataclass(frozen=True)
class DragDelta:
    """Committed position minus the position the gesture started from."""
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class AxisLimits:
    """
    Closed range [min, max] for one axis.

    The default is unbounded. An inverted range (min > max) is collapsed to the
    single point `min`, so `min <= max` holds for every instance.
    """
    min: float = -math.inf
    max: float = math.inf

    def __post_init__(self) -> None:
        lo = float(self.min)
        hi = float(self.max)
        if math.isnan(lo) or math.isnan(hi):
            raise ValueError("AxisLimits bounds must not be NaN")
        if hi < lo:
            hi = lo
        object.__setattr__(self, "min", lo)
        object.__setattr__(self, "max", hi)

    @classmethod
    def unbounded(cls) -> "AxisLimits":
        return cls()

    @classmethod
    def point(cls, value: float = 0.0) -> "AxisLimits":
        return cls(value, value)

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def clamp(self, value: float) -> float:
        return max(self.min, min(self.max, value))

    def as_list(self) -> list[float]:
        return [self.min, self.max]


@dataclass(frozen=True)
class AxisLock:
    """
    Per-axis movement ban, fixed for the lifetime of a controller.

    Fields:
    - x: True means the element never moves horizontally.
    - y: True means the element never moves vertically.
    """
    x: bool = False
    y: bool = False

    @classmethod
    def from_axis(cls, axis: AxisMode) -> "AxisLock":
        # Locking movement *to* an axis forbids the complementary one.
        if axis == "x-locked":
            return cls(x=False, y=True)
        if axis == "y-locked":
            return cls(x=True, y=False)
        return cls()


@dataclass
class PointerEvent:
    """
    Toolkit-neutral pointer sample.

    Coordinates are global (screen) pixels, so a gesture keeps tracking when the
    pointer leaves the element.

    Only plain values are copied out of the toolkit event: commits run on a later
    tick, after the toolkit has already released the original event object.
    """
    kind: PointerKind
    x: float
    y: float
    # "mouse" or "touch".
    source: str = "mouse"
    # Toolkit timestamp in milliseconds (0 when unknown).
    timestamp: int = 0
    # Keyboard modifiers as a plain int bitmask.
    modifiers: int = 0
    propagation_stopped: bool = field(default=False, compare=False)

    def stop_propagation(self) -> None:
        self.propagation_stopped = True
