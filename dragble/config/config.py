"""Option schema and validation helpers for draggable controllers.

`parse_options` validates and normalizes a raw mapping (keyword arguments or a JSON
object) into an immutable `DragOptions`, so the controller and the gesture core can
assume a coherent shape instead of re-checking option types at every event.

Older option spellings (`limitsX`/`limitsY`, camelCase keys, bare `"x"`/`"y"` axis
values) are normalized here and nowhere else.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import json
import logging
import math
from typing import Any, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# A surface is either a widget object or the objectName used to look it up.
SurfaceRef = Any

LimitRange = Tuple[float, float]


class DragConfigError(ValueError):
    """Invalid or unresolvable draggable configuration."""


@dataclass(frozen=True)
class DragOptions:
    """
    Validated configuration for one draggable element.

    Expected JSON structure (all keys optional):

    {
      "axis": "none",
      "limits": { "x": [-100, 100], "y": [0, 250] },
      "containment": "board",
      "handle": "titleBar",
      "render_mode": "2d",
      "stop_propagation": true,
      "fallback_fps": 60,
      "threshold": 0,
      "dragging_property": "dragging"
    }

    Surfaces ("containment", "handle") are widget objectNames in JSON; in code they
    may also be widget instances.

    "axis" is "none", "x-locked" (y never moves) or "y-locked" (x never moves).

    "render_mode" only selects how the current translation is expressed as a Qt
    matrix (QTransform for "2d", QMatrix4x4 for "3d"). Widgets are always moved
    in their parent, so both modes look the same on screen.
    """

    # -----------------------------
    # Movement constraints
    # -----------------------------
    axis: str = "none"
    # Kept as a dict keyed by axis name; an absent axis is unbounded.
    limits: Dict[str, LimitRange] = field(default_factory=dict)
    containment: Optional[SurfaceRef] = None

    # -----------------------------
    # Gesture behavior
    # -----------------------------
    handle: Optional[SurfaceRef] = None
    stop_propagation: bool = True
    threshold: float = 0.0

    # -----------------------------
    # Rendering
    # -----------------------------
    render_mode: str = "2d"
    fallback_fps: float = 60.0
    dragging_property: str = "dragging"

    @property
    def has_explicit_limits(self) -> bool:
        return bool(self.limits)


_AXIS_VALUES = {
    "none": "none",
    "": "none",
    "x-locked": "x-locked",
    "y-locked": "y-locked",
    # Older spelling names the frozen axis: "x" keeps x still, so movement is locked to y.
    "x": "y-locked",
    "y": "x-locked",
}

_RENDER_MODES = {"2d": "2d", "3d": "3d", "3d-translation": "3d"}

# camelCase names accepted from older configs / JS-style hosts.
_KEY_ALIASES = {
    "renderMode": "render_mode",
    "stopPropagation": "stop_propagation",
    "fallbackFps": "fallback_fps",
    "draggingProperty": "dragging_property",
}

_LEGACY_LIMIT_KEYS = {"limitsX": "x", "limitsY": "y"}

# Accepted for compatibility but without effect.
_IGNORED_KEYS = {"snapBack"}

_KNOWN_KEYS = {
    "axis",
    "limits",
    "containment",
    "handle",
    "render_mode",
    "stop_propagation",
    "fallback_fps",
    "threshold",
    "dragging_property",
}


def _require_num(v: Any, key: str) -> float:
    """
    Require a number (int/float, not bool) and normalize to float.
    """
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise DragConfigError(f"Missing or invalid '{key}' (expected number)")
    f = float(v)
    if math.isnan(f):
        raise DragConfigError(f"Missing or invalid '{key}' (expected number, got NaN)")
    return f


def _opt_num(v: Any, key: str, default: float) -> float:
    if v is None:
        return default
    return _require_num(v, key)


def _opt_bool(v: Any, key: str, default: bool) -> bool:
    """
    Optional boolean with default.

    Strings such as "true"/"false" are rejected rather than silently coerced.
    """
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    raise DragConfigError(f"Missing or invalid '{key}' (expected boolean)")


def _opt_str(v: Any, key: str, default: str) -> str:
    if v is None:
        return default
    if isinstance(v, str) and v.strip():
        return v.strip()
    raise DragConfigError(f"Missing or invalid '{key}' (expected non-empty string)")


def _opt_choice(v: Any, key: str, default: str, choices: Mapping[str, str]) -> str:
    if v is None:
        return default
    if isinstance(v, str):
        norm = choices.get(v.strip().lower())
        if norm is not None:
            return norm
    allowed = ", ".join(sorted(k for k in choices if k))
    raise DragConfigError(f"Invalid '{key}' {v!r} (expected one of: {allowed})")


def _bound(v: Any, key: str, default: float) -> float:
    # null means "no bound on this side".
    if v is None:
        return default
    return _require_num(v, key)


def _limit_range(v: Any, key: str) -> LimitRange:
    """
    Validate a [min, max] pair. Either side may be null for an open range.
    """
    if not isinstance(v, (list, tuple)) or len(v) != 2:
        raise DragConfigError(f"Missing or invalid '{key}' (expected [min, max])")
    lo = _bound(v[0], f"{key}[0]", -math.inf)
    hi = _bound(v[1], f"{key}[1]", math.inf)
    if lo > hi:
        raise DragConfigError(f"Invalid '{key}': min {lo} is greater than max {hi}")
    return lo, hi


def _surface_ref(v: Any, key: str) -> Optional[SurfaceRef]:
    if v is None:
        return None
    if isinstance(v, str):
        name = v.strip()
        if not name:
            raise DragConfigError(f"Invalid '{key}' (expected widget or non-empty object name)")
        return name
    return v


def _normalize_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Map alias and legacy keys onto the current schema.

    - camelCase aliases are renamed
    - limitsX/limitsY are folded into limits.x/limits.y
    - snapBack is dropped
    - unknown keys are rejected
    """
    out: Dict[str, Any] = {}
    legacy_limits: Dict[str, Any] = {}

    for k, v in raw.items():
        if not isinstance(k, str):
            raise DragConfigError(f"Invalid option name {k!r}")
        if k in _IGNORED_KEYS:
            logger.warning("option '%s' is not supported and was ignored", k)
            continue
        if k in _LEGACY_LIMIT_KEYS:
            legacy_limits[_LEGACY_LIMIT_KEYS[k]] = v
            continue
        name = _KEY_ALIASES.get(k, k)
        if name not in _KNOWN_KEYS:
            raise DragConfigError(f"Unknown option '{k}'")
        if name in out:
            raise DragConfigError(f"Option '{name}' given more than once (as '{k}')")
        out[name] = v

    if legacy_limits:
        limits = out.get("limits")
        if limits is not None:
            raise DragConfigError("Use either 'limits' or the legacy 'limitsX'/'limitsY', not both")
        out["limits"] = legacy_limits

    return out


def parse_options(raw: Optional[Mapping[str, Any]] = None) -> DragOptions:
    """
    Validate a raw option mapping and return `DragOptions`.

    Raises:
        DragConfigError: unknown keys, invalid types or values.
    """
    opts = _normalize_keys(raw or {})

    axis = _opt_choice(opts.get("axis"), "axis", "none", _AXIS_VALUES)

    limits_raw = opts.get("limits")
    limits: Dict[str, LimitRange] = {}
    if limits_raw is not None:
        if not isinstance(limits_raw, Mapping):
            raise DragConfigError("Missing or invalid 'limits' (expected object with 'x' and/or 'y')")
        for k, v in limits_raw.items():
            if k not in ("x", "y"):
                raise DragConfigError(f"Invalid 'limits' axis {k!r} (expected 'x' or 'y')")
            if v is None:
                continue
            limits[k] = _limit_range(v, f"limits.{k}")

    render_mode = _opt_choice(opts.get("render_mode"), "render_mode", "2d", _RENDER_MODES)

    fallback_fps = _opt_num(opts.get("fallback_fps"), "fallback_fps", 60.0)
    if not (0.0 < fallback_fps <= 1000.0):
        raise DragConfigError("fallback_fps must be in (0, 1000]")

    threshold = _opt_num(opts.get("threshold"), "threshold", 0.0)
    if threshold < 0.0:
        raise DragConfigError("threshold must be >= 0")

    return DragOptions(
        axis=axis,
        limits=limits,
        containment=_surface_ref(opts.get("containment"), "containment"),
        handle=_surface_ref(opts.get("handle"), "handle"),
        stop_propagation=_opt_bool(opts.get("stop_propagation"), "stop_propagation", True),
        threshold=threshold,
        render_mode=render_mode,
        fallback_fps=fallback_fps,
        dragging_property=_opt_str(opts.get("dragging_property"), "dragging_property", "dragging"),
    )


def with_overrides(base: DragOptions, **overrides: Any) -> DragOptions:
    """
    Return a copy of `base` with some options replaced.

    Overrides go through the same validation as parse_options.
    """
    if not overrides:
        return base
    merged = parse_options(overrides)
    changed = {k: getattr(merged, k) for k in _normalize_keys(overrides)}
    return replace(base, **changed)


def load_config(path: str) -> DragOptions:
    """
    Load draggable options from a JSON file.

    Raises:
        DragConfigError: top-level value is not an object, or options are invalid.
        OSError: file cannot be opened/read.
        json.JSONDecodeError: invalid JSON.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise DragConfigError(f"{path}: expected a JSON object at the top level")
    return parse_options(raw)
