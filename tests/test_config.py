import json
import math

import pytest

from dragble.config.config import DragConfigError, DragOptions, load_config, parse_options, with_overrides
from dragble.core.models import AxisLock


def test_defaults():
    opts = parse_options({})
    assert opts == DragOptions()
    assert opts.axis == "none"
    assert opts.limits == {}
    assert opts.render_mode == "2d"
    assert opts.stop_propagation is True
    assert opts.fallback_fps == 60.0
    assert opts.dragging_property == "dragging"
    assert opts.has_explicit_limits is False


def test_limits_are_validated_and_normalized():
    opts = parse_options({"limits": {"x": [-10, 10], "y": [0, None]}})
    assert opts.limits["x"] == (-10.0, 10.0)
    assert opts.limits["y"] == (0.0, math.inf)
    assert opts.has_explicit_limits is True


@pytest.mark.parametrize(
    "raw",
    [
        {"limits": [0, 1]},
        {"limits": {"z": [0, 1]}},
        {"limits": {"x": [0]}},
        {"limits": {"x": ["a", 1]}},
        {"limits": {"x": [5, 1]}},
        {"axis": "diagonal"},
        {"render_mode": "4d"},
        {"stop_propagation": "yes"},
        {"fallback_fps": 0},
        {"fallback_fps": True},
        {"threshold": -1},
        {"dragging_property": "  "},
        {"wobble": 1},
    ],
)
def test_invalid_options_raise(raw):
    with pytest.raises(DragConfigError):
        parse_options(raw)


def test_config_error_is_a_value_error():
    assert issubclass(DragConfigError, ValueError)


def test_legacy_limit_names_are_folded_in():
    opts = parse_options({"limitsX": [-5, 5], "limitsY": [0, 3]})
    assert opts.limits == {"x": (-5.0, 5.0), "y": (0.0, 3.0)}


def test_legacy_and_new_limits_together_are_rejected():
    with pytest.raises(DragConfigError):
        parse_options({"limits": {"x": [0, 1]}, "limitsY": [0, 1]})


@pytest.mark.parametrize(
    "raw, expected",
    [("x-locked", "x-locked"), ("Y-LOCKED", "y-locked"), ("none", "none"), ("x", "y-locked"), ("y", "x-locked")],
)
def test_axis_spellings(raw, expected):
    assert parse_options({"axis": raw}).axis == expected


def test_older_config_shape_freezes_the_named_axis():
    # Older configs name the axis that stays still.
    opts = parse_options({"axis": "x", "limitsY": [-50, 50]})
    assert opts.axis == "y-locked"
    assert opts.limits == {"y": (-50.0, 50.0)}
    lock = AxisLock.from_axis(opts.axis)
    assert lock.x is True
    assert lock.y is False


def test_camel_case_aliases():
    opts = parse_options({"renderMode": "3d", "stopPropagation": False, "fallbackFps": 30})
    assert opts.render_mode == "3d"
    assert opts.stop_propagation is False
    assert opts.fallback_fps == 30.0


def test_alias_and_canonical_name_together_are_rejected():
    with pytest.raises(DragConfigError):
        parse_options({"renderMode": "3d", "render_mode": "2d"})


def test_snap_back_is_ignored_with_warning(caplog):
    opts = parse_options({"snapBack": True})
    assert opts == DragOptions()
    assert "snapBack" in caplog.text


def test_surface_names_are_kept():
    opts = parse_options({"handle": " title ", "containment": "board"})
    assert opts.handle == "title"
    assert opts.containment == "board"


def test_with_overrides_only_touches_given_keys():
    base = parse_options({"axis": "x-locked", "limits": {"x": [0, 10]}})
    out = with_overrides(base, render_mode="3d")
    assert out.axis == "x-locked"
    assert out.limits == {"x": (0.0, 10.0)}
    assert out.render_mode == "3d"
    assert with_overrides(base) is base


def test_load_config_from_json(tmp_path):
    p = tmp_path / "drag.json"
    p.write_text(json.dumps({"axis": "y-locked", "limits": {"y": [-20, 20]}, "containment": "board"}), encoding="utf-8")
    opts = load_config(str(p))
    assert opts.axis == "y-locked"
    assert opts.limits == {"y": (-20.0, 20.0)}
    assert opts.containment == "board"


def test_load_config_rejects_non_object(tmp_path):
    p = tmp_path / "drag.json"
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(DragConfigError):
        load_config(str(p))
