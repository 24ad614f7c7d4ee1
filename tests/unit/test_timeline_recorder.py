from __future__ import annotations

import pytest

from uireel.timeline.easing import ease_in_out_cubic, get_easing, interpolate, linear
from uireel.timeline.recorder import TimelineRecorder
from uireel.timeline.state import iter_frames, sample_frame


def test_sequential_animations_advance_the_clock() -> None:
    rec = TimelineRecorder()
    rec.create("dot", "circle", {"position": [0.0, 0.0], "opacity": 0.0})
    rec.animate("dot", "opacity", 1.0, 0.5)
    rec.animate("dot", "position", [10.0, 0.0], 1.0, "easeOutCubic")
    rec.wait(0.25)

    assert rec.at_ms == 1750.0
    animates = [row for row in rec.mutations if row["op"] == "animate"]
    assert [row["at_ms"] for row in animates] == [0.0, 500.0]
    assert animates[0]["from"] == 0.0
    assert animates[1]["path"] == "/nodes/dot/position"
    assert animates[1]["duration_ms"] == 1000.0
    assert [row["seq"] for row in rec.mutations] == list(range(len(rec.mutations)))


def test_together_runs_members_concurrently() -> None:
    rec = TimelineRecorder()
    rec.create("a", "rect", {"opacity": 0.0})
    rec.create("b", "rect", {"opacity": 0.0})
    with rec.together():
        rec.animate("a", "opacity", 1.0, 1.0)
        rec.animate("b", "opacity", 1.0, 0.4)
        with rec.together():
            rec.animate("b", "scale", 2.0, 0.6)
    assert rec.now_s == 1.0
    assert {row["at_ms"] for row in rec.mutations if row["op"] == "animate"} == {0.0}


def test_remove_drops_children_and_ignores_missing_nodes() -> None:
    rec = TimelineRecorder()
    rec.create("layer", "group", {"opacity": 1.0})
    rec.create("child", "rect", {"opacity": 1.0}, parent="layer")
    rec.remove("layer")
    rec.remove("layer")
    assert rec.state.nodes == {}
    assert [row["op"] for row in rec.mutations] == ["create", "create", "remove"]


def test_set_on_missing_node_raises() -> None:
    rec = TimelineRecorder()
    with pytest.raises(KeyError):
        rec.set("ghost", "opacity", 1.0)


def test_sample_frame_interpolates_in_flight_animation() -> None:
    rec = TimelineRecorder()
    rec.create("dot", "circle", {"x": 0.0, "position": [0.0, 0.0]})
    with rec.together():
        rec.animate("dot", "x", 10.0, 1.0)
        rec.animate("dot", "position", [100.0, -50.0], 1.0)
    rec.set("dot", "label", "done")

    mid = sample_frame(rec.mutations, 500.0)
    assert mid["dot"]["x"] == pytest.approx(5.0)
    assert mid["dot"]["position"] == pytest.approx([50.0, -25.0])
    assert "label" not in mid["dot"]

    end = sample_frame(rec.mutations, 1000.0)
    assert end["dot"]["x"] == 10.0
    assert end["dot"]["label"] == "done"


def test_iter_frames_covers_whole_duration() -> None:
    rec = TimelineRecorder()
    rec.create("dot", "circle", {"x": 0.0})
    rec.animate("dot", "x", 1.0, 0.1)
    frames = list(iter_frames(rec.mutations, rec.at_ms, fps=20))
    assert [at_ms for at_ms, _ in frames] == [0.0, 50.0, 100.0]
    assert frames[-1][1]["dot"]["x"] == 1.0


def test_easing_curves_hit_endpoints() -> None:
    for name in ("linear", "easeInCubic", "easeOutCubic", "easeInOutCubic"):
        fn = get_easing(name)
        assert fn(0.0) == 0.0
        assert fn(1.0) == 1.0
    assert ease_in_out_cubic(0.5) == pytest.approx(0.5)
    assert get_easing("bounce") is linear


def test_interpolate_snaps_non_numeric_values() -> None:
    assert interpolate(0, 4, 0.25) == 1.0
    assert interpolate("#000000", "#FFFFFF", 0.5) == "#000000"
    assert interpolate("#000000", "#FFFFFF", 1.0) == "#FFFFFF"
