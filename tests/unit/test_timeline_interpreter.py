from __future__ import annotations

import pytest

from uireel.config.runtime_config import PlaybackPolicy
from uireel.protocol import load_storyboard
from uireel.timeline import TimelineInterpreter, play_storyboard
from uireel.timeline.interpreter import PHASE_FINISHED, PHASE_IDLE


def _policy(**overrides) -> PlaybackPolicy:
    values = {
        "canvas_width": 1920,
        "canvas_height": 1080,
        "final_hold_s": 1.0,
        "max_actions": 500,
        "max_scenes": 32,
        "frame_rate": 60,
        "render_mode": "screenshot",
    }
    values.update(overrides)
    return PlaybackPolicy(**values)


def _ops(result, node: str, prop: str, op: str = "set") -> list[dict]:
    return [row for row in result.mutations if row["node"] == node and row["prop"] == prop and row["op"] == op]


def test_search_scenario_places_cursor_ripple_and_text(search_storyboard) -> None:
    result = TimelineInterpreter(policy=_policy(), seed=3).play(load_storyboard(search_storyboard))

    assert result.diagnostics == []
    assert [row["status"] for row in result.trace] == ["ok", "ok", "ok"]
    assert result.final_state["cursor"]["position"] == [85.0, -130.0]

    ripples = _ops(result, "ripple", "position")
    assert len(ripples) == 1
    assert ripples[0]["value"] == [85.0, -130.0]

    text = result.final_state["typing_text"]
    assert text["text"] == "Hello World"
    assert text["position"] == [-203.0, -130.0]


def test_type_reveals_each_prefix_once(search_storyboard) -> None:
    result = TimelineInterpreter(policy=_policy(), seed=11).play(load_storyboard(search_storyboard))
    prefixes = [row["value"] for row in _ops(result, "typing_text", "text") if row["value"]]
    payload = "Hello World"
    assert prefixes == [payload[: idx + 1] for idx in range(len(payload))]


@pytest.mark.parametrize("seed", [0, 1, 7, 42, 1234])
def test_type_time_stays_within_jitter_bounds(search_storyboard, seed) -> None:
    result = TimelineInterpreter(policy=_policy(), seed=seed).play(load_storyboard(search_storyboard))
    typed_s = result.trace[2]["detail"]["typed_s"]
    assert 0.8 * 2.0 <= typed_s <= 1.2 * 2.0


def test_logical_trace_is_independent_of_jitter(search_storyboard) -> None:
    storyboard = load_storyboard(search_storyboard)
    first = TimelineInterpreter(policy=_policy(), seed=1).play(storyboard)
    second = TimelineInterpreter(policy=_policy(), seed=2).play(storyboard)
    assert first.logical_trace() == second.logical_trace()
    assert first.final_state["typing_text"]["text"] == second.final_state["typing_text"]["text"]


def test_same_seed_reproduces_mutations(search_storyboard) -> None:
    storyboard = load_storyboard(search_storyboard)
    first = TimelineInterpreter(policy=_policy(), seed=5).play(storyboard)
    second = TimelineInterpreter(policy=_policy(), seed=5).play(storyboard)
    assert first.mutations == second.mutations


def test_cursor_move_timing_follows_duration(search_storyboard) -> None:
    result = TimelineInterpreter(policy=_policy(), seed=1).play(load_storyboard(search_storyboard))
    move = result.trace[0]
    # highlight fade-in, the move itself, then a two-step pulse
    assert move["ended_at_ms"] - move["started_at_ms"] == pytest.approx(1700.0)
    cursor_moves = [row for row in _ops(result, "cursor", "position", op="animate") if row["easing"] == "easeInOutCubic"]
    assert cursor_moves[0]["duration_ms"] == 1000.0
    assert cursor_moves[0]["from"] == [-960.0, -540.0]


def test_click_restores_cursor_scale(search_storyboard) -> None:
    result = TimelineInterpreter(policy=_policy(), seed=1).play(load_storyboard(search_storyboard))
    click = result.trace[1]
    scales = [
        row
        for row in _ops(result, "cursor", "scale", op="animate")
        if click["started_at_ms"] <= row["at_ms"] < click["ended_at_ms"]
    ]
    assert [row["value"] for row in scales] == [pytest.approx(0.95), 1.0]
    assert result.final_state["cursor"]["scale"] == 1.0
    assert result.final_state["cursor"]["position"] == [85.0, -130.0]


def test_missing_target_is_skipped_without_cursor_motion(search_storyboard) -> None:
    search_storyboard["actions"].insert(0, {"kind": "cursor_move", "targetElementId": "ghost", "duration": 1.0})
    storyboard = load_storyboard(search_storyboard, resolve_references=False)
    result = TimelineInterpreter(policy=_policy(), seed=1).play(storyboard)

    assert len(result.diagnostics) == 1
    assert result.diagnostics[0]["code"] == "target_not_found"
    assert result.diagnostics[0]["index"] == 0
    skipped = result.trace[0]
    assert skipped["status"] == "skipped"
    assert skipped["started_at_ms"] == skipped["ended_at_ms"] == 0.0
    assert [row["status"] for row in result.trace[1:]] == ["ok", "ok", "ok"]
    moves = [row for row in _ops(result, "cursor", "position", op="animate") if row["easing"] == "easeInOutCubic"]
    assert len(moves) == 1
    assert result.final_state["cursor"]["position"] == [85.0, -130.0]


def test_unknown_scene_switch_keeps_active_scene(search_storyboard) -> None:
    search_storyboard["actions"].append({"kind": "switch_scene", "payload": "checkout", "duration": 0.5})
    search_storyboard["actions"].append({"kind": "click", "targetElementId": "search_input", "duration": 0.2})
    storyboard = load_storyboard(search_storyboard, resolve_references=False)
    result = TimelineInterpreter(policy=_policy(), seed=1).play(storyboard)

    assert [row["code"] for row in result.diagnostics] == ["scene_not_found"]
    assert result.final_scene_id == "search"
    assert result.trace[-1]["status"] == "ok"
    assert result.trace[-1]["scene_id"] == "search"


def test_unknown_action_kind_is_reported_and_skipped(search_storyboard) -> None:
    search_storyboard["actions"].insert(1, {"kind": "drag", "targetElementId": "search_input", "duration": 0.4})
    result = TimelineInterpreter(policy=_policy(), seed=1).play(load_storyboard(search_storyboard))
    assert result.diagnostics[0]["code"] == "unknown_action_kind"
    assert result.trace[1]["status"] == "skipped"
    assert result.final_state["typing_text"]["text"] == "Hello World"


def test_type_into_logo_is_not_editable(search_storyboard) -> None:
    search_storyboard["actions"].append({"kind": "type", "targetElementId": "brand_logo", "payload": "x"})
    result = TimelineInterpreter(policy=_policy(), seed=1).play(load_storyboard(search_storyboard))
    assert [row["code"] for row in result.diagnostics] == ["target_not_editable"]
    assert result.final_state["typing_text"]["text"] == "Hello World"


def test_empty_type_payload_is_skipped(search_storyboard) -> None:
    search_storyboard["actions"].append({"kind": "type", "targetElementId": "search_input", "payload": ""})
    result = TimelineInterpreter(policy=_policy(), seed=1).play(load_storyboard(search_storyboard))
    assert [row["code"] for row in result.diagnostics] == ["payload_required"]


def test_switch_scene_recolours_overlays_and_clears_text(two_scene_storyboard) -> None:
    result = TimelineInterpreter(policy=_policy(), seed=1).play(load_storyboard(two_scene_storyboard))

    assert result.diagnostics == []
    assert result.final_scene_id == "results"
    assert result.trace[2]["detail"] == {"from_scene": "search", "to_scene": "results"}
    state = result.final_state
    assert state["screenshot"]["src"] == "screens/results.png"
    assert state["screenshot"]["opacity"] == 1.0
    assert state["cursor"]["stroke"] == "#FFFFFF"
    assert state["highlight"]["stroke"] == "#8ab4f8"
    assert state["typing_text"]["text"] == ""
    # first_result: x=120 w=420 y=160 h=24 on a 1920x1080 canvas
    assert state["cursor"]["position"] == [-630.0, -368.0]


def test_final_hold_extends_duration(search_storyboard) -> None:
    storyboard = load_storyboard(search_storyboard)
    short = TimelineInterpreter(policy=_policy(final_hold_s=0.0), seed=9).play(storyboard)
    long = TimelineInterpreter(policy=_policy(final_hold_s=2.0), seed=9).play(storyboard)
    assert long.duration_ms - short.duration_ms == pytest.approx(2000.0)
    assert short.duration_ms - short.trace[-1]["ended_at_ms"] == pytest.approx(500.0)


def test_should_stop_cancels_between_actions(search_storyboard) -> None:
    calls = {"count": 0}

    def stop_after_first() -> bool:
        calls["count"] += 1
        return calls["count"] > 1

    interpreter = TimelineInterpreter(policy=_policy(), seed=1)
    assert interpreter.phase == PHASE_IDLE
    result = interpreter.play(load_storyboard(search_storyboard), should_stop=stop_after_first)
    assert result.cancelled is True
    assert [row["kind"] for row in result.trace] == ["cursor_move"]
    assert interpreter.phase == PHASE_FINISHED


def test_storyboard_is_not_mutated_by_playback(search_storyboard) -> None:
    storyboard = load_storyboard(search_storyboard)
    before = repr(storyboard)
    TimelineInterpreter(policy=_policy(), seed=1).play(storyboard)
    assert repr(storyboard) == before


def test_unknown_render_mode_is_rejected() -> None:
    with pytest.raises(ValueError):
        TimelineInterpreter("vector")


def test_play_storyboard_validates_and_plays(search_storyboard) -> None:
    result = play_storyboard(search_storyboard, mode="reconstructed", seed=2, policy=_policy())
    assert result.mode == "reconstructed"
    assert result.to_dict()["final_scene_id"] == "search"


def test_highlight_precedes_cursor_move_and_pulse_follows_arrival(search_storyboard) -> None:
    result = TimelineInterpreter(policy=_policy(), seed=1).play(load_storyboard(search_storyboard))
    highlight = _ops(result, "highlight", "opacity", op="animate")
    show, pulse = highlight[0], highlight[1]
    move = [row for row in _ops(result, "cursor", "position", op="animate") if row["easing"] == "easeInOutCubic"][0]

    assert show["seq"] < move["seq"]
    assert show["at_ms"] <= move["at_ms"]
    assert show["at_ms"] + show["duration_ms"] <= move["at_ms"]
    assert pulse["seq"] > move["seq"]
    assert pulse["at_ms"] >= move["at_ms"] + move["duration_ms"]


def test_switch_scene_fades_out_then_in_over_half_duration_each(two_scene_storyboard) -> None:
    result = TimelineInterpreter(policy=_policy(), seed=1).play(load_storyboard(two_scene_storyboard))
    switch = result.trace[2]
    assert switch["kind"] == "switch_scene"
    assert switch["ended_at_ms"] - switch["started_at_ms"] == pytest.approx(800.0)

    def fades(node: str) -> list[dict]:
        return [
            row
            for row in _ops(result, node, "opacity", op="animate")
            if switch["started_at_ms"] <= row["at_ms"] < switch["ended_at_ms"]
        ]

    for node in ("screenshot", "cursor"):
        fade_out, fade_in = fades(node)
        assert (fade_out["value"], fade_out["duration_ms"]) == (0.0, 400.0)
        assert (fade_in["value"], fade_in["duration_ms"]) == (1.0, 400.0)
        assert fade_out["at_ms"] == pytest.approx(switch["started_at_ms"])
        assert fade_in["at_ms"] == pytest.approx(switch["started_at_ms"] + 400.0)
