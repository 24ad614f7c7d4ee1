"""Reusable visual feedback behaviours.

Each primitive receives the recorder and the ids of the nodes it may touch,
records its mutations, and leaves the recorder clock at the end of its own
animation. None of them reads or writes playback state.
"""

from __future__ import annotations

import random
from typing import Sequence

from uireel.timeline.nodes import RIPPLE_END_SIZE, RIPPLE_START_SIZE
from uireel.timeline.recorder import TimelineRecorder

HIGHLIGHT_SHOW_S = 0.3
HIGHLIGHT_SHOW_OPACITY = 0.6
HIGHLIGHT_PULSE_S = 0.2
HIGHLIGHT_PULSE_HIGH = 0.8
HIGHLIGHT_PULSE_LOW = 0.4
HIGHLIGHT_HIDE_S = 0.3

PRESS_OFFSET_PX = 3.0
PRESS_SCALE = 0.95
PRESS_TARGET_OPACITY = 0.8
RIPPLE_S = 0.4

FOCUS_GLOW_BLUR = 8.0
TYPING_GLOW_BLUR = 12.0
GLOW_IN_S = 0.3
GLOW_OUT_S = 0.4

BOB_OFFSET_PX = 2.0
BOB_EVERY = 3
TYPING_JITTER = (0.8, 1.2)
SETTLE_S = 0.5


def show_highlight(
    recorder: TimelineRecorder,
    node_id: str,
    center: tuple[float, float],
    width: float,
    height: float,
) -> None:
    recorder.set(node_id, "position", [center[0], center[1]])
    recorder.set(node_id, "width", width)
    recorder.set(node_id, "height", height)
    recorder.animate(node_id, "opacity", HIGHLIGHT_SHOW_OPACITY, HIGHLIGHT_SHOW_S, "easeOutCubic")


def pulse_highlight(recorder: TimelineRecorder, node_id: str) -> None:
    recorder.animate(node_id, "opacity", HIGHLIGHT_PULSE_HIGH, HIGHLIGHT_PULSE_S, "easeInOutCubic")
    recorder.animate(node_id, "opacity", HIGHLIGHT_PULSE_LOW, HIGHLIGHT_PULSE_S, "easeInOutCubic")


def hide_highlight(recorder: TimelineRecorder, node_id: str, duration_s: float = HIGHLIGHT_HIDE_S) -> None:
    recorder.animate(node_id, "opacity", 0.0, duration_s, "easeInCubic")


def move_cursor(
    recorder: TimelineRecorder,
    cursor_id: str,
    target: tuple[float, float],
    duration_s: float,
) -> None:
    recorder.animate(cursor_id, "position", [target[0], target[1]], duration_s, "easeInOutCubic")


def glow(recorder: TimelineRecorder, node_id: str, color: str, blur: float, duration_s: float = GLOW_IN_S) -> None:
    with recorder.together():
        recorder.animate(node_id, "shadowBlur", blur, duration_s)
        recorder.set(node_id, "shadowColor", color)


def clear_glow(recorder: TimelineRecorder, node_id: str, duration_s: float = GLOW_OUT_S) -> None:
    recorder.animate(node_id, "shadowBlur", 0.0, duration_s)


def press(
    recorder: TimelineRecorder,
    cursor_id: str,
    origin: tuple[float, float],
    rest_scale: float,
    duration_s: float,
    target_node: str | None = None,
    glow_color: str | None = None,
) -> None:
    with recorder.together():
        recorder.animate(cursor_id, "position", [origin[0], origin[1] + PRESS_OFFSET_PX], duration_s, "easeInCubic")
        recorder.animate(cursor_id, "scale", rest_scale * PRESS_SCALE, duration_s, "easeInCubic")
        if target_node is not None:
            recorder.animate(target_node, "scale", PRESS_SCALE, duration_s, "easeInCubic")
            recorder.animate(target_node, "opacity", PRESS_TARGET_OPACITY, duration_s)
            if glow_color is not None:
                glow(recorder, target_node, glow_color, FOCUS_GLOW_BLUR, duration_s)


def ripple(recorder: TimelineRecorder, ripple_id: str, point: tuple[float, float]) -> None:
    recorder.set(ripple_id, "position", [point[0], point[1]])
    recorder.set(ripple_id, "size", RIPPLE_START_SIZE)
    recorder.set(ripple_id, "opacity", 1.0)
    with recorder.together():
        recorder.animate(ripple_id, "size", RIPPLE_END_SIZE, RIPPLE_S, "easeOutCubic")
        recorder.animate(ripple_id, "opacity", 0.0, RIPPLE_S, "easeOutCubic")


def release(
    recorder: TimelineRecorder,
    cursor_id: str,
    origin: tuple[float, float],
    rest_scale: float,
    duration_s: float,
    target_node: str | None = None,
) -> None:
    with recorder.together():
        recorder.animate(cursor_id, "position", [origin[0], origin[1]], duration_s, "easeOutCubic")
        recorder.animate(cursor_id, "scale", rest_scale, duration_s, "easeOutCubic")
        if target_node is not None:
            recorder.animate(target_node, "scale", 1.0, duration_s, "easeOutCubic")
            recorder.animate(target_node, "opacity", 1.0, duration_s)


def typing_increments(text: str, duration_s: float, rng: random.Random) -> list[float]:
    """Per-character delays: an even share of ``duration_s``, each jittered."""
    if not text:
        return []
    base = max(0.0, float(duration_s)) / len(text)
    lo, hi = TYPING_JITTER
    return [base * rng.uniform(lo, hi) for _ in text]


def type_text(
    recorder: TimelineRecorder,
    text_id: str,
    cursor_id: str,
    text: str,
    increments: Sequence[float],
    anchor: tuple[float, float],
    font_size: float,
    cursor_rest: tuple[float, float],
) -> float:
    recorder.set(text_id, "position", [anchor[0], anchor[1]])
    recorder.set(text_id, "fontSize", font_size)
    recorder.set(text_id, "textAlign", "left")
    recorder.set(text_id, "opacity", 1.0)
    recorder.set(text_id, "text", "")

    started = recorder.now_s
    for idx, delay in enumerate(increments):
        recorder.set(text_id, "text", text[: idx + 1])
        if idx % BOB_EVERY == 0:
            recorder.animate(cursor_id, "position", [cursor_rest[0], cursor_rest[1] + BOB_OFFSET_PX], delay / 2.0)
            recorder.animate(cursor_id, "position", [cursor_rest[0], cursor_rest[1]], delay / 2.0)
        else:
            recorder.wait(delay)
    return recorder.now_s - started


def crossfade(
    recorder: TimelineRecorder,
    fade_out: Sequence[str],
    fade_in: Sequence[str],
    duration_s: float,
    easing: str = "easeInOutCubic",
) -> None:
    with recorder.together():
        for node_id in fade_out:
            recorder.animate(node_id, "opacity", 0.0, duration_s, easing)
        for node_id in fade_in:
            recorder.animate(node_id, "opacity", 1.0, duration_s, easing)


__all__ = [
    "SETTLE_S",
    "TYPING_GLOW_BLUR",
    "FOCUS_GLOW_BLUR",
    "TYPING_JITTER",
    "clear_glow",
    "crossfade",
    "glow",
    "hide_highlight",
    "move_cursor",
    "press",
    "pulse_highlight",
    "release",
    "ripple",
    "show_highlight",
    "type_text",
    "typing_increments",
]
