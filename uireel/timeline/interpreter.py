from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable

from uireel.config.runtime_config import PlaybackPolicy, default_policy
from uireel.protocol.models import Action, SceneMap, Storyboard, UIElement, load_storyboard
from uireel.timeline import feedback
from uireel.timeline.assets import AssetManifest
from uireel.timeline.modes import RENDER_MODES, RenderMode, create_render_mode
from uireel.timeline.nodes import (
    CURSOR,
    HIGHLIGHT,
    RIPPLE,
    TYPING_TEXT,
    NodeIndex,
    Palette,
    build_overlays,
    palette_for,
    recolor_overlays,
)
from uireel.timeline.recorder import TimelineRecorder
from uireel.timeline.transform import canvas_origin, text_anchor, to_render_space

logger = logging.getLogger("uireel.interpreter")

PHASE_IDLE = "idle"
PHASE_RUNNING = "running"
PHASE_DISPATCHING = "dispatching"
PHASE_FINISHED = "finished"

STATUS_OK = "ok"
STATUS_SKIPPED = "skipped"

FINAL_HIGHLIGHT_FADE_S = 0.5
CLICK_PRESS_SHARE = 0.4
MAX_TYPING_FONT_SIZE = 16.0
NON_EDITABLE_KINDS = frozenset({"image", "icon", "logo"})


@dataclass
class PlaybackError(RuntimeError):
    code: str
    message: str
    detail: dict[str, Any]

    def __str__(self) -> str:
        return self.message


@dataclass
class PlaybackState:
    scene: SceneMap
    palette: Palette
    cursor: tuple[float, float]
    cursor_scale: float = 1.0
    active_layer: str = "screenshot"
    pointer: int = 0
    last_target: UIElement | None = None


@dataclass
class PlaybackResult:
    mode: str
    mutations: list[dict[str, Any]]
    trace: list[dict[str, Any]]
    diagnostics: list[dict[str, Any]]
    duration_ms: float
    final_state: dict[str, dict[str, Any]]
    final_scene_id: str
    cancelled: bool = False

    def logical_trace(self) -> list[tuple[str, str | None, str]]:
        return [(row["kind"], row["target"], row["status"]) for row in self.trace]

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "duration_ms": self.duration_ms,
            "final_scene_id": self.final_scene_id,
            "cancelled": self.cancelled,
            "trace": self.trace,
            "diagnostics": self.diagnostics,
            "mutations": self.mutations,
            "final_state": self.final_state,
        }


@dataclass
class _Run:
    storyboard: Storyboard
    recorder: TimelineRecorder
    mode: RenderMode
    state: PlaybackState
    rng: random.Random
    index: NodeIndex = field(default_factory=NodeIndex)


class TimelineInterpreter:
    """Walks a storyboard's actions in order and records the resulting animation.

    The rendering mode is fixed at construction. Each ``play`` call owns a
    fresh recorder and playback state; the storyboard itself is never
    mutated. A bad action is skipped and reported in ``diagnostics``.
    """

    def __init__(
        self,
        mode: str = "screenshot",
        *,
        assets: AssetManifest | None = None,
        policy: PlaybackPolicy | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        key = str(mode or "").strip().lower()
        if key not in RENDER_MODES:
            raise ValueError(f"unknown render mode '{mode}'; expected one of {sorted(RENDER_MODES)}")
        self.mode = key
        self.assets = assets or AssetManifest()
        self.policy = policy or default_policy()
        self._rng = rng or random.Random(seed)
        self.phase = PHASE_IDLE
        self._handlers: dict[str, Callable[[_Run, Action], dict[str, Any]]] = {
            "cursor_move": self._cursor_move,
            "click": self._click,
            "type": self._type,
            "wait": self._wait,
            "switch_scene": self._switch_scene,
        }

    @property
    def canvas(self) -> tuple[int, int]:
        return self.policy.canvas_width, self.policy.canvas_height

    def play(self, storyboard: Storyboard, *, should_stop: Callable[[], bool] | None = None) -> PlaybackResult:
        if not storyboard.scenes:
            raise ValueError("storyboard has no scenes")
        width, height = self.canvas
        recorder = TimelineRecorder()
        render_mode = create_render_mode(self.mode, recorder, width, height, self.assets)
        scene = storyboard.scenes[0]
        palette = palette_for(scene.color_scheme)
        run = _Run(
            storyboard=storyboard,
            recorder=recorder,
            mode=render_mode,
            state=PlaybackState(scene=scene, palette=palette, cursor=canvas_origin(width, height)),
            rng=self._rng,
        )
        run.index.rebuild(render_mode.activate(scene))
        run.state.active_layer = render_mode.active_layer()
        build_overlays(recorder, palette, run.state.cursor)

        trace: list[dict[str, Any]] = []
        diagnostics: list[dict[str, Any]] = []
        cancelled = False
        self.phase = PHASE_RUNNING
        logger.info(
            "playback started mode=%s scenes=%d actions=%d",
            self.mode,
            len(storyboard.scenes),
            len(storyboard.actions),
        )

        for idx, action in enumerate(storyboard.actions):
            if should_stop is not None and should_stop():
                cancelled = True
                logger.info("playback stopped by host before action %d", idx)
                break
            run.state.pointer = idx
            self.phase = PHASE_DISPATCHING
            entry: dict[str, Any] = {
                "index": idx,
                "kind": action.kind,
                "target": action.target_element_id,
                "scene_id": run.state.scene.scene_id,
                "status": STATUS_OK,
                "started_at_ms": recorder.at_ms,
            }
            try:
                handler = self._handlers.get(action.kind)
                if handler is None:
                    raise PlaybackError(
                        code="unknown_action_kind",
                        message=f"action kind '{action.kind}' is not supported",
                        detail={"kind": action.kind},
                    )
                entry["detail"] = handler(run, action)
            except PlaybackError as exc:
                logger.warning("action %d (%s) skipped: %s", idx, action.kind, exc.message)
                diagnostics.append({"index": idx, "code": exc.code, "message": exc.message, "detail": exc.detail})
                entry["status"] = STATUS_SKIPPED
                entry["detail"] = {"code": exc.code}
            entry["ended_at_ms"] = recorder.at_ms
            trace.append(entry)
            self.phase = PHASE_RUNNING

        feedback.hide_highlight(recorder, HIGHLIGHT, FINAL_HIGHLIGHT_FADE_S)
        recorder.wait(self.policy.final_hold_s)
        self.phase = PHASE_FINISHED
        logger.info(
            "playback finished duration_ms=%.1f skipped=%d cancelled=%s",
            recorder.at_ms,
            len(diagnostics),
            cancelled,
        )
        return PlaybackResult(
            mode=self.mode,
            mutations=recorder.mutations,
            trace=trace,
            diagnostics=diagnostics,
            duration_ms=recorder.at_ms,
            final_state=recorder.state.snapshot(),
            final_scene_id=run.state.scene.scene_id,
            cancelled=cancelled,
        )

    def _resolve(self, run: _Run, action: Action) -> UIElement:
        if not action.target_element_id:
            if run.state.last_target is not None:
                return run.state.last_target
            raise PlaybackError(
                code="target_required",
                message=f"'{action.kind}' has no target and no element was focused before it",
                detail={"kind": action.kind},
            )
        element = run.state.scene.element(action.target_element_id)
        if element is None:
            raise PlaybackError(
                code="target_not_found",
                message=f"element '{action.target_element_id}' is not in scene '{run.state.scene.scene_id}'",
                detail={"element_id": action.target_element_id, "scene_id": run.state.scene.scene_id},
            )
        return element

    def _cursor_move(self, run: _Run, action: Action) -> dict[str, Any]:
        if not action.target_element_id:
            raise PlaybackError(
                code="target_required",
                message="'cursor_move' requires targetElementId",
                detail={"kind": action.kind},
            )
        element = self._resolve(run, action)
        recorder = run.recorder
        width, height = self.canvas
        center = to_render_space(element.geometry, width, height)

        feedback.show_highlight(recorder, HIGHLIGHT, center, element.geometry.width, element.geometry.height)
        promoted = run.mode.before_cursor_move(element.id)
        if promoted:
            run.state.active_layer = run.mode.active_layer()
        node = run.mode.feedback_node(element.id, run.index)
        if node is not None:
            feedback.glow(recorder, node, run.state.palette.highlight, feedback.FOCUS_GLOW_BLUR)
        feedback.move_cursor(recorder, CURSOR, center, action.duration)
        run.state.cursor = center
        feedback.pulse_highlight(recorder, HIGHLIGHT)
        run.state.last_target = element
        return {"position": [center[0], center[1]], "promoted": promoted, "feedback_node": node}

    def _click(self, run: _Run, action: Action) -> dict[str, Any]:
        element = self._resolve(run, action)
        recorder = run.recorder
        node = run.mode.feedback_node(element.id, run.index)
        origin = run.state.cursor
        rest_scale = run.state.cursor_scale
        press_s = action.duration * CLICK_PRESS_SHARE
        release_s = action.duration - press_s

        feedback.press(
            recorder,
            CURSOR,
            origin,
            rest_scale,
            press_s,
            target_node=node,
            glow_color=run.state.palette.highlight if node is not None else None,
        )
        feedback.ripple(recorder, RIPPLE, origin)
        feedback.release(recorder, CURSOR, origin, rest_scale, release_s, target_node=node)
        with recorder.together():
            feedback.hide_highlight(recorder, HIGHLIGHT)
            if node is not None:
                feedback.clear_glow(recorder, node, feedback.HIGHLIGHT_HIDE_S)
        run.state.last_target = element
        return {"point": [origin[0], origin[1]], "feedback_node": node}

    def _type(self, run: _Run, action: Action) -> dict[str, Any]:
        element = self._resolve(run, action)
        if element.kind in NON_EDITABLE_KINDS:
            raise PlaybackError(
                code="target_not_editable",
                message=f"element '{element.id}' ({element.kind}) cannot receive text",
                detail={"element_id": element.id, "kind": element.kind},
            )
        text = action.payload or ""
        if not text:
            raise PlaybackError(
                code="payload_required",
                message="'type' needs non-empty payload text",
                detail={"element_id": element.id},
            )
        recorder = run.recorder
        width, height = self.canvas
        node = run.mode.feedback_node(element.id, run.index)
        if node is not None:
            feedback.glow(recorder, node, run.state.palette.highlight, feedback.TYPING_GLOW_BLUR)

        anchor = text_anchor(element.geometry, width, height)
        styling = element.styling
        font_size = (styling.font_size if styling else None) or min(
            MAX_TYPING_FONT_SIZE, element.geometry.height * 0.5
        )
        increments = feedback.typing_increments(text, action.duration, run.rng)
        typed_s = feedback.type_text(
            recorder,
            TYPING_TEXT,
            CURSOR,
            text,
            increments,
            anchor,
            font_size,
            run.state.cursor,
        )
        if node is not None:
            feedback.clear_glow(recorder, node)
        recorder.wait(feedback.SETTLE_S)
        run.state.last_target = element
        return {
            "text": text,
            "characters": len(text),
            "typed_s": typed_s,
            "anchor": [anchor[0], anchor[1]],
            "feedback_node": node,
        }

    def _wait(self, run: _Run, action: Action) -> dict[str, Any]:
        run.recorder.wait(action.duration)
        return {}

    def _switch_scene(self, run: _Run, action: Action) -> dict[str, Any]:
        nxt = run.storyboard.scene(action.payload) if action.payload else None
        if nxt is None:
            raise PlaybackError(
                code="scene_not_found",
                message=f"scene '{action.payload}' is not part of the storyboard",
                detail={"scene_id": action.payload, "active_scene_id": run.state.scene.scene_id},
            )
        recorder = run.recorder
        half = action.duration / 2.0
        previous = run.state.scene.scene_id

        with recorder.together():
            for layer in run.mode.visible_layers():
                recorder.animate(layer, "opacity", 0.0, half, "easeInCubic")
            recorder.animate(CURSOR, "opacity", 0.0, half)
            recorder.animate(HIGHLIGHT, "opacity", 0.0, half)

        run.state.scene = nxt
        run.index.rebuild(run.mode.activate(nxt, initial_opacity=0.0))
        run.state.active_layer = run.mode.active_layer()
        run.state.palette = palette_for(nxt.color_scheme)
        run.state.last_target = None
        recorder.set(TYPING_TEXT, "text", "")
        recorder.set(TYPING_TEXT, "opacity", 0.0)
        recolor_overlays(recorder, run.state.palette)

        with recorder.together():
            for layer in run.mode.visible_layers():
                recorder.animate(layer, "opacity", 1.0, half, "easeOutCubic")
            recorder.animate(CURSOR, "opacity", 1.0, half)
        return {"from_scene": previous, "to_scene": nxt.scene_id}


def play_storyboard(
    payload: Any,
    *,
    mode: str | None = None,
    assets: AssetManifest | None = None,
    seed: int | None = None,
    policy: PlaybackPolicy | None = None,
    resolve_references: bool = True,
) -> PlaybackResult:
    """Validate a wire-format storyboard and play it in one step."""
    policy = policy or default_policy()
    storyboard = load_storyboard(
        payload,
        resolve_references=resolve_references,
        max_scenes=policy.max_scenes,
        max_actions=policy.max_actions,
    )
    interpreter = TimelineInterpreter(mode or policy.render_mode, assets=assets, policy=policy, seed=seed)
    return interpreter.play(storyboard)


__all__ = [
    "PHASE_DISPATCHING",
    "PHASE_FINISHED",
    "PHASE_IDLE",
    "PHASE_RUNNING",
    "PlaybackError",
    "PlaybackResult",
    "PlaybackState",
    "TimelineInterpreter",
    "play_storyboard",
]
