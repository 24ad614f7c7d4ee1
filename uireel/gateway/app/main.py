from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from time import perf_counter
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from pydantic import BaseModel, Field

from uireel.config.runtime_config import (
    EDITABLE_KEYS,
    ENV_PATH,
    default_policy,
    normalized_editable,
    parse_env,
    validate_setup,
)
from uireel.protocol import ACTION_KINDS, ELEMENT_KINDS, StoryboardValidationError, load_storyboard, storyboard_summary
from uireel.protocol.models import Storyboard
from uireel.timeline import (
    RENDER_MODES,
    AssetManifest,
    PlaybackResult,
    TimelineInterpreter,
    build_composition,
    sample_frame,
)
from uireel.versioning import project_revision, project_version

logger = logging.getLogger("uireel.gateway")

REQUEST_COUNTER = Counter(
    "uireel_gateway_http_requests_total",
    "Total gateway HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "uireel_gateway_http_latency_seconds",
    "Gateway request latency",
    ["method", "path"],
    buckets=(0.01, 0.03, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
PLAYBACK_COUNTER = Counter(
    "uireel_playbacks_total",
    "Storyboard playbacks by render mode and outcome",
    ["mode", "outcome"],
)
PLAYBACK_LATENCY = Histogram(
    "uireel_playback_build_seconds",
    "Wall time spent building one playback timeline",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)
DIAGNOSTIC_COUNTER = Counter(
    "uireel_playback_diagnostics_total",
    "Skipped actions by diagnostic code",
    ["code"],
)


class PlaybackRequest(BaseModel):
    storyboard: dict[str, Any]
    mode: str | None = None
    assets: dict[str, str] = Field(default_factory=dict)
    seed: int | None = None
    strict: bool = True


class StoryboardRequest(PlaybackRequest):
    include_composition: bool = False


class FrameRequest(PlaybackRequest):
    at_ms: float = Field(default=0.0, ge=0)


class ValidateRequest(BaseModel):
    storyboard: dict[str, Any]
    strict: bool = True


class SetupValidateRequest(BaseModel):
    values: dict[str, str] = Field(default_factory=dict)


app = FastAPI(title="uireel Gateway", version=project_version())


@app.middleware("http")
async def metrics_middleware(request, call_next):  # type: ignore[override]
    started = perf_counter()
    response = await call_next(request)
    duration_s = perf_counter() - started
    REQUEST_COUNTER.labels(method=request.method, path=request.url.path, status=str(response.status_code)).inc()
    REQUEST_LATENCY.labels(method=request.method, path=request.url.path).observe(duration_s)
    return response


def _build_setup_state() -> dict[str, str]:
    values = parse_env(ENV_PATH)
    for key in EDITABLE_KEYS:
        if key not in values and key in os.environ:
            values[key] = os.getenv(key, "")
    return values


def _load(payload: dict[str, Any], strict: bool) -> Storyboard:
    policy = default_policy()
    try:
        return load_storyboard(
            payload,
            resolve_references=strict,
            max_scenes=policy.max_scenes,
            max_actions=policy.max_actions,
        )
    except StoryboardValidationError as exc:
        logger.info("storyboard rejected with %d issue(s)", len(exc.issues))
        raise HTTPException(
            status_code=422,
            detail={"error": "storyboard_invalid", "schema_path": exc.schema_path, "issues": exc.issues},
        ) from exc


def _asset_manifest(req: PlaybackRequest, storyboard: Storyboard) -> AssetManifest:
    if req.assets:
        return AssetManifest.from_mapping(req.assets)
    assets_dir = str(os.getenv("UIREEL_ASSETS_DIR", "")).strip()
    if not assets_dir:
        return AssetManifest()
    element_ids = [element.id for scene in storyboard.scenes for element in scene.elements]
    return AssetManifest.discover(Path(assets_dir).expanduser(), element_ids)


def _play(req: PlaybackRequest) -> tuple[Storyboard, AssetManifest, PlaybackResult]:
    storyboard = _load(req.storyboard, req.strict)
    policy = default_policy()
    mode = str(req.mode or policy.render_mode).strip().lower()
    if mode not in RENDER_MODES:
        raise HTTPException(
            status_code=422,
            detail={"error": "invalid_render_mode", "mode": req.mode, "supported": sorted(RENDER_MODES)},
        )
    assets = _asset_manifest(req, storyboard)
    started = perf_counter()
    result = TimelineInterpreter(mode, assets=assets, policy=policy, seed=req.seed).play(storyboard)
    PLAYBACK_LATENCY.observe(perf_counter() - started)
    PLAYBACK_COUNTER.labels(mode=mode, outcome="degraded" if result.diagnostics else "clean").inc()
    for row in result.diagnostics:
        DIAGNOSTIC_COUNTER.labels(code=row["code"]).inc()
    return storyboard, assets, result


@app.get("/health")
def health() -> dict:
    return {
        "status": "ok",
        "service": "gateway",
        "revision": project_revision(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/v1/runtime/capabilities")
def runtime_capabilities() -> dict[str, Any]:
    policy = default_policy()
    return {
        "version": project_version(),
        "render_modes": sorted(RENDER_MODES),
        "default_render_mode": policy.render_mode,
        "action_kinds": list(ACTION_KINDS),
        "element_kinds": list(ELEMENT_KINDS),
        "canvas": {"width": policy.canvas_width, "height": policy.canvas_height},
        "limits": {
            "max_scenes": policy.max_scenes,
            "max_actions": policy.max_actions,
            "frame_rate": policy.frame_rate,
            "final_hold_s": policy.final_hold_s,
        },
    }


@app.post("/v1/storyboards/validate")
def validate_storyboard(req: ValidateRequest) -> dict[str, Any]:
    storyboard = _load(req.storyboard, req.strict)
    return {"ok": True, **storyboard_summary(storyboard)}


@app.post("/v1/storyboards/play")
def play(req: StoryboardRequest) -> dict[str, Any]:
    storyboard, assets, result = _play(req)
    payload = result.to_dict()
    payload["summary"] = storyboard_summary(storyboard)
    if req.include_composition:
        policy = default_policy()
        scene = storyboard.scene(result.final_scene_id) or storyboard.scenes[0]
        payload["composition"] = build_composition(
            result,
            scene,
            (policy.canvas_width, policy.canvas_height),
            frame_rate=policy.frame_rate,
            assets=assets,
        )
    return payload


@app.post("/v1/storyboards/frame")
def frame(req: FrameRequest) -> dict[str, Any]:
    _, _, result = _play(req)
    at_ms = min(float(req.at_ms), result.duration_ms)
    return {
        "mode": result.mode,
        "at_ms": at_ms,
        "duration_ms": result.duration_ms,
        "nodes": sample_frame(result.mutations, at_ms),
    }


@app.post("/v1/setup/validate")
def setup_validate(req: SetupValidateRequest) -> dict:
    current = _build_setup_state()
    incoming = normalized_editable(req.values)
    merged = {**current, **incoming}
    result = validate_setup(merged)
    return {"ok": result["ok"], "errors": result["errors"], "warnings": result["warnings"]}
