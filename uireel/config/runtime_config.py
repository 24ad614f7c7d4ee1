from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = PROJECT_ROOT / ".env"

VALID_RENDER_MODES = {"screenshot", "reconstructed", "hybrid"}

EDITABLE_KEYS = {
    "UIREEL_CANVAS_WIDTH",
    "UIREEL_CANVAS_HEIGHT",
    "UIREEL_FINAL_HOLD_S",
    "UIREEL_MAX_ACTIONS",
    "UIREEL_MAX_SCENES",
    "UIREEL_FRAME_RATE",
    "UIREEL_RENDER_MODE",
    "UIREEL_ASSETS_DIR",
}

_INT_RANGES = {
    "UIREEL_CANVAS_WIDTH": (16, 7680),
    "UIREEL_CANVAS_HEIGHT": (16, 4320),
    "UIREEL_MAX_ACTIONS": (1, 10_000),
    "UIREEL_MAX_SCENES": (1, 1000),
    "UIREEL_FRAME_RATE": (1, 240),
}

MAX_FINAL_HOLD_S = 60.0


@dataclass(frozen=True)
class PlaybackPolicy:
    canvas_width: int
    canvas_height: int
    final_hold_s: float
    max_actions: int
    max_scenes: int
    frame_rate: int
    render_mode: str


def _env_int(name: str, fallback: int, min_value: int = 1, max_value: int = 10_000) -> int:
    raw = str(os.getenv(name, "")).strip()
    if not raw:
        return fallback
    try:
        value = int(raw)
    except ValueError:
        return fallback
    return max(min_value, min(max_value, value))


def _env_float(name: str, fallback: float, min_value: float = 0.0, max_value: float = MAX_FINAL_HOLD_S) -> float:
    raw = str(os.getenv(name, "")).strip()
    if not raw:
        return fallback
    try:
        value = float(raw)
    except ValueError:
        return fallback
    return max(min_value, min(max_value, value))


def _env_choice(name: str, fallback: str, choices: set[str]) -> str:
    raw = str(os.getenv(name, "")).strip().lower()
    return raw if raw in choices else fallback


def default_policy() -> PlaybackPolicy:
    return PlaybackPolicy(
        canvas_width=_env_int("UIREEL_CANVAS_WIDTH", 1920, *_INT_RANGES["UIREEL_CANVAS_WIDTH"]),
        canvas_height=_env_int("UIREEL_CANVAS_HEIGHT", 1080, *_INT_RANGES["UIREEL_CANVAS_HEIGHT"]),
        final_hold_s=_env_float("UIREEL_FINAL_HOLD_S", 1.0),
        max_actions=_env_int("UIREEL_MAX_ACTIONS", 500, *_INT_RANGES["UIREEL_MAX_ACTIONS"]),
        max_scenes=_env_int("UIREEL_MAX_SCENES", 32, *_INT_RANGES["UIREEL_MAX_SCENES"]),
        frame_rate=_env_int("UIREEL_FRAME_RATE", 60, *_INT_RANGES["UIREEL_FRAME_RATE"]),
        render_mode=_env_choice("UIREEL_RENDER_MODE", "screenshot", VALID_RENDER_MODES),
    )


def parse_env(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    values: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip()
    return values


def normalized_editable(values: dict[str, Any]) -> dict[str, str]:
    clean: dict[str, str] = {}
    for key, value in values.items():
        if key not in EDITABLE_KEYS:
            continue
        clean[key] = str(value).strip()
    return clean


def validate_setup(values: dict[str, str]) -> dict[str, Any]:
    errors: list[str] = []
    warnings: list[str] = []

    for key, (lo, hi) in _INT_RANGES.items():
        raw = values.get(key, "").strip()
        if not raw:
            continue
        try:
            number = int(raw)
        except ValueError:
            errors.append(f"{key} must be an integer")
            continue
        if number < lo or number > hi:
            errors.append(f"{key} must be between {lo} and {hi}")

    hold = values.get("UIREEL_FINAL_HOLD_S", "").strip()
    if hold:
        try:
            hold_s = float(hold)
            if hold_s < 0:
                errors.append("UIREEL_FINAL_HOLD_S must not be negative")
            elif hold_s > MAX_FINAL_HOLD_S:
                errors.append(f"UIREEL_FINAL_HOLD_S must be at most {MAX_FINAL_HOLD_S:g}")
        except ValueError:
            errors.append("UIREEL_FINAL_HOLD_S must be a number")

    mode = values.get("UIREEL_RENDER_MODE", "").strip().lower() or "screenshot"
    if mode not in VALID_RENDER_MODES:
        errors.append(f"Unsupported render mode: {mode}")

    assets_dir = values.get("UIREEL_ASSETS_DIR", "").strip()
    if mode == "hybrid" and not assets_dir:
        warnings.append("UIREEL_ASSETS_DIR is empty; hybrid playback will never promote the asset layer")
    if assets_dir and not Path(assets_dir).expanduser().is_dir():
        warnings.append(f"{assets_dir} is not a directory")

    unknown = sorted(key for key in values if key.startswith("UIREEL_") and key not in EDITABLE_KEYS)
    for key in unknown:
        warnings.append(f"{key} is not a recognised setting")

    return {"ok": len(errors) == 0, "errors": errors, "warnings": warnings}


__all__ = [
    "EDITABLE_KEYS",
    "ENV_PATH",
    "MAX_FINAL_HOLD_S",
    "VALID_RENDER_MODES",
    "PlaybackPolicy",
    "default_policy",
    "normalized_editable",
    "parse_env",
    "validate_setup",
]
