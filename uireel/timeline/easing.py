from __future__ import annotations

from typing import Any, Callable


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


def linear(t: float) -> float:
    return _clamp(t)


def ease_in_cubic(t: float) -> float:
    t = _clamp(t)
    return t * t * t


def ease_out_cubic(t: float) -> float:
    t = _clamp(t)
    return 1.0 - (1.0 - t) ** 3


def ease_in_out_cubic(t: float) -> float:
    t = _clamp(t)
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - ((-2.0 * t + 2.0) ** 3) / 2.0


EASINGS: dict[str, Callable[[float], float]] = {
    "linear": linear,
    "easeInCubic": ease_in_cubic,
    "easeOutCubic": ease_out_cubic,
    "easeInOutCubic": ease_in_out_cubic,
}


def get_easing(name: str | None) -> Callable[[float], float]:
    return EASINGS.get(str(name or "linear"), linear)


def interpolate(start: Any, end: Any, progress: float) -> Any:
    """Blend numbers and equal-length number lists; anything else snaps at the end."""
    if isinstance(start, (int, float)) and isinstance(end, (int, float)) and not isinstance(start, bool):
        return start + (end - start) * progress
    if (
        isinstance(start, (list, tuple))
        and isinstance(end, (list, tuple))
        and len(start) == len(end)
        and all(isinstance(v, (int, float)) for v in [*start, *end])
    ):
        return [a + (b - a) * progress for a, b in zip(start, end)]
    return end if progress >= 1.0 else start


__all__ = [
    "EASINGS",
    "ease_in_cubic",
    "ease_in_out_cubic",
    "ease_out_cubic",
    "get_easing",
    "interpolate",
    "linear",
]
