from __future__ import annotations

from uireel.protocol.models import Geometry

TEXT_PADDING_PX = 12.0


def to_render_space(geometry: Geometry, canvas_width: float, canvas_height: float) -> tuple[float, float]:
    """Centre of a top-left pixel rectangle, in canvas-centred coordinates.

    Every on-screen placement derived from an element (cursor target,
    highlight, typed text) goes through this one conversion.
    """
    return (
        geometry.x + geometry.width / 2.0 - canvas_width / 2.0,
        geometry.y + geometry.height / 2.0 - canvas_height / 2.0,
    )


def from_render_space(
    center: tuple[float, float],
    width: float,
    height: float,
    canvas_width: float,
    canvas_height: float,
) -> Geometry:
    cx, cy = center
    return Geometry(
        x=cx - width / 2.0 + canvas_width / 2.0,
        y=cy - height / 2.0 + canvas_height / 2.0,
        width=width,
        height=height,
    )


def text_anchor(
    geometry: Geometry,
    canvas_width: float,
    canvas_height: float,
    padding: float = TEXT_PADDING_PX,
) -> tuple[float, float]:
    # left interior edge, vertically centred
    cx, cy = to_render_space(geometry, canvas_width, canvas_height)
    return (cx - geometry.width / 2.0 + padding, cy)


def canvas_origin(canvas_width: float, canvas_height: float) -> tuple[float, float]:
    return to_render_space(Geometry(x=0.0, y=0.0, width=0.0, height=0.0), canvas_width, canvas_height)


__all__ = ["TEXT_PADDING_PX", "canvas_origin", "from_render_space", "text_anchor", "to_render_space"]
