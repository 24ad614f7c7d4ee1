from __future__ import annotations

from dataclasses import dataclass

from uireel.protocol.models import ColorScheme
from uireel.timeline.recorder import TimelineRecorder

CURSOR = "cursor"
HIGHLIGHT = "highlight"
RIPPLE = "ripple"
TYPING_TEXT = "typing_text"
SCREENSHOT = "screenshot"
BACKGROUND = "background"
ASSET_LAYER = "assets"
ELEMENT_LAYER = "elements"

FALLBACK_HIGHLIGHT = "#4285f4"
CURSOR_PATH = "M 0 0 L 0 20 L 5 16 L 8 24 L 10 23 L 7 15 L 13 15 Z"
FONT_FAMILY = "'Segoe UI', Arial, sans-serif"
RIPPLE_START_SIZE = 40.0
RIPPLE_END_SIZE = 80.0


@dataclass(frozen=True)
class Palette:
    cursor_stroke: str
    highlight: str
    text_fill: str
    background: str
    theme: str


def palette_for(scheme: ColorScheme) -> Palette:
    dark = scheme.theme == "dark"
    return Palette(
        cursor_stroke="#FFFFFF" if dark else "#000000",
        highlight=scheme.primary or FALLBACK_HIGHLIGHT,
        text_fill="#E8EAED" if dark else "#202124",
        background=scheme.background,
        theme=scheme.theme,
    )


def asset_node_id(element_id: str) -> str:
    return f"asset:{element_id}"


def element_node_id(element_id: str) -> str:
    return f"element:{element_id}"


class NodeIndex:
    """``element id -> node id`` map, rebuilt once per scene activation."""

    def __init__(self) -> None:
        self._nodes: dict[str, str] = {}

    def rebuild(self, mapping: dict[str, str]) -> None:
        self._nodes = dict(mapping)

    def get(self, element_id: str | None) -> str | None:
        if not element_id:
            return None
        return self._nodes.get(element_id)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)


def build_overlays(recorder: TimelineRecorder, palette: Palette, cursor_start: tuple[float, float]) -> None:
    recorder.create(
        HIGHLIGHT,
        "rect",
        {
            "position": [0.0, 0.0],
            "width": 0.0,
            "height": 0.0,
            "opacity": 0.0,
            "stroke": palette.highlight,
            "lineWidth": 3,
            "radius": 4,
            "lineDash": [8, 4],
            "zIndex": 50,
        },
    )
    recorder.create(
        TYPING_TEXT,
        "text",
        {
            "position": [0.0, 0.0],
            "text": "",
            "opacity": 0.0,
            "fontSize": 16.0,
            "fill": palette.text_fill,
            "fontFamily": FONT_FAMILY,
            "textAlign": "left",
            "zIndex": 99,
        },
    )
    recorder.create(
        RIPPLE,
        "circle",
        {
            "position": [0.0, 0.0],
            "size": RIPPLE_START_SIZE,
            "opacity": 0.0,
            "stroke": palette.highlight,
            "lineWidth": 3,
            "zIndex": 101,
        },
    )
    recorder.create(
        CURSOR,
        "path",
        {
            "data": CURSOR_PATH,
            "position": [float(cursor_start[0]), float(cursor_start[1])],
            "scale": 1.0,
            "opacity": 1.0,
            "fill": "#FFFFFF",
            "stroke": palette.cursor_stroke,
            "lineWidth": 1.5,
            "zIndex": 100,
        },
    )


def recolor_overlays(recorder: TimelineRecorder, palette: Palette) -> None:
    recorder.set(CURSOR, "stroke", palette.cursor_stroke)
    recorder.set(HIGHLIGHT, "stroke", palette.highlight)
    recorder.set(RIPPLE, "stroke", palette.highlight)
    recorder.set(TYPING_TEXT, "fill", palette.text_fill)


__all__ = [
    "ASSET_LAYER",
    "BACKGROUND",
    "CURSOR",
    "ELEMENT_LAYER",
    "HIGHLIGHT",
    "RIPPLE",
    "SCREENSHOT",
    "TYPING_TEXT",
    "NodeIndex",
    "Palette",
    "asset_node_id",
    "build_overlays",
    "element_node_id",
    "palette_for",
    "recolor_overlays",
]
