from __future__ import annotations

import re
from typing import Any

from uireel.protocol.models import ColorScheme, SceneMap, Styling, UIElement
from uireel.timeline.nodes import ELEMENT_LAYER, FONT_FAMILY, element_node_id
from uireel.timeline.recorder import TimelineRecorder
from uireel.timeline.transform import to_render_space

_BUTTON_SUFFIX_RE = re.compile(r"\s+(button|btn)$", re.IGNORECASE)
_LINK_SUFFIX_RE = re.compile(r"\s+link$", re.IGNORECASE)

_FONT_WEIGHTS = {"bold": 700, "normal": 400, "light": 300}


def _dark(scheme: ColorScheme) -> bool:
    return scheme.theme == "dark"


def _font_weight(styling: Styling, fallback: int = 400) -> int:
    return _FONT_WEIGHTS.get(str(styling.font_weight or ""), fallback)


def _button(element: UIElement, scheme: ColorScheme, styling: Styling) -> dict[str, Any]:
    height = element.geometry.height
    label = element.content.text if element.content and element.content.text else element.description
    return {
        "shape": "rect",
        "fill": styling.background_color or scheme.primary,
        "radius": styling.border_radius if styling.border_radius is not None else 8,
        "stroke": styling.border_color,
        "lineWidth": styling.border_width or 0,
        "label": _BUTTON_SUFFIX_RE.sub("", label).strip(),
        "labelFill": styling.text_color or "#FFFFFF",
        "fontSize": styling.font_size or min(16.0, height * 0.5),
        "fontWeight": _font_weight(styling),
    }


def _input(element: UIElement, scheme: ColorScheme, styling: Styling) -> dict[str, Any]:
    dark = _dark(scheme)
    placeholder = element.content.text if element.content else None
    return {
        "shape": "rect",
        "fill": styling.background_color or ("#2C2C2C" if dark else "#FFFFFF"),
        "stroke": styling.border_color or ("#666666" if dark else "#CCCCCC"),
        "lineWidth": styling.border_width or 2,
        "radius": styling.border_radius if styling.border_radius is not None else 4,
        "label": placeholder or "",
        "labelFill": "#666666" if dark else "#999999",
        "fontSize": styling.font_size or min(14.0, element.geometry.height * 0.5),
        "fontWeight": _font_weight(styling),
    }


def _link(element: UIElement, scheme: ColorScheme, styling: Styling) -> dict[str, Any]:
    label = element.content.text if element.content and element.content.text else element.description
    return {
        "shape": "text",
        "label": _LINK_SUFFIX_RE.sub("", label).strip(),
        "labelFill": styling.text_color or scheme.primary,
        "fontSize": styling.font_size or min(14.0, element.geometry.height * 0.7),
        "fontWeight": _font_weight(styling),
    }


def _icon(element: UIElement, scheme: ColorScheme, styling: Styling) -> dict[str, Any]:
    return {
        "shape": "circle",
        "size": min(element.geometry.width, element.geometry.height),
        "fill": styling.background_color or ("#AAAAAA" if _dark(scheme) else "#666666"),
        "svgDescription": element.content.svg_description if element.content else None,
    }


def _image(element: UIElement, scheme: ColorScheme, styling: Styling) -> dict[str, Any]:
    image_path = element.content.image_path if element.content else None
    if image_path:
        return {"shape": "image", "src": image_path}
    return _icon(element, scheme, styling)


def _container(element: UIElement, scheme: ColorScheme, styling: Styling) -> dict[str, Any]:
    return {
        "shape": "rect",
        "fill": styling.background_color or scheme.background,
        "stroke": styling.border_color,
        "lineWidth": styling.border_width or 0,
        "radius": styling.border_radius or 0,
    }


def _text(element: UIElement, scheme: ColorScheme, styling: Styling) -> dict[str, Any]:
    return {
        "shape": "text",
        "label": element.label,
        "labelFill": styling.text_color or ("#FFFFFF" if _dark(scheme) else "#000000"),
        "fontSize": styling.font_size or min(16.0, element.geometry.height * 0.7),
        "fontWeight": _font_weight(styling),
    }


_BUILDERS = {
    "button": _button,
    "input": _input,
    "link": _link,
    "icon": _icon,
    "logo": _image,
    "image": _image,
    "container": _container,
    "text": _text,
}


def element_node_props(
    element: UIElement,
    scheme: ColorScheme,
    canvas_width: float,
    canvas_height: float,
) -> dict[str, Any]:
    styling = element.styling or Styling()
    builder = _BUILDERS.get(element.kind, _text)
    center = to_render_space(element.geometry, canvas_width, canvas_height)
    props = builder(element, scheme, styling)
    props.update(
        {
            "position": [center[0], center[1]],
            "width": element.geometry.width,
            "height": element.geometry.height,
            "fontFamily": FONT_FAMILY,
            "zIndex": element.z_order or 1,
            "scale": 1.0,
            "opacity": 1.0,
            "shadowBlur": 0.0,
            "shadowColor": None,
            "elementId": element.id,
        }
    )
    return props


def build_element_layer(
    recorder: TimelineRecorder,
    scene: SceneMap,
    canvas_width: float,
    canvas_height: float,
) -> dict[str, str]:
    """Create one styled node per element; returns ``element id -> node id``."""
    recorder.create(ELEMENT_LAYER, "group", {"opacity": 1.0, "zIndex": 1})
    index: dict[str, str] = {}
    for element in sorted(scene.elements, key=lambda row: row.z_order):
        node_id = element_node_id(element.id)
        props = element_node_props(element, scene.color_scheme, canvas_width, canvas_height)
        recorder.create(node_id, str(props["shape"]), props, parent=ELEMENT_LAYER)
        index[element.id] = node_id
    return index


__all__ = ["build_element_layer", "element_node_props"]
