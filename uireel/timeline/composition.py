from __future__ import annotations

from typing import Any

from uireel.protocol.models import SceneMap
from uireel.protocol.schema_validation import STORYBOARD_SCHEMA, ProtocolValidator
from uireel.timeline.assets import AssetManifest
from uireel.timeline.interpreter import PlaybackResult
from uireel.timeline.nodes import BACKGROUND, SCREENSHOT

_default_validator = ProtocolValidator()

_LAYER_TYPES = {
    "image": "image",
    "text": "text",
    "rect": "shape",
    "circle": "shape",
    "path": "shape",
    "group": "null",
}


def _seconds(ms: float) -> float:
    return round(float(ms) / 1000.0, 6)


def _layer_type(node_id: str, kind: str) -> str:
    if node_id == BACKGROUND:
        return "solid"
    if node_id == SCREENSHOT:
        return "background"
    return _LAYER_TYPES.get(kind, "shape")


def _content(layer_type: str, props: dict[str, Any]) -> dict[str, Any]:
    if layer_type in {"image", "background"}:
        return {"assetPath": props.get("src")}
    if layer_type == "solid":
        return {"color": props.get("fill")}
    if layer_type == "text":
        return {
            "text": props.get("text", props.get("label", "")),
            "fontSize": props.get("fontSize"),
            "fontFamily": props.get("fontFamily"),
            "textColor": props.get("fill", props.get("labelFill")),
        }
    if layer_type == "shape":
        return {
            "svgPath": props.get("data"),
            "fillColor": props.get("fill"),
            "strokeColor": props.get("stroke"),
            "strokeWidth": props.get("lineWidth"),
        }
    return {}


def _transform(props: dict[str, Any]) -> dict[str, Any]:
    position = props.get("position") or [0.0, 0.0]
    opacity = float(props.get("opacity", 1.0) or 0.0)
    return {
        "position": [float(position[0]), float(position[1])],
        "scale": round(float(props.get("scale", 1.0)) * 100.0, 3),
        "rotation": 0.0,
        "opacity": round(max(0.0, min(1.0, opacity)) * 100.0, 3),
    }


def build_composition(
    result: PlaybackResult,
    scene: SceneMap,
    canvas: tuple[int, int] = (1920, 1080),
    *,
    frame_rate: int = 60,
    assets: AssetManifest | None = None,
    validator: ProtocolValidator | None = None,
) -> dict[str, Any]:
    """Layer-based export of a finished playback.

    Every node the run ever created becomes one layer, stacked in creation
    order, with in/out points taken from its create/remove mutations and the
    transform of its last recorded properties. Each trace entry becomes a
    marker at its start time.
    """
    created: dict[str, dict[str, Any]] = {}
    order: list[str] = []
    for mutation in result.mutations:
        node_id = mutation["node"]
        op = mutation["op"]
        if op == "create":
            value = mutation.get("value") or {}
            if node_id not in created:
                order.append(node_id)
            created[node_id] = {
                "kind": value.get("kind", "node"),
                "parent": value.get("parent"),
                "props": dict(value.get("props") or {}),
                "in_ms": mutation["at_ms"],
                "out_ms": None,
            }
        elif op == "remove":
            row = created.get(node_id)
            if row is not None:
                row["out_ms"] = mutation["at_ms"]
        elif node_id in created:
            created[node_id]["props"][mutation["prop"]] = mutation.get("value")

    layers: list[dict[str, Any]] = []
    for index, node_id in enumerate(order):
        row = created[node_id]
        props = row["props"]
        layer_type = _layer_type(node_id, str(row["kind"]))
        layer: dict[str, Any] = {
            "id": node_id,
            "name": str(props.get("elementId") or node_id),
            "type": layer_type,
            "index": index,
            "parent": row["parent"],
            "transform": _transform(props),
            "blendMode": "normal",
            "content": _content(layer_type, props),
            "inPoint": _seconds(row["in_ms"]),
            "outPoint": _seconds(row["out_ms"]) if row["out_ms"] is not None else None,
            "visible": row["out_ms"] is None,
        }
        blur = float(props.get("shadowBlur") or 0.0)
        if blur > 0:
            layer["effects"] = [{"type": "glow", "properties": {"blur": blur, "color": props.get("shadowColor")}}]
        layers.append(layer)

    manifest = assets or AssetManifest()
    asset_rows: dict[str, dict[str, Any]] = {}
    for element in scene.elements:
        path = manifest.path_for(element.id)
        if path is None:
            continue
        asset_rows[element.id] = {
            "id": element.id,
            "type": manifest.asset_type(element.id) or "image",
            "path": path,
            "width": element.geometry.width,
            "height": element.geometry.height,
        }

    markers = [
        {
            "time": _seconds(row["started_at_ms"]),
            "label": f"{row['kind']}:{row['target']}" if row.get("target") else str(row["kind"]),
        }
        for row in result.trace
    ]

    composition = {
        "id": f"{scene.scene_id}-{result.mode}",
        "name": scene.scene_id,
        "width": int(canvas[0]),
        "height": int(canvas[1]),
        "duration": _seconds(result.duration_ms),
        "frameRate": int(frame_rate),
        "backgroundColor": scene.color_scheme.background,
        "layers": layers,
        "assets": asset_rows,
        "markers": markers,
    }
    (validator or _default_validator).validate(f"{STORYBOARD_SCHEMA}#composition", composition)
    return composition


__all__ = ["build_composition"]
