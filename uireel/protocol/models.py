from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from uireel.protocol.schema_validation import STORYBOARD_SCHEMA, ProtocolValidationError, ProtocolValidator

ELEMENT_KINDS = ("button", "input", "text", "image", "link", "icon", "logo", "container")
ACTION_KINDS = ("cursor_move", "click", "type", "wait", "switch_scene")
TARGETED_ACTION_KINDS = frozenset({"cursor_move", "click", "type"})
DEFAULT_ACTION_DURATION_S = 1.0

# Keys emitted by older Director builds, mapped onto the current contract.
_LEGACY_ELEMENT_KEYS = {"type": "kind", "coordinates": "geometry", "parent": "parentId", "zIndex": "zOrder"}
_LEGACY_ACTION_KEYS = {"type": "kind"}
_DROPPED_SCENE_KEYS = ("blueprint",)

_default_validator = ProtocolValidator()


class StoryboardValidationError(ProtocolValidationError):
    def __str__(self) -> str:
        return f"Storyboard rejected ({self.schema_path}): {len(self.issues)} issue(s)"


@dataclass(frozen=True)
class Geometry:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Styling:
    background_color: str | None = None
    text_color: str | None = None
    border_color: str | None = None
    border_radius: float | None = None
    border_width: float | None = None
    shadow: str | None = None
    font_size: float | None = None
    font_weight: str | None = None
    padding: float | None = None


@dataclass(frozen=True)
class Content:
    text: str | None = None
    image_path: str | None = None
    svg_description: str | None = None


@dataclass(frozen=True)
class UIElement:
    id: str
    kind: str
    description: str
    geometry: Geometry
    styling: Styling | None = None
    content: Content | None = None
    parent_id: str | None = None
    z_order: float = 0

    @property
    def label(self) -> str:
        if self.content is not None and self.content.text:
            return self.content.text
        return self.description


@dataclass(frozen=True)
class ColorScheme:
    primary: str
    background: str
    accent: str
    theme: str


@dataclass(frozen=True)
class SceneMap:
    scene_id: str
    image_path: str
    color_scheme: ColorScheme
    elements: tuple[UIElement, ...]
    _index: dict[str, UIElement] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", {element.id: element for element in self.elements})

    def element(self, element_id: str | None) -> UIElement | None:
        if not element_id:
            return None
        return self._index.get(element_id)


@dataclass(frozen=True)
class Action:
    kind: str
    target_element_id: str | None = None
    payload: str | None = None
    duration: float = DEFAULT_ACTION_DURATION_S


@dataclass(frozen=True)
class Storyboard:
    scenes: tuple[SceneMap, ...]
    actions: tuple[Action, ...]

    def scene(self, scene_id: str | None) -> SceneMap | None:
        for scene in self.scenes:
            if scene.scene_id == scene_id:
                return scene
        return None


def _rename_keys(row: Any, mapping: dict[str, str]) -> Any:
    if not isinstance(row, dict):
        return row
    for legacy, current in mapping.items():
        if legacy in row and current not in row:
            row[current] = row.pop(legacy)
    return row


def _normalize_scene_payload(scene: Any) -> Any:
    if not isinstance(scene, dict):
        return scene
    for key in _DROPPED_SCENE_KEYS:
        scene.pop(key, None)
    elements = scene.get("elements")
    if isinstance(elements, list):
        scene["elements"] = [_rename_keys(row, _LEGACY_ELEMENT_KEYS) for row in elements]
    return scene


def normalize_scene_payload(payload: Any) -> Any:
    return _normalize_scene_payload(copy.deepcopy(payload))


def normalize_storyboard_payload(payload: Any) -> Any:
    normalized = copy.deepcopy(payload)
    if not isinstance(normalized, dict):
        return normalized
    scenes = normalized.get("scenes")
    if isinstance(scenes, list):
        normalized["scenes"] = [_normalize_scene_payload(row) for row in scenes]
    actions = normalized.get("actions")
    if isinstance(actions, list):
        normalized["actions"] = [_rename_keys(row, _LEGACY_ACTION_KEYS) for row in actions]
    return normalized


def _styling_from_payload(row: dict[str, Any] | None) -> Styling | None:
    if row is None:
        return None
    return Styling(
        background_color=row.get("backgroundColor"),
        text_color=row.get("textColor"),
        border_color=row.get("borderColor"),
        border_radius=row.get("borderRadius"),
        border_width=row.get("borderWidth"),
        shadow=row.get("shadow"),
        font_size=row.get("fontSize"),
        font_weight=row.get("fontWeight"),
        padding=row.get("padding"),
    )


def _content_from_payload(row: dict[str, Any] | None) -> Content | None:
    if row is None:
        return None
    return Content(text=row.get("text"), image_path=row.get("imagePath"), svg_description=row.get("svgDescription"))


def _element_from_payload(row: dict[str, Any]) -> UIElement:
    geometry = row["geometry"]
    return UIElement(
        id=str(row["id"]),
        kind=str(row["kind"]),
        description=str(row.get("description", "")),
        geometry=Geometry(
            x=float(geometry["x"]),
            y=float(geometry["y"]),
            width=float(geometry["width"]),
            height=float(geometry["height"]),
        ),
        styling=_styling_from_payload(row.get("styling")),
        content=_content_from_payload(row.get("content")),
        parent_id=row.get("parentId"),
        z_order=float(row.get("zOrder") or 0),
    )


def _scene_from_payload(row: dict[str, Any]) -> SceneMap:
    scheme = row["colorScheme"]
    return SceneMap(
        scene_id=str(row["sceneId"]),
        image_path=str(row["imagePath"]),
        color_scheme=ColorScheme(
            primary=str(scheme["primary"]),
            background=str(scheme["background"]),
            accent=str(scheme["accent"]),
            theme=str(scheme["theme"]),
        ),
        elements=tuple(_element_from_payload(element) for element in row["elements"]),
    )


def _action_from_payload(row: dict[str, Any]) -> Action:
    duration = row.get("duration")
    return Action(
        kind=str(row["kind"]),
        target_element_id=row.get("targetElementId") or None,
        payload=row.get("payload"),
        duration=DEFAULT_ACTION_DURATION_S if duration is None else float(duration),
    )


def _duplicate_element_issues(scene: SceneMap, prefix: str) -> list[dict[str, str]]:
    issues: list[dict[str, str]] = []
    seen: set[str] = set()
    for idx, element in enumerate(scene.elements):
        if element.id in seen:
            issues.append({"path": f"{prefix}elements.{idx}.id", "message": f"duplicate element id '{element.id}'"})
        seen.add(element.id)
    return issues


def _reference_issues(storyboard: Storyboard) -> list[dict[str, str]]:
    issues: list[dict[str, str]] = []
    active = storyboard.scenes[0]
    for idx, action in enumerate(storyboard.actions):
        if action.kind in TARGETED_ACTION_KINDS:
            if not action.target_element_id:
                issues.append(
                    {"path": f"actions.{idx}.targetElementId", "message": f"targetElementId is required for '{action.kind}'"}
                )
            elif active.element(action.target_element_id) is None:
                issues.append(
                    {
                        "path": f"actions.{idx}.targetElementId",
                        "message": f"'{action.target_element_id}' is not an element of active scene '{active.scene_id}'",
                    }
                )
        if action.kind == "type" and action.payload is None:
            issues.append({"path": f"actions.{idx}.payload", "message": "payload text is required for 'type'"})
        if action.kind == "switch_scene":
            nxt = storyboard.scene(action.payload)
            if nxt is None:
                issues.append({"path": f"actions.{idx}.payload", "message": f"scene '{action.payload}' is not declared"})
            else:
                active = nxt
    return issues


def load_scene_map(payload: Any, validator: ProtocolValidator | None = None) -> SceneMap:
    schema_path = f"{STORYBOARD_SCHEMA}#sceneMap"
    normalized = normalize_scene_payload(payload)
    try:
        (validator or _default_validator).validate(schema_path, normalized)
    except ProtocolValidationError as exc:
        raise StoryboardValidationError(schema_path=exc.schema_path, issues=exc.issues) from exc
    scene = _scene_from_payload(normalized)
    issues = _duplicate_element_issues(scene, "")
    if issues:
        raise StoryboardValidationError(schema_path=schema_path, issues=issues)
    return scene


def load_storyboard(
    payload: Any,
    validator: ProtocolValidator | None = None,
    *,
    resolve_references: bool = True,
    max_scenes: int | None = None,
    max_actions: int | None = None,
) -> Storyboard:
    """Validate a wire-format storyboard and freeze it.

    With ``resolve_references`` every element/scene reference is checked
    against the scene that is active when the action runs; turning it off
    leaves misses to the interpreter's skip-and-report handling.
    """
    schema_path = f"{STORYBOARD_SCHEMA}#storyboard"
    normalized = normalize_storyboard_payload(payload)
    try:
        (validator or _default_validator).validate(schema_path, normalized)
    except ProtocolValidationError as exc:
        raise StoryboardValidationError(schema_path=exc.schema_path, issues=exc.issues) from exc

    storyboard = Storyboard(
        scenes=tuple(_scene_from_payload(row) for row in normalized["scenes"]),
        actions=tuple(_action_from_payload(row) for row in normalized["actions"]),
    )

    issues: list[dict[str, str]] = []
    if max_scenes is not None and len(storyboard.scenes) > max_scenes:
        issues.append({"path": "scenes", "message": f"scene count {len(storyboard.scenes)} exceeds cap {max_scenes}"})
    if max_actions is not None and len(storyboard.actions) > max_actions:
        issues.append({"path": "actions", "message": f"action count {len(storyboard.actions)} exceeds cap {max_actions}"})
    scene_ids: set[str] = set()
    for idx, scene in enumerate(storyboard.scenes):
        if scene.scene_id in scene_ids:
            issues.append({"path": f"scenes.{idx}.sceneId", "message": f"duplicate scene id '{scene.scene_id}'"})
        scene_ids.add(scene.scene_id)
        issues.extend(_duplicate_element_issues(scene, f"scenes.{idx}."))
    if resolve_references:
        issues.extend(_reference_issues(storyboard))
    if issues:
        raise StoryboardValidationError(schema_path=schema_path, issues=issues)
    return storyboard


def storyboard_summary(storyboard: Storyboard) -> dict[str, Any]:
    return {
        "scene_ids": [scene.scene_id for scene in storyboard.scenes],
        "scene_count": len(storyboard.scenes),
        "element_count": sum(len(scene.elements) for scene in storyboard.scenes),
        "action_count": len(storyboard.actions),
    }


__all__ = [
    "ACTION_KINDS",
    "DEFAULT_ACTION_DURATION_S",
    "ELEMENT_KINDS",
    "TARGETED_ACTION_KINDS",
    "Action",
    "ColorScheme",
    "Content",
    "Geometry",
    "SceneMap",
    "Storyboard",
    "StoryboardValidationError",
    "Styling",
    "UIElement",
    "load_scene_map",
    "load_storyboard",
    "normalize_scene_payload",
    "normalize_storyboard_payload",
    "storyboard_summary",
]
