from uireel.protocol.models import (
    ACTION_KINDS,
    ELEMENT_KINDS,
    Action,
    ColorScheme,
    Content,
    Geometry,
    SceneMap,
    Storyboard,
    StoryboardValidationError,
    Styling,
    UIElement,
    load_scene_map,
    load_storyboard,
    storyboard_summary,
)
from uireel.protocol.schema_validation import STORYBOARD_SCHEMA, ProtocolValidationError, ProtocolValidator

__all__ = [
    "ACTION_KINDS",
    "ELEMENT_KINDS",
    "STORYBOARD_SCHEMA",
    "Action",
    "ColorScheme",
    "Content",
    "Geometry",
    "ProtocolValidationError",
    "ProtocolValidator",
    "SceneMap",
    "Storyboard",
    "StoryboardValidationError",
    "Styling",
    "UIElement",
    "load_scene_map",
    "load_storyboard",
    "storyboard_summary",
]
