from __future__ import annotations

from uireel.protocol.models import SceneMap
from uireel.timeline.assets import AssetManifest
from uireel.timeline.hybrid import HybridLayerController
from uireel.timeline.nodes import BACKGROUND, ELEMENT_LAYER, SCREENSHOT, NodeIndex
from uireel.timeline.recorder import TimelineRecorder
from uireel.timeline.reconstruct import build_element_layer

LAYER_SCREENSHOT = "screenshot"
LAYER_ASSETS = "assets"
LAYER_ELEMENTS = "elements"


class RenderMode:
    """Capability interface the interpreter drives; one subclass per renderer variant."""

    name = "base"

    def __init__(self, recorder: TimelineRecorder, canvas_width: float, canvas_height: float) -> None:
        self.recorder = recorder
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height

    def activate(self, scene: SceneMap, *, initial_opacity: float = 1.0) -> dict[str, str]:
        raise NotImplementedError

    def visible_layers(self) -> list[str]:
        raise NotImplementedError

    def active_layer(self) -> str:
        raise NotImplementedError

    def feedback_node(self, element_id: str | None, index: NodeIndex) -> str | None:
        return None

    def before_cursor_move(self, element_id: str | None) -> bool:
        return False


class ScreenshotOnlyMode(RenderMode):
    name = "screenshot"

    def activate(self, scene: SceneMap, *, initial_opacity: float = 1.0) -> dict[str, str]:
        if self.recorder.state.has(SCREENSHOT):
            self.recorder.set(SCREENSHOT, "src", scene.image_path)
        else:
            self.recorder.create(
                SCREENSHOT,
                "image",
                {
                    "src": scene.image_path,
                    "width": self.canvas_width,
                    "height": self.canvas_height,
                    "opacity": initial_opacity,
                    "zIndex": 0,
                },
            )
        return {}

    def visible_layers(self) -> list[str]:
        return [SCREENSHOT]

    def active_layer(self) -> str:
        return LAYER_SCREENSHOT


class ReconstructedMode(RenderMode):
    name = "reconstructed"

    def activate(self, scene: SceneMap, *, initial_opacity: float = 1.0) -> dict[str, str]:
        self.recorder.remove(ELEMENT_LAYER)
        self.recorder.remove(BACKGROUND)
        self.recorder.create(
            BACKGROUND,
            "rect",
            {
                "width": self.canvas_width,
                "height": self.canvas_height,
                "fill": scene.color_scheme.background,
                "opacity": initial_opacity,
                "zIndex": 0,
            },
        )
        index = build_element_layer(self.recorder, scene, self.canvas_width, self.canvas_height)
        self.recorder.set(ELEMENT_LAYER, "opacity", initial_opacity)
        return index

    def visible_layers(self) -> list[str]:
        return [BACKGROUND, ELEMENT_LAYER]

    def active_layer(self) -> str:
        return LAYER_ELEMENTS

    def feedback_node(self, element_id: str | None, index: NodeIndex) -> str | None:
        return index.get(element_id)


class HybridMode(RenderMode):
    name = "hybrid"

    def __init__(
        self,
        recorder: TimelineRecorder,
        canvas_width: float,
        canvas_height: float,
        manifest: AssetManifest | None = None,
    ) -> None:
        super().__init__(recorder, canvas_width, canvas_height)
        self.controller = HybridLayerController(recorder, manifest or AssetManifest(), canvas_width, canvas_height)

    def activate(self, scene: SceneMap, *, initial_opacity: float = 1.0) -> dict[str, str]:
        return self.controller.build(scene, initial_opacity=initial_opacity)

    def visible_layers(self) -> list[str]:
        return [self.controller.visible_layer()]

    def active_layer(self) -> str:
        return LAYER_ASSETS if self.controller.promoted else LAYER_SCREENSHOT

    def feedback_node(self, element_id: str | None, index: NodeIndex) -> str | None:
        if not self.controller.promoted:
            return None
        return index.get(element_id)

    def before_cursor_move(self, element_id: str | None) -> bool:
        if not self.controller.has_asset(element_id):
            return False
        return self.controller.promote_assets()


RENDER_MODES = {
    ScreenshotOnlyMode.name: ScreenshotOnlyMode,
    ReconstructedMode.name: ReconstructedMode,
    HybridMode.name: HybridMode,
}


def create_render_mode(
    name: str,
    recorder: TimelineRecorder,
    canvas_width: float,
    canvas_height: float,
    manifest: AssetManifest | None = None,
) -> RenderMode:
    key = str(name or "").strip().lower()
    if key not in RENDER_MODES:
        raise ValueError(f"unknown render mode '{name}'; expected one of {sorted(RENDER_MODES)}")
    if key == HybridMode.name:
        return HybridMode(recorder, canvas_width, canvas_height, manifest)
    return RENDER_MODES[key](recorder, canvas_width, canvas_height)


__all__ = [
    "LAYER_ASSETS",
    "LAYER_ELEMENTS",
    "LAYER_SCREENSHOT",
    "RENDER_MODES",
    "HybridMode",
    "ReconstructedMode",
    "RenderMode",
    "ScreenshotOnlyMode",
    "create_render_mode",
]
