from __future__ import annotations

import logging

from uireel.protocol.models import SceneMap
from uireel.timeline.assets import AssetManifest
from uireel.timeline.feedback import crossfade
from uireel.timeline.nodes import ASSET_LAYER, SCREENSHOT, asset_node_id
from uireel.timeline.recorder import TimelineRecorder
from uireel.timeline.transform import to_render_space

logger = logging.getLogger("uireel.hybrid")

PROMOTION_S = 1.0


class HybridLayerController:
    """Raster screenshot layer plus an initially invisible asset layer.

    ``promote_assets`` cross-fades from the screenshot to the assets once per
    scene activation; later calls are no-ops.
    """

    def __init__(
        self,
        recorder: TimelineRecorder,
        manifest: AssetManifest,
        canvas_width: float,
        canvas_height: float,
    ) -> None:
        self.recorder = recorder
        self.manifest = manifest
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self._asset_nodes: dict[str, str] = {}
        self._promoted = False

    @property
    def promoted(self) -> bool:
        return self._promoted

    @property
    def asset_nodes(self) -> dict[str, str]:
        return dict(self._asset_nodes)

    def build(self, scene: SceneMap, *, initial_opacity: float = 1.0) -> dict[str, str]:
        self.teardown()
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
        self.recorder.create(ASSET_LAYER, "group", {"opacity": 0.0, "zIndex": 1})
        for element in scene.elements:
            path = self.manifest.path_for(element.id)
            if path is None:
                continue
            node_id = asset_node_id(element.id)
            center = to_render_space(element.geometry, self.canvas_width, self.canvas_height)
            self.recorder.create(
                node_id,
                "image",
                {
                    "src": path,
                    "position": [center[0], center[1]],
                    "width": element.geometry.width,
                    "height": element.geometry.height,
                    "opacity": 1.0,
                    "scale": 1.0,
                    "shadowBlur": 0.0,
                    "shadowColor": None,
                    "elementId": element.id,
                },
                parent=ASSET_LAYER,
            )
            self._asset_nodes[element.id] = node_id
        self._promoted = False
        logger.debug("asset layer built for scene %s with %d node(s)", scene.scene_id, len(self._asset_nodes))
        return dict(self._asset_nodes)

    def teardown(self) -> None:
        self.recorder.remove(ASSET_LAYER)
        self.recorder.remove(SCREENSHOT)
        self._asset_nodes = {}

    def has_asset(self, element_id: str | None) -> bool:
        return bool(element_id) and element_id in self._asset_nodes

    def visible_layer(self) -> str:
        return ASSET_LAYER if self._promoted else SCREENSHOT

    def promote_assets(self, duration_s: float = PROMOTION_S) -> bool:
        if self._promoted or not self._asset_nodes:
            return False
        crossfade(self.recorder, fade_out=[SCREENSHOT], fade_in=[ASSET_LAYER], duration_s=duration_s)
        self._promoted = True
        return True


__all__ = ["PROMOTION_S", "HybridLayerController"]
