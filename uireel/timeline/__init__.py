from uireel.timeline.assets import AssetManifest
from uireel.timeline.composition import build_composition
from uireel.timeline.interpreter import (
    PlaybackError,
    PlaybackResult,
    PlaybackState,
    TimelineInterpreter,
    play_storyboard,
)
from uireel.timeline.modes import RENDER_MODES, create_render_mode
from uireel.timeline.recorder import TimelineRecorder
from uireel.timeline.state import PresentationState, iter_frames, sample_frame
from uireel.timeline.transform import from_render_space, text_anchor, to_render_space

__all__ = [
    "RENDER_MODES",
    "AssetManifest",
    "PlaybackError",
    "PlaybackResult",
    "PlaybackState",
    "PresentationState",
    "TimelineInterpreter",
    "TimelineRecorder",
    "build_composition",
    "create_render_mode",
    "from_render_space",
    "iter_frames",
    "play_storyboard",
    "sample_frame",
    "text_anchor",
    "to_render_space",
]
