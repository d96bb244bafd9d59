"""
Sprite Sheet Studio — generate grid sprite sheets with an image model and
play them back as looping animations.
"""
from spritesheet_studio.aspect_ratio import AspectRatio, classify_aspect_ratio
from spritesheet_studio.geometry import (
    FrameGeometry,
    FrameOffset,
    GridShape,
    InvalidGeometry,
    SheetDimensions,
    frame_offset,
    resolve_frame_geometry,
)
from spritesheet_studio.image_source import ImageLoadError, read_sheet_dimensions
from spritesheet_studio.playback import PlaybackClock, PlaybackState, RepeatingTimer
from spritesheet_studio.player import LoadStatus, SpritePlayer

__all__ = [
    # aspect ratio
    "AspectRatio",
    "classify_aspect_ratio",
    # geometry
    "FrameGeometry",
    "FrameOffset",
    "GridShape",
    "InvalidGeometry",
    "SheetDimensions",
    "frame_offset",
    "resolve_frame_geometry",
    # image source
    "ImageLoadError",
    "read_sheet_dimensions",
    # playback
    "PlaybackClock",
    "PlaybackState",
    "RepeatingTimer",
    "LoadStatus",
    "SpritePlayer",
]
