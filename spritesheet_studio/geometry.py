"""
Frame geometry for grid sprite sheets.

All values are derived from the loaded sheet's natural pixel size and the
declared grid; nothing here touches pixel data.
"""
from __future__ import annotations

import math
from dataclasses import dataclass


class InvalidGeometry(ValueError):
    """Raised when sheet dimensions, columns or frame count are non-positive."""


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SheetDimensions:
    """Natural pixel size of a loaded sheet image."""
    width: int
    height: int


@dataclass(frozen=True)
class GridShape:
    """User-declared frame grid. Both sides are clamped to ≥ 1 upstream."""
    columns: int
    rows: int

    @property
    def frame_count(self) -> int:
        return self.columns * self.rows


@dataclass(frozen=True)
class FrameGeometry:
    """Pixel size of a single frame, plus the grid it was resolved against."""
    frame_width: float
    frame_height: float
    columns: int = 1
    rows: int = 1   # effective rows, see effective_rows()

    @classmethod
    def unresolved(cls) -> "FrameGeometry":
        """Placeholder used before any sheet has loaded."""
        return cls(frame_width=0.0, frame_height=0.0, columns=0, rows=0)

    @property
    def is_resolved(self) -> bool:
        return self.frame_width > 0 and self.frame_height > 0


@dataclass(frozen=True)
class FrameOffset:
    """Background translation that brings one frame into view (x, y ≤ 0)."""
    x: float
    y: float


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def effective_rows(frame_count: int, columns: int) -> int:
    """
    Rows actually needed to hold ``frame_count`` frames in ``columns`` columns.

    The image service does not reliably honour the requested row count, so
    only the frame count and column count are trusted for slicing.
    """
    return math.ceil(frame_count / columns)


def resolve_frame_geometry(
    sheet: SheetDimensions,
    grid: GridShape,
    frame_count: int,
) -> FrameGeometry:
    """
    Compute the size of one frame within ``sheet``.

    Args:
        sheet:       natural pixel size of the loaded sheet.
        grid:        declared grid; only ``columns`` is used.
        frame_count: total number of frames in the animation.

    Returns:
        FrameGeometry with unrounded frame width/height.

    Raises:
        InvalidGeometry: if columns, frame_count or a sheet dimension is ≤ 0.
    """
    if grid.columns <= 0:
        raise InvalidGeometry(f"columns must be positive, got {grid.columns}")
    if frame_count <= 0:
        raise InvalidGeometry(f"frame_count must be positive, got {frame_count}")
    if sheet.width <= 0 or sheet.height <= 0:
        raise InvalidGeometry(
            f"sheet dimensions must be positive, got {sheet.width}x{sheet.height}"
        )

    rows = effective_rows(frame_count, grid.columns)
    return FrameGeometry(
        frame_width=sheet.width / grid.columns,
        frame_height=sheet.height / rows,
        columns=grid.columns,
        rows=rows,
    )


def frame_offset(index: int, geometry: FrameGeometry) -> FrameOffset:
    """Offset that reveals frame ``index`` (row-major) within the sheet."""
    if not geometry.is_resolved:
        return FrameOffset(0.0, 0.0)
    column = index % geometry.columns
    row = index // geometry.columns
    return FrameOffset(
        x=-column * geometry.frame_width,
        y=-row * geometry.frame_height,
    )


def preview_scale(geometry: FrameGeometry, max_size: int = 256) -> float:
    """Upscale factor for the preview; small frames grow to fit ``max_size``."""
    if not geometry.is_resolved:
        return 1.0
    return max(
        1.0,
        min(max_size / geometry.frame_width, max_size / geometry.frame_height),
    )
