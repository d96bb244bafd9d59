"""
Grid shape → canonical aspect ratio.

The image service only accepts five aspect ratios, so a requested grid is
snapped to the nearest one before the request is composed.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Tuple


class AspectRatio(str, Enum):
    """Aspect ratios accepted by the image service."""

    TALL = "9:16"
    PORTRAIT = "3:4"
    SQUARE = "1:1"
    LANDSCAPE = "4:3"
    WIDE = "16:9"

    @property
    def ratio(self) -> float:
        """Width / height as a number, e.g. 1.777… for 16:9."""
        width, height = self.value.split(":")
        return int(width) / int(height)


# Ascending by numeric value.
CANONICAL_RATIOS: List[AspectRatio] = sorted(AspectRatio, key=lambda r: r.ratio)


def _bucket_thresholds() -> List[Tuple[float, AspectRatio]]:
    """(midpoint, wider bucket) pairs, widest first."""
    pairs = zip(CANONICAL_RATIOS, CANONICAL_RATIOS[1:])
    thresholds = [((narrow.ratio + wide.ratio) / 2, wide) for narrow, wide in pairs]
    return list(reversed(thresholds))


_THRESHOLDS = _bucket_thresholds()


def classify_aspect_ratio(columns: int, rows: int) -> AspectRatio:
    """
    Snap a ``columns × rows`` grid to the nearest canonical aspect ratio.

    Args:
        columns: number of frame columns (≥ 1).
        rows:    number of frame rows (≥ 1).

    Returns:
        The AspectRatio whose value is closest to ``columns / rows``. A ratio
        lying exactly on a midpoint goes to the narrower bucket.
    """
    ratio = columns / rows
    for midpoint, bucket in _THRESHOLDS:
        if ratio > midpoint:
            return bucket
    return CANONICAL_RATIOS[0]
