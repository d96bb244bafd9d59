"""Tests for grid → aspect ratio classification."""
import pytest

from spritesheet_studio.aspect_ratio import (
    CANONICAL_RATIOS,
    AspectRatio,
    classify_aspect_ratio,
)


@pytest.mark.parametrize(
    "columns, rows, expected",
    [
        (1, 1, "1:1"),
        (16, 9, "16:9"),
        (9, 16, "9:16"),
        (4, 3, "4:3"),
        (3, 4, "3:4"),
    ],
)
def test_canonical_grids_classify_to_themselves(columns, rows, expected):
    assert classify_aspect_ratio(columns, rows) == expected


@pytest.mark.parametrize(
    "columns, rows, expected",
    [
        (2, 1, AspectRatio.WIDE),       # 2.0, wider than any bucket
        (8, 5, AspectRatio.WIDE),       # 1.6
        (3, 2, AspectRatio.LANDSCAPE),  # 1.5
        (6, 5, AspectRatio.LANDSCAPE),  # 1.2
        (8, 7, AspectRatio.SQUARE),     # 1.14
        (4, 5, AspectRatio.PORTRAIT),   # 0.8
        (2, 3, AspectRatio.PORTRAIT),   # 0.67
        (3, 5, AspectRatio.TALL),       # 0.6
        (1, 16, AspectRatio.TALL),
    ],
)
def test_nearest_bucket(columns, rows, expected):
    assert classify_aspect_ratio(columns, rows) is expected


def test_ratio_on_midpoint_goes_to_narrower_bucket():
    # 7/8 = 0.875 is exactly halfway between 3:4 and 1:1
    assert classify_aspect_ratio(7, 8) is AspectRatio.PORTRAIT


@pytest.mark.parametrize("factor", [2, 3, 5, 16])
@pytest.mark.parametrize("columns, rows", [(1, 1), (4, 3), (5, 8), (7, 2), (1, 6)])
def test_scaling_the_grid_does_not_change_the_bucket(columns, rows, factor):
    assert classify_aspect_ratio(columns, rows) is classify_aspect_ratio(
        columns * factor, rows * factor
    )


def test_every_grid_gets_a_canonical_label():
    labels = {r.value for r in AspectRatio}
    for columns in range(1, 17):
        for rows in range(1, 17):
            assert classify_aspect_ratio(columns, rows).value in labels


def test_canonical_ratios_sorted_ascending():
    values = [r.ratio for r in CANONICAL_RATIOS]
    assert values == sorted(values)
    assert CANONICAL_RATIOS[0] is AspectRatio.TALL
    assert CANONICAL_RATIOS[-1] is AspectRatio.WIDE


def test_ratio_property():
    assert AspectRatio.WIDE.ratio == pytest.approx(16 / 9)
    assert AspectRatio.SQUARE.ratio == 1.0
