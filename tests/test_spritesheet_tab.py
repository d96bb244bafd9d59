"""Tests for the spritesheet tab's event handlers."""
import pytest

from conftest import make_png
from spritesheet_studio import config
from spritesheet_studio.api_client import (
    NO_IMAGE_MESSAGE,
    GeneratedSheet,
    GenerationError,
    NoImageError,
)
from spritesheet_studio.aspect_ratio import AspectRatio
from spritesheet_studio.geometry import GridShape
from spritesheet_studio.player import SpritePlayer
from spritesheet_studio.ui.spritesheet_tab import (
    change_fps,
    change_grid,
    clamp_grid_side,
    frames_label,
    generate_sheet,
    render_player_html,
    toggle_playback,
)


class StubClient:
    def __init__(self, image_bytes=None, error=None):
        self.image_bytes = image_bytes
        self.error = error
        self.calls = []

    def generate_sprite_sheet(self, subject, columns, rows):
        self.calls.append((subject, columns, rows))
        if self.error is not None:
            raise self.error
        return GeneratedSheet(self.image_bytes, "image/png", AspectRatio.SQUARE)


@pytest.fixture(autouse=True)
def output_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "OUTPUT_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def generated(png_512):
    result = generate_sheet(StubClient(png_512), "a knight", 4, 4, 12, None)
    yield result
    if result[0] is not None:
        result[0].close()


@pytest.mark.parametrize(
    "value, expected",
    [(4, 4), (0, 1), (-3, 1), (99, 16), (None, 1), ("7", 7), (2.0, 2)],
)
def test_clamp_grid_side(value, expected):
    assert clamp_grid_side(value) == expected


def test_frames_label():
    assert frames_label(4, 3) == "Total Frames: 12"
    assert frames_label(0, 5) == "Total Frames: 5"


def test_empty_preview():
    assert "empty" in render_player_html(None)


def test_generate_starts_playback(generated, output_dir):
    player, status, html, path, _timer, _button = generated
    assert isinstance(player, SpritePlayer)
    assert player.clock.is_running
    assert player.clock.geometry.frame_width == 128
    assert "Sprite Sheet Ready" in status
    assert "1:1" in status
    assert path.startswith(str(output_dir))
    assert "background-size:512px 512px" in html
    assert "width:128.000px" in html
    assert f"/gradio_api/file={path}" in html


def test_generate_clamps_grid(png_512):
    client = StubClient(png_512)
    player, *_ = generate_sheet(client, "slime", 40, 0, 12, None)
    try:
        assert client.calls == [("slime", 16, 1)]
        assert player.clock.grid == GridShape(16, 1)
    finally:
        player.close()


def test_generation_error_is_reported(png_512):
    previous = SpritePlayer(GridShape(2, 2))
    client = StubClient(error=GenerationError("HTTP 403 from image service"))
    player, status, html, path, _timer, _button = generate_sheet(
        client, "slime", 4, 4, 12, previous
    )
    assert player is None
    assert path is None
    assert "Generation Failed" in status
    assert "Details: HTTP 403" in status
    assert "empty" in html
    # The replaced player was released.
    previous.clock.play()
    assert not previous.clock.has_timer


def test_undecodable_image_is_reported():
    player, status, *_ = generate_sheet(StubClient(b"not an image"), "slime", 4, 4, 12, None)
    assert player is None
    assert "could not be loaded" in status


def test_toggle_pauses_and_resumes(generated):
    player = generated[0]
    toggle_playback(player)
    assert not player.clock.is_running
    toggle_playback(player)
    assert player.clock.is_running


def test_toggle_without_player():
    html, _timer, _button = toggle_playback(None)
    assert "empty" in html


def test_fps_change_keeps_frame(generated):
    player = generated[0]
    player.clock.pause()
    index = player.clock.current_frame_index
    change_fps(30, player)
    assert player.clock.frames_per_second == 30
    assert player.clock.current_frame_index == index


def test_grid_edit_reslices_current_sheet(generated):
    player = generated[0]
    label, html = change_grid(8, 2, player)
    assert label == "Total Frames: 16"
    assert player.clock.geometry.frame_width == 64
    assert "width:64.000px" in html


def test_grid_edit_without_player():
    label, html = change_grid(3, 3, None)
    assert label == "Total Frames: 9"
    assert "empty" in html


def test_missing_image_message_is_shown_verbatim():
    client = StubClient(error=NoImageError(NO_IMAGE_MESSAGE))
    player, status, html, path, _timer, _button = generate_sheet(client, "slime", 4, 4, 12, None)
    assert player is None
    assert path is None
    assert status == f"### ❌ Generation Failed\n{NO_IMAGE_MESSAGE}"
    assert "Details:" not in status
    assert "API key" not in status
