"""
Spritesheet Animation tab — generate a sprite sheet and preview it as a loop.

The preview is a clipped ``<div>`` whose background is the whole sheet; the
player's frame offset becomes ``background-position``. Each session keeps its
own :class:`~spritesheet_studio.player.SpritePlayer` in ``gr.State``; the
player's clock advances the frame index on its own timer, and a ``gr.Timer``
re-renders the preview at the same period while playback is running.
"""
from __future__ import annotations

import logging
import os
import uuid
from typing import Any, Optional, Tuple

import gradio as gr

from spritesheet_studio import config
from spritesheet_studio.api_client import GenerationError, ImagenClient, NoImageError
from spritesheet_studio.geometry import GridShape, preview_scale
from spritesheet_studio.image_source import ImageLoadError
from spritesheet_studio.player import SpritePlayer

logger = logging.getLogger(__name__)

PLAY_LABEL = "▶️ Play"
PAUSE_LABEL = "⏸️ Pause"

READY_MESSAGE = (
    "### ✨ Ready to Create\n"
    "Your generated sprite sheet preview will appear here."
)
LOAD_FAILED_MESSAGE = (
    "### ❌ Generation Failed\n"
    "The generated sprite sheet could not be loaded. Please try again."
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def clamp_grid_side(value: Any) -> int:
    """Clamp a columns/rows input to the supported grid range."""
    try:
        side = int(value)
    except (TypeError, ValueError):
        side = config.MIN_GRID_SIDE
    return max(config.MIN_GRID_SIDE, min(config.MAX_GRID_SIDE, side))


def frames_label(columns: Any, rows: Any) -> str:
    return f"Total Frames: {clamp_grid_side(columns) * clamp_grid_side(rows)}"


def sheet_url(path: str) -> str:
    """URL under which Gradio serves a file from an allowed path."""
    return f"/gradio_api/file={path}"


def render_player_html(player: Optional[SpritePlayer]) -> str:
    """Render the current frame of ``player`` as a clipped background div."""
    if player is None or not isinstance(player.source, str):
        return '<div class="sprite-stage empty"></div>'

    clock = player.clock
    geometry = clock.geometry
    sheet = clock.sheet
    if sheet is None or not geometry.is_resolved:
        return '<div class="sprite-stage empty"></div>'

    offset = clock.frame_offset
    scale = preview_scale(geometry, config.PREVIEW_MAX_SIZE)
    style = (
        f"width:{geometry.frame_width:.3f}px;"
        f"height:{geometry.frame_height:.3f}px;"
        f"background-image:url('{sheet_url(player.source)}');"
        f"background-size:{sheet.width}px {sheet.height}px;"
        f"background-position:{offset.x:.3f}px {offset.y:.3f}px;"
        f"transform:scale({scale:.4f});"
    )
    return (
        '<div class="sprite-stage">'
        f'<div class="sprite-player" role="img" '
        f'aria-label="Animated sprite sheet preview" style="{style}"></div>'
        "</div>"
    )


def _timer_update(player: Optional[SpritePlayer]) -> gr.Timer:
    if player is None:
        return gr.Timer(active=False)
    clock = player.clock
    period_ms = clock.tick_period_ms
    if period_ms is None:
        return gr.Timer(active=False)
    return gr.Timer(value=period_ms / 1000.0, active=clock.is_running)


def _play_button_update(player: Optional[SpritePlayer]) -> gr.Button:
    running = player is not None and player.clock.is_running
    return gr.Button(value=PAUSE_LABEL if running else PLAY_LABEL)


def _save_sheet(image_bytes: bytes) -> str:
    os.makedirs(config.OUTPUT_DIR, exist_ok=True)
    path = os.path.join(config.OUTPUT_DIR, f"sprite-sheet-{uuid.uuid4().hex[:12]}.png")
    with open(path, "wb") as f:
        f.write(image_bytes)
    return path


def close_player(player: Optional[SpritePlayer]) -> None:
    """Release a session's player (used as the gr.State delete callback)."""
    if player is not None:
        player.close()


# ---------------------------------------------------------------------------
# Event handlers
# ---------------------------------------------------------------------------

def generate_sheet(
    client: ImagenClient,
    prompt: str,
    columns: Any,
    rows: Any,
    fps: float,
    player: Optional[SpritePlayer],
) -> Tuple[Optional[SpritePlayer], str, str, Optional[str], gr.Timer, gr.Button]:
    """
    Generate a sheet, load it into a fresh player and start playback.

    Returns ``(player, status_md, preview_html, download_path, timer, play_btn)``.
    """
    columns = clamp_grid_side(columns)
    rows = clamp_grid_side(rows)

    # The previous sheet stops animating as soon as a new request starts.
    close_player(player)

    try:
        sheet = client.generate_sprite_sheet(prompt or "", columns, rows)
    except NoImageError as exc:
        logger.warning("Image service returned no image")
        message = f"### ❌ Generation Failed\n{exc}"
        return None, message, render_player_html(None), None, gr.Timer(active=False), _play_button_update(None)
    except GenerationError as exc:
        logger.warning("Sprite sheet generation failed: %s", exc)
        message = (
            "### ❌ Generation Failed\n"
            "An error occurred while generating the sprite sheet. "
            f"Please check your API key and prompt. Details: {exc}"
        )
        return None, message, render_player_html(None), None, gr.Timer(active=False), _play_button_update(None)

    path = _save_sheet(sheet.image_bytes)
    new_player = SpritePlayer(GridShape(columns, rows), fps=fps)
    try:
        new_player.load(path).result()
    except ImageLoadError:
        logger.exception("Could not load generated sheet %s", path)
        new_player.close()
        return None, LOAD_FAILED_MESSAGE, render_player_html(None), None, gr.Timer(active=False), _play_button_update(None)

    new_player.clock.play()
    status = (
        f"### ✅ Sprite Sheet Ready\n"
        f"{columns} × {rows} grid · {columns * rows} frames · "
        f"requested aspect ratio {sheet.aspect_ratio.value}"
    )
    return (
        new_player,
        status,
        render_player_html(new_player),
        path,
        _timer_update(new_player),
        _play_button_update(new_player),
    )


def toggle_playback(player: Optional[SpritePlayer]) -> Tuple[str, gr.Timer, gr.Button]:
    if player is not None:
        player.clock.toggle()
    return render_player_html(player), _timer_update(player), _play_button_update(player)


def change_fps(fps: float, player: Optional[SpritePlayer]) -> gr.Timer:
    if player is not None:
        player.clock.set_fps(fps)
    return _timer_update(player)


def change_grid(columns: Any, rows: Any, player: Optional[SpritePlayer]) -> Tuple[str, str]:
    """Re-slice the current sheet when the grid inputs are edited."""
    label = frames_label(columns, rows)
    if player is not None and player.clock.sheet is not None:
        player.clock.set_grid(GridShape(clamp_grid_side(columns), clamp_grid_side(rows)))
    return label, render_player_html(player)


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

def create_spritesheet_tab(client: ImagenClient) -> None:
    """Render the Spritesheet Animation tab inside a Gradio Blocks context."""

    with gr.Tab("🎭 Spritesheet Animation"):

        player_state = gr.State(value=None, delete_callback=close_player)

        gr.Markdown("## 🎭 AI Sprite Sheet Generator")
        gr.Markdown(
            "Describe a character or object, and let AI generate the animation frames for you."
        )

        with gr.Group():
            prompt_tb = gr.Textbox(
                label="Sprite Description",
                placeholder="e.g., A pixel art knight walking to the right",
                lines=4,
            )
            with gr.Row():
                columns_num = gr.Number(
                    value=config.DEFAULT_COLUMNS, label="Columns", precision=0,
                    minimum=config.MIN_GRID_SIDE, maximum=config.MAX_GRID_SIDE,
                )
                rows_num = gr.Number(
                    value=config.DEFAULT_ROWS, label="Rows", precision=0,
                    minimum=config.MIN_GRID_SIDE, maximum=config.MAX_GRID_SIDE,
                )
            frames_md = gr.Markdown(frames_label(config.DEFAULT_COLUMNS, config.DEFAULT_ROWS))
            generate_btn = gr.Button("🪄 Generate Sprite Sheet", variant="primary")

        status_md = gr.Markdown(READY_MESSAGE, elem_id="sprite-status")
        preview_html = gr.HTML(value=render_player_html(None), elem_id="sprite-preview")

        with gr.Row(elem_classes=["sprite-controls"]):
            play_btn = gr.Button(PLAY_LABEL, size="sm", scale=0)
            fps_slider = gr.Slider(
                minimum=config.MIN_FPS, maximum=config.MAX_FPS, step=1,
                value=config.DEFAULT_FPS, label="FPS",
            )
        download_file = gr.File(label="Download", interactive=False)

        # Re-renders the preview while the player is running
        render_timer = gr.Timer(value=1.0 / config.DEFAULT_FPS, active=False)

        # ------------------------------------------------------------------
        # Events
        # ------------------------------------------------------------------

        def _on_generate(prompt, columns, rows, fps, player):
            return generate_sheet(client, prompt, columns, rows, fps, player)

        generate_btn.click(
            fn=lambda: "### ⏳ Generating your sprite sheet...\nThis can take a moment.",
            outputs=[status_md],
        ).then(
            fn=_on_generate,
            inputs=[prompt_tb, columns_num, rows_num, fps_slider, player_state],
            outputs=[player_state, status_md, preview_html, download_file, render_timer, play_btn],
        )

        columns_num.change(
            fn=change_grid,
            inputs=[columns_num, rows_num, player_state],
            outputs=[frames_md, preview_html],
        )
        rows_num.change(
            fn=change_grid,
            inputs=[columns_num, rows_num, player_state],
            outputs=[frames_md, preview_html],
        )

        play_btn.click(
            fn=toggle_playback,
            inputs=[player_state],
            outputs=[preview_html, render_timer, play_btn],
        )
        fps_slider.change(
            fn=change_fps,
            inputs=[fps_slider, player_state],
            outputs=[render_timer],
        )
        render_timer.tick(
            fn=render_player_html,
            inputs=[player_state],
            outputs=[preview_html],
            show_progress="hidden",
        )
