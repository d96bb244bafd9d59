"""
Sprite Sheet Studio — Gradio entry point.

Usage
-----
    python -m spritesheet_studio.app

Environment variables (or .env file):
    GEMINI_API_KEY          — API key for the Imagen endpoint
    IMAGEN_MODEL            — model name (default imagen-4.0-generate-001)
    SPRITESHEET_OUTPUT_DIR  — where generated sheets are written
    LOG_LEVEL               — logging level (default INFO)
"""
import logging

import gradio as gr

from spritesheet_studio import config
from spritesheet_studio.api_client import ImagenClient
from spritesheet_studio.ui import create_spritesheet_tab

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_CSS = """
/* ── Layout ─────────────────────────────────────────────────────────────── */
.gradio-container { max-width: 1000px; margin: auto; }
footer { display: none !important; }

/* ── Config warning banner ───────────────────────────────────────────────── */
#config-warning {
    background: #3a1a00;
    border: 1px solid #a04000;
    border-radius: 6px;
    padding: 8px 14px;
    margin-bottom: 10px;
    color: #ffb060;
}

/* ── Sprite preview ──────────────────────────────────────────────────────── */
.sprite-stage {
    display: flex;
    align-items: center;
    justify-content: center;
    min-height: 300px;
    overflow: hidden;
}
.sprite-stage .sprite-player {
    background-color: #1e1e1e;
    background-repeat: no-repeat;
    image-rendering: pixelated;
    transform-origin: center;
    transition: transform 0.2s ease-in-out;
}
.sprite-controls { align-items: center; gap: 12px; }
"""


def build_app() -> gr.Blocks:
    """Construct and return the Gradio Blocks application."""

    client = ImagenClient()

    with gr.Blocks(title="Sprite Sheet Studio") as demo:
        gr.Markdown("# 🎨 Sprite Sheet Studio")

        if not config.GEMINI_API_KEY:
            gr.Markdown(
                "⚠️ **Configuration missing** — set `GEMINI_API_KEY` in your "
                "`.env` file or environment before generating sprite sheets.",
                elem_id="config-warning",
            )

        create_spritesheet_tab(client)

    return demo


def main() -> None:
    demo = build_app()
    logger.info("Serving generated sheets from %s", config.OUTPUT_DIR)
    demo.launch(
        server_name="127.0.0.1",
        server_port=7860,
        share=False,
        show_error=True,
        theme=gr.themes.Soft(),
        css=_CSS,
        allowed_paths=[config.OUTPUT_DIR],
    )


if __name__ == "__main__":
    main()
