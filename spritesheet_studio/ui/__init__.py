"""Gradio UI for the Sprite Sheet Studio."""
from spritesheet_studio.ui.spritesheet_tab import create_spritesheet_tab

__all__ = ["create_spritesheet_tab"]
