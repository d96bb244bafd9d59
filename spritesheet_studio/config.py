"""
Configuration for the Sprite Sheet Studio.
Reads settings from environment variables or a .env file.
"""
import os
import tempfile

from dotenv import load_dotenv

load_dotenv()

# Image generation service. API_KEY is the legacy name used by older setups.
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", os.getenv("API_KEY", ""))
IMAGEN_MODEL: str = os.getenv("IMAGEN_MODEL", "imagen-4.0-generate-001")
IMAGEN_BASE_URL: str = os.getenv(
    "IMAGEN_BASE_URL",
    "https://generativelanguage.googleapis.com/v1beta",
)

# Generated sheets are written here and served back to the browser.
OUTPUT_DIR: str = os.getenv(
    "SPRITESHEET_OUTPUT_DIR",
    os.path.join(tempfile.gettempdir(), "spritesheet_studio"),
)

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Request timeouts (seconds)
REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "120"))
IMAGE_FETCH_TIMEOUT: int = int(os.getenv("IMAGE_FETCH_TIMEOUT", "30"))

# Grid defaults
DEFAULT_COLUMNS: int = 4
DEFAULT_ROWS: int = 4
MIN_GRID_SIDE: int = 1
MAX_GRID_SIDE: int = 16

# Playback defaults
DEFAULT_FPS: int = 12
MIN_FPS: int = 1
MAX_FPS: int = 60

# Frames smaller than this are scaled up in the preview
PREVIEW_MAX_SIZE: int = 256
