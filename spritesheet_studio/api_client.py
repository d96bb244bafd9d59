"""
Image generation client for the Sprite Sheet Studio.

Composes a sprite-sheet request (prompt text + canonical aspect ratio) and
sends it to the Imagen ``:predict`` REST endpoint. Only the ratio label and
the returned image bytes cross this boundary; everything else about the
service is opaque to the playback engine.
"""
from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from spritesheet_studio import config
from spritesheet_studio.aspect_ratio import AspectRatio, classify_aspect_ratio
from spritesheet_studio.image_source import encode_data_url

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = (
    "The AI did not return an image. Please try refining your prompt or try again."
)

SPRITE_PROMPT_TEMPLATE = """Generate a high-quality sprite sheet for a video game. The subject is: "{subject}".
The final sprite sheet must be a single image file containing a grid of animation frames.
- Total Frames: Exactly {frames} distinct frames showing a continuous animation sequence.
- Grid Layout: The frames must be arranged in a grid of {columns} columns and {rows} rows.
- Background: The background of the entire sprite sheet must be transparent.
- Style: The art style should be consistent across all frames.
- Spacing: All frames must be tightly packed in the grid with no space or gutter between them.
- Frame Size: Each frame must have the exact same dimensions."""


class GenerationError(Exception):
    """Raised when the image service rejects a request or returns no image."""


class NoImageError(GenerationError):
    """The request succeeded but the response carried no usable image."""


@dataclass(frozen=True)
class GeneratedSheet:
    """Encoded sheet image returned by the service."""
    image_bytes: bytes
    mime_type: str
    aspect_ratio: AspectRatio

    @property
    def data_url(self) -> str:
        return encode_data_url(self.image_bytes, self.mime_type)


def build_sprite_prompt(subject: str, columns: int, rows: int) -> str:
    """Wrap the user's subject in the sprite-sheet layout instructions."""
    return SPRITE_PROMPT_TEMPLATE.format(
        subject=subject.strip(),
        frames=columns * rows,
        columns=columns,
        rows=rows,
    )


class ImagenClient:
    """Thin wrapper around the Imagen ``models/{model}:predict`` endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> None:
        self.api_key = api_key or config.GEMINI_API_KEY
        self.model = model or config.IMAGEN_MODEL
        self.base_url = (base_url or config.IMAGEN_BASE_URL).rstrip("/")
        self.timeout = timeout or config.REQUEST_TIMEOUT

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = requests.post(
                url, json=payload, headers=self._headers(), timeout=self.timeout
            )
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.Timeout as exc:
            raise GenerationError(f"Request to {path} timed out after {self.timeout}s") from exc
        except requests.exceptions.HTTPError as exc:
            raise GenerationError(
                f"HTTP {exc.response.status_code} from image service: {exc.response.text}"
            ) from exc
        except requests.exceptions.JSONDecodeError as exc:
            raise GenerationError(f"Image service returned invalid JSON: {exc}") from exc
        except requests.exceptions.RequestException as exc:
            raise GenerationError(f"Network error: {exc}") from exc

    @staticmethod
    def _extract_image(response: Dict[str, Any]) -> Dict[str, str]:
        """Return the first prediction carrying image bytes, or raise."""
        for prediction in response.get("predictions") or []:
            if prediction.get("bytesBase64Encoded"):
                return prediction
        raise NoImageError(NO_IMAGE_MESSAGE)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_request(self, subject: str, columns: int, rows: int) -> Dict[str, Any]:
        """Compose the ``:predict`` request body for a sprite sheet."""
        aspect_ratio = classify_aspect_ratio(columns, rows)
        return {
            "instances": [{"prompt": build_sprite_prompt(subject, columns, rows)}],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": aspect_ratio.value,
                "outputOptions": {"mimeType": "image/png"},
            },
        }

    def generate_sprite_sheet(self, subject: str, columns: int, rows: int) -> GeneratedSheet:
        """
        Request one sprite sheet image.

        Args:
            subject: free-text description of the character/object.
            columns: frame columns in the requested grid.
            rows:    frame rows in the requested grid.

        Returns:
            GeneratedSheet with the decoded image bytes.

        Raises:
            GenerationError: on a blank subject, transport failure, or when the
                service returns no usable image.
        """
        if not subject.strip():
            raise GenerationError("Please describe the sprite you want to generate.")

        body = self.build_request(subject, columns, rows)
        aspect_ratio = AspectRatio(body["parameters"]["aspectRatio"])
        logger.info(
            "Requesting %dx%d sprite sheet (%s) from %s",
            columns, rows, aspect_ratio.value, self.model,
        )
        response = self._post(f"/models/{self.model}:predict", body)
        prediction = self._extract_image(response)

        try:
            image_bytes = base64.b64decode(prediction["bytesBase64Encoded"])
        except (binascii.Error, ValueError) as exc:
            raise GenerationError(f"Image service returned undecodable image data: {exc}") from exc

        return GeneratedSheet(
            image_bytes=image_bytes,
            mime_type=prediction.get("mimeType", "image/png"),
            aspect_ratio=aspect_ratio,
        )
