"""
Sheet image source.

Resolves a sheet reference (raw bytes, ``data:`` URL, ``http(s)://`` URL or a
local path) to its natural pixel dimensions. The image is fully decoded so a
truncated or corrupt file fails here rather than later in the browser.
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
import os
from typing import Union

import requests
from PIL import Image

from spritesheet_studio import config
from spritesheet_studio.geometry import SheetDimensions

logger = logging.getLogger(__name__)

SheetSource = Union[str, bytes, "os.PathLike[str]"]


class ImageLoadError(Exception):
    """Raised when a sheet image cannot be fetched or decoded."""


# ---------------------------------------------------------------------------
# Byte helpers
# ---------------------------------------------------------------------------

def decode_data_url(data_url: str) -> bytes:
    """Decode a ``data:<mime>;base64,<payload>`` URL to raw bytes."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:"):
        raise ImageLoadError("Malformed data URL")
    if not header.endswith(";base64"):
        raise ImageLoadError("Only base64 data URLs are supported")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageLoadError(f"Invalid base64 payload: {exc}") from exc


def encode_data_url(data: bytes, mime_type: str = "image/png") -> str:
    """Encode raw image bytes as a base64 data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('utf-8')}"


def _fetch_url(url: str) -> bytes:
    try:
        resp = requests.get(url, timeout=config.IMAGE_FETCH_TIMEOUT)
        resp.raise_for_status()
        return resp.content
    except requests.exceptions.Timeout as exc:
        raise ImageLoadError(f"Fetching {url} timed out") from exc
    except requests.exceptions.HTTPError as exc:
        raise ImageLoadError(f"HTTP {exc.response.status_code} fetching {url}") from exc
    except requests.exceptions.RequestException as exc:
        raise ImageLoadError(f"Network error: {exc}") from exc


def read_source_bytes(source: SheetSource) -> bytes:
    """Return the encoded image bytes behind ``source``."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, str) and source.startswith("data:"):
        return decode_data_url(source)
    if isinstance(source, str) and source.startswith(("http://", "https://")):
        return _fetch_url(source)
    try:
        with open(source, "rb") as f:
            return f.read()
    except OSError as exc:
        raise ImageLoadError(f"Cannot read {source}: {exc}") from exc


# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

def read_sheet_dimensions(source: SheetSource) -> SheetDimensions:
    """
    Load a sheet image and return its natural width and height.

    Raises:
        ImageLoadError: on any fetch or decode failure. No retry is attempted.
    """
    data = read_source_bytes(source)
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            width, height = img.size
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageLoadError(f"Cannot decode sheet image: {exc}") from exc

    logger.debug("Decoded sheet image: %dx%d", width, height)
    return SheetDimensions(width=width, height=height)
