"""Helpers for the base64 PNG payloads returned by the API."""

from __future__ import annotations

import asyncio
import base64
import time
from pathlib import Path

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


def create_image_url(base64_data: str) -> str:
    """Wrap base64 PNG data in a data URL usable as an <img> src."""
    return f"{PNG_DATA_URL_PREFIX}{base64_data}"


def decode_image(base64_data: str) -> bytes:
    """Decode base64 PNG data (a data URL prefix is accepted and stripped)."""
    if base64_data.startswith(PNG_DATA_URL_PREFIX):
        base64_data = base64_data[len(PNG_DATA_URL_PREFIX) :]
    return base64.b64decode(base64_data, validate=True)


def default_filename(prefix: str = "jaguar") -> str:
    return f"{prefix}-{int(time.time() * 1000)}.png"


async def save_image(base64_data: str, path: str | Path) -> Path:
    """Decode and write an image to ``path`` without blocking the event loop."""
    target = Path(path)
    data = decode_image(base64_data)
    await asyncio.to_thread(target.write_bytes, data)
    return target
