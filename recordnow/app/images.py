from __future__ import annotations

import base64
import mimetypes
from pathlib import Path

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".svg", ".webp")


def is_image_path(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_SUFFIXES


def encode_image(data: bytes, mime_type: str = "image/png") -> str:
    """Return ``data:`` URI text for raw image bytes."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def encode_image_file(path: Path) -> str:
    path = Path(path)
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return encode_image(path.read_bytes(), mime_type)


def image_markdown(data_uri: str) -> str:
    return f"![Image]({data_uri})"
