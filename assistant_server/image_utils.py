# -*- coding: utf-8 -*-
import base64
import mimetypes
from pathlib import Path

import requests


def load_image(path_or_url: str) -> tuple[bytes, str]:
    """
    Loads a timetable image from a local path or a URL.
    :param path_or_url: A local file path or a URL to an image.
    :return: The image bytes and their MIME type.
    """
    if path_or_url.startswith('http://') or path_or_url.startswith('https://'):
        response = requests.get(path_or_url, timeout=30)
        response.raise_for_status()
        mime_type = response.headers.get("Content-Type", "").split(";")[0].strip()
        return response.content, mime_type or "image/jpeg"
    path = Path(path_or_url)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    mime_type, _ = mimetypes.guess_type(path.name)
    return path.read_bytes(), mime_type or "image/jpeg"


def to_data_url(content: bytes, mime_type: str = "image/jpeg") -> str:
    """Encodes image bytes as a base64 data URL the model accepts inline."""
    encoded = base64.b64encode(content).decode('utf-8')
    return f"data:{mime_type};base64,{encoded}"
