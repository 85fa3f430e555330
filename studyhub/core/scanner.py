# scanner.py

"""
Document scanner: turns a captured photo into an HTML note body.

The image is re-encoded as JPEG and embedded as a base64 data URL, so the
note carries the scan without a separate storage upload.
"""

from __future__ import annotations

import base64
import html
import io
from datetime import datetime
from typing import Optional

from PIL import Image

JPEG_QUALITY = 80
MAX_DIMENSION = 1920


def image_to_data_url(image_bytes: bytes, quality: int = JPEG_QUALITY) -> str:
    """
    Convert any PIL-readable image to a JPEG data URL, downscaled so the
    longest side is at most MAX_DIMENSION pixels.
    """
    with Image.open(io.BytesIO(image_bytes)) as img:
        img = img.convert("RGB")
        img.thumbnail((MAX_DIMENSION, MAX_DIMENSION))
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}"


def scanned_note_content(image_bytes: bytes, captured_at: Optional[datetime] = None) -> str:
    captured_at = captured_at or datetime.now()
    data_url = image_to_data_url(image_bytes)
    stamp = html.escape(captured_at.strftime("%Y-%m-%d %H:%M"))
    return (
        '<div class="scanned-document">'
        "<h3>Scanned Document</h3>"
        f'<img src="{data_url}" alt="Scanned document" style="max-width: 100%; height: auto;" />'
        f"<p><em>Captured on {stamp}</em></p>"
        "</div>"
    )


def save_scan(store, title: str, image_bytes: bytes, course_id: Optional[str] = None):
    """
    Create a note holding the scanned page.
    """
    title = (title or "").strip()
    if not title:
        raise ValueError("Please give the scanned note a title.")
    return store.create_note(title, scanned_note_content(image_bytes), course_id)
