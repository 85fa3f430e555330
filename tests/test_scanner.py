import base64
import io
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from PIL import Image

from core.scanner import MAX_DIMENSION, image_to_data_url, save_scan, scanned_note_content


def png_bytes(size=(3000, 1000), color=(200, 30, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def test_image_becomes_downscaled_jpeg_data_url():
    url = image_to_data_url(png_bytes())

    prefix = "data:image/jpeg;base64,"
    assert url.startswith(prefix)
    with Image.open(io.BytesIO(base64.b64decode(url[len(prefix):]))) as img:
        assert img.format == "JPEG"
        assert img.size == (MAX_DIMENSION, 640)


def test_small_images_keep_their_size():
    url = image_to_data_url(png_bytes((40, 30)))
    with Image.open(io.BytesIO(base64.b64decode(url.split(",", 1)[1]))) as img:
        assert img.size == (40, 30)


def test_note_content_embeds_image_and_timestamp():
    content = scanned_note_content(png_bytes((10, 10)), datetime(2026, 3, 1, 14, 5))
    assert '<img src="data:image/jpeg;base64,' in content
    assert "Captured on 2026-03-01 14:05" in content


def test_save_scan_creates_note():
    store = MagicMock()
    save_scan(store, " Lecture 3 ", png_bytes((10, 10)), "c1")

    title, content, course_id = store.create_note.call_args.args
    assert (title, course_id) == ("Lecture 3", "c1")
    assert "scanned-document" in content


def test_save_scan_needs_title():
    store = MagicMock()
    with pytest.raises(ValueError):
        save_scan(store, "  ", png_bytes((10, 10)))
    store.create_note.assert_not_called()
