# tests/test_images.py
"""Tests for profile picture resizing and storage."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from neor.core.errors import ExternalServiceError
from neor.services.images import discard_stored_images, resize_to_png


def test_resize_keeps_aspect_ratio() -> None:
    buffer = io.BytesIO()
    Image.new("RGB", (300, 150)).save(buffer, format="JPEG")

    with Image.open(io.BytesIO(resize_to_png(buffer.getvalue(), 128))) as image:
        assert image.format == "PNG"
        assert image.size == (128, 64)


def test_resize_rejects_garbage() -> None:
    with pytest.raises(ExternalServiceError, match="Invalid profile picture"):
        resize_to_png(b"definitely not an image", 32)


def test_discard_removes_written_pictures(tmp_path) -> None:
    kept = tmp_path / "1.png"
    orphan = tmp_path / "2.png"
    kept.write_bytes(b"x")
    orphan.write_bytes(b"x")

    discard_stored_images([orphan, tmp_path / "3.png"])

    assert kept.exists()
    assert not orphan.exists()
