"""Profile picture processing and storage."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from sqlalchemy.orm import Session

from neor.core.errors import ExternalServiceError
from neor.models import File

logger = logging.getLogger(__name__)

INVALID_PROFILE_PICTURE = "Invalid profile picture"
STORED_EXTENSION = "png"


def resize_to_png(data: bytes, width: int) -> bytes:
    """Scale an image to ``width`` pixels wide, keeping its aspect ratio.

    Raises:
        ExternalServiceError: If ``data`` is not a readable image.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            height = max(1, round(image.height * width / image.width))
            resized = image.convert("RGBA").resize((width, height), Image.Resampling.LANCZOS)
        output = io.BytesIO()
        resized.save(output, format="PNG")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        logger.info("Rejected profile picture", extra={"error": str(exc)})
        raise ExternalServiceError(INVALID_PROFILE_PICTURE) from exc
    return output.getvalue()


def store_resized_image(
    db: Session,
    files_dir: Path,
    filename: str,
    data: bytes,
    width: int,
    uploaded_by_user_id: int,
) -> File:
    """Resize ``data`` and persist it as a new ``File``.

    The row is flushed to obtain its id, which names the file on disk.
    """
    png = resize_to_png(data, width)
    file = File(
        filename=filename[:255] or "upload",
        extension=STORED_EXTENSION,
        size=len(png),
        uploaded_by_user_id=uploaded_by_user_id,
    )
    db.add(file)
    db.flush()

    path = files_dir / file.filename_on_disk
    try:
        files_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(png)
    except OSError as exc:
        logger.error("Could not write profile picture", extra={"path": str(path)})
        path.unlink(missing_ok=True)
        raise ExternalServiceError(INVALID_PROFILE_PICTURE) from exc
    return file


def discard_stored_images(paths: list[Path]) -> None:
    """Remove pictures written by a transaction that was rolled back."""
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove orphaned picture", extra={"path": str(path)})
