"""Bulk import of garment photos from a zip archive."""

from __future__ import annotations

import base64
import io
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Union

from models.errors import ArchiveImportError

LOGGER = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif")
NO_IMAGES_MESSAGE = "The selected zip file does not contain any valid images (jpg, jpeg, png, gif)."
CORRUPT_ARCHIVE_MESSAGE = (
    "There was an error processing the zip file. It might be corrupted or not a valid zip file."
)

ArchiveSource = Union[str, Path, bytes, BinaryIO]


@dataclass(frozen=True)
class UnprocessedItem:
    """An image pulled from an archive, waiting for the user to describe it."""

    original_name: str
    image_url: str


def _as_file(source: ArchiveSource) -> Union[str, Path, BinaryIO]:
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(source)
    return source


def read_image_archive(source: ArchiveSource) -> List[UnprocessedItem]:
    """Return every image entry as a data URL, in archive order.

    Raises :class:`ArchiveImportError` for unreadable archives and for archives
    without a single image; nothing partial is returned in either case.
    """

    items: List[UnprocessedItem] = []
    try:
        with zipfile.ZipFile(_as_file(source)) as archive:
            for info in archive.infolist():
                if info.is_dir() or not info.filename.lower().endswith(IMAGE_EXTENSIONS):
                    continue
                extension = info.filename.rsplit(".", 1)[-1].lower()
                encoded = base64.b64encode(archive.read(info)).decode("ascii")
                items.append(
                    UnprocessedItem(
                        original_name=info.filename,
                        image_url=f"data:image/{extension};base64,{encoded}",
                    )
                )
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        OSError,
        EOFError,
        NotImplementedError,
        RuntimeError,
    ) as exc:
        LOGGER.error("Error processing zip file", exc_info=exc)
        raise ArchiveImportError(CORRUPT_ARCHIVE_MESSAGE) from exc

    if not items:
        raise ArchiveImportError(NO_IMAGES_MESSAGE)
    LOGGER.info("Read images from archive", extra={"image_count": len(items)})
    return items


__all__ = ["IMAGE_EXTENSIONS", "UnprocessedItem", "read_image_archive"]
