"""Local disk storage for update photos, videos, and cover photos."""

from __future__ import annotations

import logging
import os
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from fortyweeks.core.config import settings
from fortyweeks.utils.file_upload import file_extension, is_within_directory

logger = logging.getLogger(__name__)

PHOTO_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".heic"}
VIDEO_EXTENSIONS = {".mp4", ".mov"}
COVER_PHOTO_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
COVERS_SUBDIR = "covers"

VIDEO_CONTENT_TYPES = {
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".webm": "video/webm",
    ".avi": "video/x-msvideo",
}

CHUNK_SIZE = 1024 * 1024


@dataclass
class IncomingFile:
    """An uploaded file handed to the storage layer."""

    filename: str
    stream: BinaryIO


@dataclass
class StoredFile:
    filename: str
    original_filename: str
    file_size: int


def _unix_now() -> int:
    return int(time.time())


def _write_stream(stream: BinaryIO, destination: Path) -> int:
    """Copy stream to destination in chunks; returns bytes written."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    stream.seek(0)
    with open(destination, "wb") as f:
        shutil.copyfileobj(stream, f, CHUNK_SIZE)
    return destination.stat().st_size


def remove_file(path: Path) -> None:
    """Best-effort delete; a missing file is not an error."""
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.exception("Failed to remove file %s", path.name)


# =============================================================================
# Update media
# =============================================================================

def save_update_photos(
    pregnancy_id: int,
    update_id: int,
    files: list[IncomingFile],
) -> list[StoredFile]:
    """
    Store photos as {images}/{pregnancy_id}/{update_id}_{unix}_{i}{ext}.

    Non-image types and files that fail to write are logged and skipped.
    """
    directory = settings.images_path / str(pregnancy_id)
    stamp = _unix_now()
    stored: list[StoredFile] = []
    for i, incoming in enumerate(files):
        ext = file_extension(incoming.filename)
        if ext not in PHOTO_EXTENSIONS:
            logger.info("Skipping unsupported photo type %r for update %s", ext, update_id)
            continue
        filename = f"{update_id}_{stamp}_{i}{ext}"
        try:
            size = _write_stream(incoming.stream, directory / filename)
        except OSError:
            logger.exception("Failed to store photo for update %s", update_id)
            continue
        stored.append(StoredFile(filename, incoming.filename or filename, size))
    return stored


def save_update_videos(
    pregnancy_id: int,
    update_id: int,
    files: list[IncomingFile],
) -> list[StoredFile]:
    """Store .mp4/.mov videos under {videos}/{pregnancy_id}/; other types are skipped."""
    directory = settings.videos_path / str(pregnancy_id)
    stamp = _unix_now()
    stored: list[StoredFile] = []
    for i, incoming in enumerate(files):
        ext = file_extension(incoming.filename)
        if ext not in VIDEO_EXTENSIONS:
            logger.info("Skipping unsupported video type %r for update %s", ext, update_id)
            continue
        filename = f"{update_id}_{stamp}_{i}{ext}"
        try:
            size = _write_stream(incoming.stream, directory / filename)
        except OSError:
            logger.exception("Failed to store video for update %s", update_id)
            continue
        stored.append(StoredFile(filename, incoming.filename or filename, size))
    return stored


def is_video_filename(filename: str) -> bool:
    return file_extension(filename) in VIDEO_EXTENSIONS


# =============================================================================
# Cover photos
# =============================================================================

def save_cover_photo(pregnancy_id: int, incoming: IncomingFile) -> str:
    """
    Store a cover photo as covers/pregnancy_{id}_cover_{unix}{ext}.

    Raises:
        ValueError: Unsupported extension
    """
    ext = file_extension(incoming.filename)
    if ext not in COVER_PHOTO_EXTENSIONS:
        raise ValueError("Invalid file type. Only JPG, PNG, and WebP are allowed")
    filename = f"pregnancy_{pregnancy_id}_cover_{_unix_now()}{ext}"
    _write_stream(incoming.stream, cover_photo_path(filename))
    return filename


def cover_photo_path(filename: str) -> Path:
    return settings.images_path / COVERS_SUBDIR / filename


# =============================================================================
# Serving
# =============================================================================

def resolve_media_path(base_dir: Path, relative_path: str) -> Path | None:
    """
    Resolve a request path under base_dir.

    Returns None when the path escapes the directory (traversal or absolute).
    """
    if not relative_path or os.path.isabs(relative_path) or "\x00" in relative_path:
        return None
    candidate = base_dir / relative_path
    if not is_within_directory(base_dir, candidate):
        return None
    return candidate


def video_content_type(path: Path) -> str:
    return VIDEO_CONTENT_TYPES.get(path.suffix.lower(), "application/octet-stream")
