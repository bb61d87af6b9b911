"""Helpers for safe upload size checks."""

from __future__ import annotations

from os import SEEK_END
from pathlib import Path

from fastapi import UploadFile


MULTIPART_OVERHEAD_BYTES = 64 * 1024


def content_length_exceeds_limit(
    content_length_header: str | None,
    *,
    max_size_bytes: int,
    overhead_bytes: int = MULTIPART_OVERHEAD_BYTES,
) -> bool:
    """Return True when Content-Length clearly exceeds the allowed request size."""
    if not content_length_header:
        return False
    try:
        content_length = int(content_length_header)
    except (TypeError, ValueError):
        return False
    return content_length > (max_size_bytes + overhead_bytes)


def get_upload_file_size(file: UploadFile) -> int:
    """Read size from the underlying file object without loading into memory."""
    stream = file.file
    original_pos = stream.tell()
    try:
        stream.seek(0, SEEK_END)
        return stream.tell()
    finally:
        stream.seek(original_pos)


def file_extension(filename: str | None) -> str:
    """Lowercased extension including the dot, or '' when missing."""
    if not filename:
        return ""
    return Path(filename).suffix.lower()


def is_within_directory(base_dir: Path, candidate: Path) -> bool:
    """True if candidate resolves to a path inside base_dir."""
    base = base_dir.resolve()
    try:
        candidate.resolve().relative_to(base)
    except ValueError:
        return False
    return True
