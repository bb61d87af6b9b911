"""Static media serving for uploaded photos, videos, and cover photos."""

from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from fortyweeks.core.config import settings
from fortyweeks.services import media_service

router = APIRouter(tags=["media"])

IMMUTABLE_CACHE = "public, max-age=31536000, immutable"


def _existing_file(base_dir: Path, path: str, label: str) -> Path:
    file_path = media_service.resolve_media_path(base_dir, path)
    if file_path is None:
        raise HTTPException(status_code=400, detail=f"Invalid {label} path")
    if not file_path.is_file():
        raise HTTPException(status_code=404, detail=f"{label.capitalize()} not found")
    return file_path


@router.get("/images/{path:path}")
def get_image(path: str):
    """Photos and cover photos. Filenames embed a timestamp, so they never change."""
    file_path = _existing_file(settings.images_path, path, "image")
    return FileResponse(file_path, headers={"Cache-Control": IMMUTABLE_CACHE})


@router.get("/videos/{path:path}")
def get_video(path: str):
    file_path = _existing_file(settings.videos_path, path, "video")
    return FileResponse(
        file_path,
        media_type=media_service.video_content_type(file_path),
        headers={"Cache-Control": IMMUTABLE_CACHE},
    )
