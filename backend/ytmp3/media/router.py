"""FastAPI router for video metadata and MP3 conversion.

Endpoints:
    POST /api/info: Title, duration, thumbnail, uploader and id for a video
    POST /api/convert: Convert a video's audio to MP3 for a single download

Both endpoints shell out to yt-dlp and collapse every failure of the tool
into a generic 500.  Invalid input is rejected with a 400 before any
process is spawned.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ytmp3.config import get_config
from ytmp3.files.router import get_download_url, get_store
from ytmp3.files.service import DownloadStore
from ytmp3.formatting import format_bytes, format_duration

from .runner import DownloaderError, YtDlpRunner, get_runner
from .schemas import (
    ConvertRequest,
    ConvertResponse,
    ErrorResponse,
    InfoRequest,
    VideoInfo,
    resolve_audio_quality,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["media"])


def _error(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def is_supported_url(url: str, allowed_hosts: List[str]) -> bool:
    """True if *url* mentions one of the allowed video hosts."""
    return any(host in url for host in allowed_hosts)


@router.post(
    "/info",
    response_model=VideoInfo,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_info(req: InfoRequest, runner: YtDlpRunner = Depends(get_runner)):
    """Fetch metadata for a video without downloading it.

    Example::

        POST /api/info
        {"url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"}

        200 OK
        {
            "title": "Never Gonna Give You Up",
            "duration": "3:33",
            "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
            "uploader": "Rick Astley",
            "id": "dQw4w9WgXcQ"
        }
    """
    allowed_hosts = get_config().downloader.allowed_hosts
    if not req.url or not is_supported_url(req.url, allowed_hosts):
        return _error(400, "Invalid YouTube URL")

    try:
        info = await runner.fetch_info(req.url)
    except DownloaderError as exc:
        logger.error(f"Info lookup failed for {req.url}: {exc}")
        return _error(500, "Failed to fetch video info")

    return VideoInfo(
        title=info.get("title"),
        duration=format_duration(info.get("duration")),
        thumbnail=info.get("thumbnail"),
        uploader=info.get("uploader"),
        id=info.get("id"),
    )


@router.post(
    "/convert",
    response_model=ConvertResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def convert(
    req: ConvertRequest,
    runner: YtDlpRunner = Depends(get_runner),
    store: DownloadStore = Depends(get_store),
):
    """Convert a video's audio track to MP3.

    The file is kept until it is downloaded once or the reaper expires it.
    ``quality`` is one of 128, 192 or 320 (default); anything else means 320.
    """
    if not req.url:
        return _error(400, "URL required")

    requested = req.quality if req.quality is not None else get_config().downloader.default_quality
    quality = resolve_audio_quality(requested)

    file_id = store.new_id()
    output_path = store.path_for(file_id)

    try:
        await runner.extract_audio(req.url, output_path, quality.value)
        if not store.exists(file_id):
            raise DownloaderError("File not created")
        size_bytes = store.size(file_id)
    except (DownloaderError, OSError) as exc:
        logger.error(f"Conversion failed for {req.url}: {exc}")
        return _error(500, "Conversion failed", details=str(exc))
    finally:
        # The file on disk now guards the id, or the conversion failed.
        store.release(file_id)

    logger.info(f"Converted {req.url} -> {output_path} ({size_bytes} bytes, {quality.value})")

    return ConvertResponse(
        download_url=get_download_url(file_id),
        file_size=format_bytes(size_bytes),
        quality=quality,
    )
