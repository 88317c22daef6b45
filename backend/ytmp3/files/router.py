"""FastAPI router for downloading converted audio files."""
import logging
from typing import Callable

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, JSONResponse

from ytmp3.config import get_config

from .service import DownloadStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["files"])


class OneShotFileResponse(FileResponse):
    """FileResponse that runs *on_close* once sending stops.

    *on_close* runs whether the body was fully sent or the client went away
    mid-stream, so a file is never served twice.
    """

    def __init__(self, *args, on_close: Callable[[], object], **kwargs):
        super().__init__(*args, **kwargs)
        self._on_close = on_close

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self._on_close()


def get_store() -> DownloadStore:
    """Dependency returning the shared download store."""
    return DownloadStore.get_instance(get_config().storage.downloads_dir)


def get_download_url(file_id: str) -> str:
    """Relative URL a client fetches a converted file from."""
    return f"/api/download/{file_id}"


@router.get("/download/{file_id}")
async def download_file(file_id: str, store: DownloadStore = Depends(get_store)):
    """Stream a converted MP3 once, then delete it.

    Args:
        file_id: The id returned by the convert endpoint

    Returns:
        The audio stream as an attachment named ``audio-<id>.mp3``

    Raises:
        404: If no file is stored under that id
    """
    if not store.exists(file_id):
        return JSONResponse(status_code=404, content={"error": "File not found"})

    logger.info(f"Serving download {file_id}")
    return OneShotFileResponse(
        path=store.path_for(file_id),
        filename=f"audio-{file_id}.mp3",
        media_type="audio/mpeg",
        on_close=lambda: store.delete(file_id),
    )
