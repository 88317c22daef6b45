"""ytmp3 Backend Application.

This is the main entry point for the ytmp3 backend service, a small HTTP
front for yt-dlp that looks up video metadata and converts a video's audio
to a downloadable MP3.

Modules:
    - media: metadata lookup and MP3 conversion (yt-dlp subprocesses)
    - files: one-shot downloads and the hourly cleanup of stale files
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from ytmp3.config import get_config
from ytmp3.files.reaper import DownloadReaper
from ytmp3.files.router import get_store, router as files_router
from ytmp3.media.router import router as media_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# uvicorn.access logs every download poll; httpx/httpcore only show up
# through the test client.
for _noisy in (
    "uvicorn.access",
    "httpx",
    "httpcore",
):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# Same message a body without a usable url gets from the route itself.
_MISSING_URL_ERRORS = {
    "/api/info": "Invalid YouTube URL",
    "/api/convert": "URL required",
}


def validation_error_message(path: str, errors) -> str:
    """Pick the error text for a body that failed validation.

    An absent or non-JSON body, or a bad ``url`` field, reads as "no url"
    on the media routes.  Anything else (e.g. a malformed ``quality``) is a
    generic invalid request.
    """
    message = _MISSING_URL_ERRORS.get(path)
    if message is None:
        return "Invalid request"
    for error in errors:
        loc = tuple(error.get("loc", ()))
        if loc[:1] != ("body",):
            return "Invalid request"
        if len(loc) > 1 and loc[1] != "url" and not isinstance(loc[1], int):
            return "Invalid request"
    return message


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    config = get_config()

    configured_level = getattr(logging, config.logging.level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", config.logging.level.upper())

    reaper = DownloadReaper(
        get_store(),
        max_age_seconds=config.storage.max_age_seconds,
        interval_seconds=config.storage.sweep_interval_seconds,
    )
    await reaper.start()
    app.state.reaper = reaper

    yield  # Application runs here

    # Shutdown
    await reaper.stop()
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Build the FastAPI application from the current settings."""
    config = get_config()

    application = FastAPI(
        title="ytmp3 API",
        description="Video metadata lookup and MP3 conversion backed by yt-dlp",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
        message = validation_error_message(request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": message})

    # Register all routers
    application.include_router(media_router)
    application.include_router(files_router)

    @application.get("/health")
    async def health() -> dict:
        """Health check endpoint.

        Returns:
            dict: Status object indicating the server is running.
        """
        return {"status": "ok"}

    # Front-end last so it never shadows the API routes.
    static_dir = Path(config.static.directory)
    if config.static.enabled and static_dir.is_dir():
        application.mount("/", StaticFiles(directory=str(static_dir), html=True), name="public")
        logger.info("Serving static files from %s", static_dir)

    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    config = get_config()
    logger.info(
        f"Server running on http://{config.server.host}:{config.server.port}"
    )
    uvicorn.run(app, host=config.server.host, port=config.server.port)
