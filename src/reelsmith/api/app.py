"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from reelsmith.api.dependencies import get_broadcaster, get_preset_store
from reelsmith.api.middleware import reelsmith_error_handler
from reelsmith.api.progress import ProgressBroadcaster
from reelsmith.api.routes import media, presets, scraper, videos
from reelsmith.config import configure_logging, get_settings
from reelsmith.models.errors import ReelsmithError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_preset_store().ensure_defaults()
    logger.info("Reelsmith server ready")
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Reelsmith",
        description="Preset-driven short video assembly",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ReelsmithError, reelsmith_error_handler)

    app.include_router(presets.router)
    app.include_router(media.router)
    app.include_router(scraper.router)
    app.include_router(videos.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": "0.1.0"}

    @app.websocket("/ws")
    async def progress_socket(
        websocket: WebSocket, broadcaster: ProgressBroadcaster = Depends(get_broadcaster)
    ):
        await broadcaster.connect(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            broadcaster.disconnect(websocket)

    settings = get_settings()
    app.mount(
        "/tiktokimages",
        StaticFiles(directory=settings.resolve(settings.overlay_images_dir), check_dir=False),
        name="overlay-images",
    )
    app.mount(
        "/tiktokvideos",
        StaticFiles(directory=settings.resolve(settings.downloads_dir), check_dir=False),
        name="downloads",
    )

    # Mount after API routes so they take priority
    static_dir = settings.resolve(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run("reelsmith.api.app:app", host=settings.host, port=settings.port)
