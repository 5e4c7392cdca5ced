"""FastAPI server for the slideshow service."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse

from slideshow.api import get_artifact_store, get_generation_runner, get_project_repo, router as api_router
from slideshow.env_config import VIDEOS_SUBDIR

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Pick the encoder at startup rather than on the first request."""
    runner = get_generation_runner(get_project_repo(), get_artifact_store())
    encoder = runner.generation_service.encoder
    if encoder.is_placeholder:
        logger.warning("Serving with PLACEHOLDER encoder - install ffmpeg for real videos")
    yield


app = FastAPI(
    title="Slideshow Video API",
    description="Assemble ordered still images into a single video",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.include_router(api_router, prefix="/api")


@app.get("/videos/{filename}")
async def download_video(filename: str):
    """Serve a generated video file."""
    if Path(filename).name != filename:
        raise HTTPException(status_code=400, detail="Invalid filename")

    store = get_artifact_store()
    relative = f"{VIDEOS_SUBDIR}/{filename}"
    if not store.exists(relative):
        raise HTTPException(status_code=404, detail="Video not found")

    return FileResponse(store.resolve(relative), media_type="video/mp4", filename=filename)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}
