"""
FastAPI main application for the summary video compositor.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .routers import config_router, jobs_router, video_router
from .routers.video import OUTPUT_DIR
from .utils.logger import setup_logging

setup_logging(
    level=os.getenv("LOG_LEVEL", "INFO"),
    log_file=os.getenv("LOG_FILE")
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Summary Video API...")

    for dir_path in ["storage/temp", OUTPUT_DIR]:
        Path(dir_path).mkdir(parents=True, exist_ok=True)
        logger.info(f"Ensured directory exists: {dir_path}")

    yield

    logger.info("Shutting down Summary Video API...")


app = FastAPI(
    title="Summary Video API",
    description="API para composição de vídeos-resumo narrados",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(config_router)
app.include_router(video_router)
app.include_router(jobs_router)

# Static files for generated videos and thumbnails
outputs_dir = Path(OUTPUT_DIR)
outputs_dir.mkdir(parents=True, exist_ok=True)
app.mount("/outputs", StaticFiles(directory=str(outputs_dir)), name="outputs")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Summary Video API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api")
async def api_info():
    """API information."""
    return {
        "endpoints": {
            "config": "/api/config",
            "video": "/api/video",
            "jobs": "/api/jobs",
        },
        "documentation": "/docs",
    }
