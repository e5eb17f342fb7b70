"""
Routers package for the summary video API.
"""

from .config import router as config_router
from .video import router as video_router
from .jobs import router as jobs_router

__all__ = [
    "config_router",
    "video_router",
    "jobs_router",
]
