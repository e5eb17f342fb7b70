"""
Utility modules for the summary video compositor.
"""

from .logger import get_job_logger, setup_logging
from .easing import ease, interpolate

__all__ = [
    "get_job_logger",
    "setup_logging",
    "ease",
    "interpolate",
]
