"""
Services package for the summary video compositor.
"""

from .segment_planner import SegmentPlanner
from .frame_surface import FrameSurface
from .frame_renderer import FrameRenderer
from .asset_loader import AssetLoader
from .frame_recorder import FFmpegRecorder, FrameSink
from .capture_driver import CancellationToken, CaptureDriver
from .thumbnail_generator import ThumbnailGenerator
from .narration_generator import (
    ElevenLabsNarrator,
    SilentTrackGenerator,
    build_narration_script,
    estimate_duration,
)
from .job_orchestrator import SummaryVideoOrchestrator

__all__ = [
    "SegmentPlanner",
    "FrameSurface",
    "FrameRenderer",
    "AssetLoader",
    "FFmpegRecorder",
    "FrameSink",
    "CancellationToken",
    "CaptureDriver",
    "ThumbnailGenerator",
    "ElevenLabsNarrator",
    "SilentTrackGenerator",
    "build_narration_script",
    "estimate_duration",
    "SummaryVideoOrchestrator",
]
