"""Shared fixtures for the summary video tests."""

from pathlib import Path
from typing import List, Optional

import pytest
from PIL import Image

from summary_video.models.config import RenderConfig, Resolution
from summary_video.models import (
    AudioResource,
    EncodingError,
    FullConfig,
    Segment,
    SegmentKind,
    Sentiment,
    SummaryResult,
    VideoDescriptor,
)


@pytest.fixture
def video() -> VideoDescriptor:
    return VideoDescriptor(
        id="dQw4w9WgXcQ",
        title="How Transformers Changed Machine Learning",
        channel_title="Deep Dives",
        duration=600,
        thumbnail="https://img.youtube.com/vi/dQw4w9WgXcQ/hqdefault.jpg",
        published_at="2024-01-01T00:00:00Z",
        view_count=1000,
        tags=["ai", "ml"],
    )


@pytest.fixture
def summary() -> SummaryResult:
    return SummaryResult(
        summary="A tour of attention-based models.",
        key_points=[
            "Attention replaces recurrence",
            "Scaling laws favour bigger models",
            "Pretraining transfers across tasks",
            "Tokenization matters more than expected",
            "Inference cost is the new bottleneck",
        ],
        main_topics=["transformers", "scaling", "inference"],
        sentiment=Sentiment.POSITIVE,
    )


@pytest.fixture
def small_config() -> FullConfig:
    return FullConfig(render=RenderConfig(resolution=Resolution(width=32, height=18), fps=30))


def solid(color, size=(64, 36)) -> Image.Image:
    return Image.new("RGB", size, color)


def simple_segments(total: float, parts: int = 2) -> List[Segment]:
    """Segmentos contíguos sem elementos nem fundo."""
    step = total / parts
    return [
        Segment(
            start=i * step,
            end=total if i == parts - 1 else (i + 1) * step,
            kind=SegmentKind.KEYPOINT,
            text=f"part {i}",
        )
        for i in range(parts)
    ]


def audio_of(duration: float) -> AudioResource:
    return AudioResource(duration_seconds=duration, is_placeholder=True)


class FakeRecorder:
    """Gravador em memória: conta quadros e registra o ciclo de vida."""

    def __init__(self, output_path: Path, fail_at: Optional[int] = None):
        self.output_path = Path(output_path)
        self.fail_at = fail_at
        self.started = False
        self.finalized = False
        self.aborted = False
        self.frames = 0
        self.frame_sizes = set()

    def start(self):
        self.started = True

    def write_frame(self, frame: bytes):
        if self.fail_at is not None and self.frames >= self.fail_at:
            raise EncodingError("pipe closed")
        self.frames += 1
        self.frame_sizes.add(len(frame))

    def finalize(self, audio_path=None) -> Path:
        self.finalized = True
        return self.output_path

    def abort(self):
        self.aborted = True


class TrackingLoader:
    """Loader em memória: imagens sólidas que registram o próprio close()."""

    def __init__(self, color=(40, 80, 120)):
        self.color = color
        self.requested = []
        self.closed = []

    async def load_all(self, sources):
        self.requested = list(sources)
        images = {}
        for source in dict.fromkeys(s for s in self.requested if s):
            image = solid(self.color)
            image.close = lambda source=source: self.closed.append(source)
            images[source] = image
        return images
