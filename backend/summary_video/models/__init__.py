"""
Models package for the summary video compositor.
"""

from .config import (
    ApiConfig,
    ElevenLabsConfig,
    RenderConfig,
    ThemeConfig,
    NarrationConfig,
    AssetConfig,
    PlaceholderConfig,
    FullConfig,
)
from .errors import (
    CompositorError,
    InvalidDurationError,
    AssetLoadError,
    EncodingError,
    NarrationError,
    GenerationCancelled,
    Outcome,
)
from .timeline import (
    Easing,
    TransitionType,
    Direction,
    SegmentKind,
    TextAlign,
    TransitionDirective,
    Typewriter,
    FadeIn,
    SlideIn,
    ScaleIn,
    Glitch,
    Wave,
    Animation,
    Rect,
    TextStyle,
    TextContent,
    ProgressContent,
    TextElement,
    ImageElement,
    ProgressElement,
    OverlayElement,
    VisualElement,
    Segment,
)
from .video import (
    Sentiment,
    Difficulty,
    VideoDescriptor,
    SummaryResult,
    AudioResource,
    GeneratedArtifact,
)
from .job import JobStatus, JobStatusEnum

__all__ = [
    # Config
    "ApiConfig",
    "ElevenLabsConfig",
    "RenderConfig",
    "ThemeConfig",
    "NarrationConfig",
    "AssetConfig",
    "PlaceholderConfig",
    "FullConfig",
    # Errors
    "CompositorError",
    "InvalidDurationError",
    "AssetLoadError",
    "EncodingError",
    "NarrationError",
    "GenerationCancelled",
    "Outcome",
    # Timeline
    "Easing",
    "TransitionType",
    "Direction",
    "SegmentKind",
    "TextAlign",
    "TransitionDirective",
    "Typewriter",
    "FadeIn",
    "SlideIn",
    "ScaleIn",
    "Glitch",
    "Wave",
    "Animation",
    "Rect",
    "TextStyle",
    "TextContent",
    "ProgressContent",
    "TextElement",
    "ImageElement",
    "ProgressElement",
    "OverlayElement",
    "VisualElement",
    "Segment",
    # Video
    "Sentiment",
    "Difficulty",
    "VideoDescriptor",
    "SummaryResult",
    "AudioResource",
    "GeneratedArtifact",
    # Job
    "JobStatus",
    "JobStatusEnum",
]
