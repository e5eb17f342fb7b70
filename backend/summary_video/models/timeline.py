"""
Modelos da timeline do vídeo-resumo: segmentos, transições, animações
e elementos visuais.

Animações e elementos visuais são uniões fechadas discriminadas pelo
campo ``type``; o renderer despacha por variante, nunca por string.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============== ENUMS ==============


class Easing(str, Enum):
    LINEAR = "linear"
    EASE_IN = "easeIn"
    EASE_OUT = "easeOut"
    EASE_IN_OUT = "easeInOut"
    BOUNCE = "bounce"
    ELASTIC = "elastic"


class TransitionType(str, Enum):
    CROSSFADE = "crossfade"
    SLIDE = "slide"
    ZOOM = "zoom"
    WIPE = "wipe"
    MORPH = "morph"
    PARTICLE = "particle"


class Direction(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    CENTER = "center"


class SegmentKind(str, Enum):
    INTRO = "intro"
    KEYPOINT = "keypoint"
    HIGHLIGHT = "highlight"
    CONCLUSION = "conclusion"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ============== TRANSITIONS ==============


class TransitionDirective(_Frozen):
    """Blend entre o fundo do segmento anterior e o atual."""
    type: TransitionType
    duration: float = Field(gt=0)
    direction: Optional[Direction] = None
    easing: Easing = Easing.EASE_IN_OUT


# ============== ANIMATIONS ==============


class _AnimationBase(_Frozen):
    duration: float = Field(default=1.0, gt=0)
    delay: float = Field(default=0.0, ge=0)


class Typewriter(_AnimationBase):
    type: Literal["typewriter"] = "typewriter"


class FadeIn(_AnimationBase):
    type: Literal["fadeIn"] = "fadeIn"


class SlideIn(_AnimationBase):
    type: Literal["slideIn"] = "slideIn"


class ScaleIn(_AnimationBase):
    type: Literal["scaleIn"] = "scaleIn"


class Glitch(_AnimationBase):
    type: Literal["glitch"] = "glitch"


class Wave(_AnimationBase):
    type: Literal["wave"] = "wave"
    stagger: float = Field(default=0.1, ge=0)


Animation = Annotated[
    Union[Typewriter, FadeIn, SlideIn, ScaleIn, Glitch, Wave],
    Field(discriminator="type"),
]


# ============== VISUAL ELEMENTS ==============


class Rect(_Frozen):
    """Retângulo normalizado em percentuais do canvas (0-100)."""
    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)
    width: float = Field(ge=0, le=100)
    height: float = Field(ge=0, le=100)

    def to_pixels(self, canvas_width: int, canvas_height: int) -> tuple:
        return (
            self.x / 100 * canvas_width,
            self.y / 100 * canvas_height,
            self.width / 100 * canvas_width,
            self.height / 100 * canvas_height,
        )


class TextStyle(_Frozen):
    font_size: int = 48
    bold: bool = True
    fill: str = "#ffffff"
    stroke: Optional[str] = None
    stroke_width: int = 2
    align: TextAlign = TextAlign.LEFT


class TextContent(_Frozen):
    title: str
    subtitle: Optional[str] = None
    body: Optional[str] = None
    badge: Optional[str] = None
    cta: Optional[str] = None
    topic: Optional[str] = None


class ProgressContent(_Frozen):
    current: int
    total: int
    percentage: float = Field(ge=0, le=100)
    time_remaining: int = 0


class TextElement(_Frozen):
    type: Literal["text"] = "text"
    content: TextContent
    animation: Animation
    position: Rect
    style: Optional[TextStyle] = None


class ImageElement(_Frozen):
    type: Literal["image"] = "image"
    source: str
    opacity: float = Field(default=1.0, ge=0, le=1)
    animation: Animation
    position: Rect
    style: Optional[TextStyle] = None


class ProgressElement(_Frozen):
    type: Literal["progress"] = "progress"
    content: ProgressContent
    animation: Animation
    position: Rect
    style: Optional[TextStyle] = None


class OverlayElement(_Frozen):
    type: Literal["overlay"] = "overlay"
    color: str = "#000000"
    alpha: float = Field(default=0.3, ge=0, le=1)
    animation: Animation
    position: Rect
    style: Optional[TextStyle] = None


VisualElement = Annotated[
    Union[TextElement, ImageElement, ProgressElement, OverlayElement],
    Field(discriminator="type"),
]


# ============== SEGMENTS ==============


class Segment(_Frozen):
    """Fatia contígua da timeline com conteúdo e transição próprios."""
    start: float = Field(ge=0)
    end: float = Field(gt=0)
    kind: SegmentKind
    text: str
    narration_text: str = ""
    background: Optional[str] = None
    transitions: List[TransitionDirective] = []
    elements: List[VisualElement] = []

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.end <= self.start:
            raise ValueError(f"segment end ({self.end}) must be after start ({self.start})")
        return self

    @property
    def duration(self) -> float:
        return self.end - self.start

    def contains(self, t: float) -> bool:
        return self.start <= t < self.end
