"""
Animações de texto.

Cada animação é uma função pura de (texto, progresso) que devolve
diretivas de desenho; o renderer só aplica as diretivas na superfície.
A aleatoriedade do glitch vem de um ``random.Random`` injetado e o
cursor do typewriter de um relógio injetado (ms).
"""

import math
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from ..models.timeline import FadeIn, Glitch, ScaleIn, SlideIn, Typewriter, Wave
from ..utils.easing import bounce, clamp, ease_out

SLIDE_DISTANCE = 100
CARET_BLINK_MS = 500
GLITCH_THRESHOLD = 0.1
GLITCH_GHOST_CHANCE = 0.3

Measure = Callable[[str], float]


@dataclass(frozen=True)
class GlyphDraw:
    """Um trecho de texto a desenhar relativo à posição da linha."""
    text: str
    dx: float = 0.0
    dy: float = 0.0
    alpha: float = 1.0
    scale: float = 1.0
    fill: Optional[str] = None
    stroke: bool = True


@dataclass(frozen=True)
class TextFrame:
    """Diretivas de um quadro para uma linha de texto."""
    glyphs: List[GlyphDraw] = field(default_factory=list)
    caret: Optional[Tuple[float, float, float, float]] = None  # dx, dy, w, h


def animation_progress(animation, local_time: float) -> float:
    """Progresso da animação: clamp((t - delay) / duration, 0, 1)."""
    return clamp((local_time - animation.delay) / animation.duration)


def typewriter(text: str, progress: float, measure: Measure, clock_ms: float) -> TextFrame:
    visible = text[:int(math.floor(len(text) * progress))]
    caret = None
    if progress < 1 and int(clock_ms // CARET_BLINK_MS) % 2:
        caret = (measure(visible), -20.0, 2.0, 25.0)
    return TextFrame(glyphs=[GlyphDraw(visible, stroke=False)] if visible else [], caret=caret)


def fade_in(text: str, progress: float) -> TextFrame:
    return TextFrame(glyphs=[GlyphDraw(text, alpha=ease_out(progress))])


def slide_in(text: str, progress: float) -> TextFrame:
    eased = ease_out(progress)
    return TextFrame(glyphs=[GlyphDraw(text, dx=-SLIDE_DISTANCE * (1 - eased), alpha=eased)])


def scale_in(text: str, progress: float) -> TextFrame:
    scale = 0.3 + bounce(progress) * 0.7
    return TextFrame(glyphs=[GlyphDraw(text, alpha=progress, scale=scale)])


def glitch(text: str, progress: float, rng: random.Random) -> TextFrame:
    if progress < GLITCH_THRESHOLD:
        return TextFrame()

    intensity = math.sin(progress * 20) * 5
    offset_x = (rng.random() - 0.5) * intensity
    offset_y = (rng.random() - 0.5) * intensity

    glyphs = [GlyphDraw(text, dx=offset_x, dy=offset_y, stroke=False)]
    if rng.random() < GLITCH_GHOST_CHANCE:
        glyphs.append(GlyphDraw(text, dx=offset_x + 2, dy=offset_y, alpha=0.5, fill="#ff0000", stroke=False))
    if rng.random() < GLITCH_GHOST_CHANCE:
        glyphs.append(GlyphDraw(text, dx=offset_x - 2, dy=offset_y, alpha=0.5, fill="#00ff00", stroke=False))
    return TextFrame(glyphs=glyphs)


def wave(text: str, progress: float, stagger: float, measure: Measure) -> TextFrame:
    glyphs = []
    current_x = 0.0
    for index, char in enumerate(text):
        char_progress = clamp(progress - index * stagger)
        if char_progress > 0:
            offset = math.sin(char_progress * math.pi * 2 + index * 0.5) * 10 * char_progress
            glyphs.append(GlyphDraw(char, dx=current_x, dy=offset, alpha=char_progress))
        current_x += measure(char)
    return TextFrame(glyphs=glyphs)


def animate_text(
    animation,
    text: str,
    progress: float,
    measure: Measure,
    rng: random.Random,
    clock_ms: float = 0.0
) -> TextFrame:
    """Despacha para a variante de animação."""
    match animation:
        case Typewriter():
            return typewriter(text, progress, measure, clock_ms)
        case FadeIn():
            return fade_in(text, progress)
        case SlideIn():
            return slide_in(text, progress)
        case ScaleIn():
            return scale_in(text, progress)
        case Glitch():
            return glitch(text, progress, rng)
        case Wave(stagger=stagger):
            return wave(text, progress, stagger, measure)
        case _:
            raise TypeError(f"Unsupported animation: {animation!r}")
