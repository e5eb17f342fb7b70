"""
Transições entre o fundo do segmento anterior e o atual.

``layers`` calcula o layout (camadas e partículas) para um progresso já
suavizado; ``apply`` pinta esse layout numa FrameSurface.
"""

import random
from dataclasses import dataclass, field
from typing import List, Optional

from PIL import Image

from ..models.timeline import Direction, TransitionDirective, TransitionType
from ..utils.easing import clamp, ease
from .frame_surface import Clip, FrameSurface

PARTICLE_COUNT = 50
PARTICLE_COLOR = "#ffffff"

PREVIOUS = "previous"
CURRENT = "current"


@dataclass(frozen=True)
class Layer:
    """Uma imagem de fundo posicionada. ``source`` é PREVIOUS ou CURRENT."""
    source: str
    dx: float = 0.0
    dy: float = 0.0
    scale: float = 1.0
    alpha: float = 1.0
    clip: Optional[Clip] = None
    blend: str = "normal"


@dataclass(frozen=True)
class Particle:
    x: float
    y: float
    radius: float
    alpha: float


@dataclass(frozen=True)
class TransitionLayout:
    layers: List[Layer] = field(default_factory=list)
    particles: List[Particle] = field(default_factory=list)


def transition_progress(transition: TransitionDirective, local_time: float) -> float:
    """Progresso suavizado da transição no instante local do segmento."""
    return ease(transition.easing, local_time / transition.duration)


def _slide(direction: Direction, progress: float, width: int, height: int) -> List[Layer]:
    match direction:
        case Direction.RIGHT:
            return [Layer(PREVIOUS, dx=width * progress), Layer(CURRENT, dx=-width * (1 - progress))]
        case Direction.UP:
            return [Layer(PREVIOUS, dy=-height * progress), Layer(CURRENT, dy=height * (1 - progress))]
        case Direction.DOWN:
            return [Layer(PREVIOUS, dy=height * progress), Layer(CURRENT, dy=-height * (1 - progress))]
        case Direction.CENTER:
            # Sem eixo definido: corte seco no fim
            return [Layer(CURRENT if progress >= 1 else PREVIOUS)]
        case _:
            return [Layer(PREVIOUS, dx=-width * progress), Layer(CURRENT, dx=width * (1 - progress))]


def _wipe_clip(direction: Direction, progress: float, width: int, height: int) -> Clip:
    match direction:
        case Direction.RIGHT:
            return ("rect", width * (1 - progress), 0, width * progress, height)
        case Direction.UP:
            return ("rect", 0, 0, width, height * progress)
        case Direction.DOWN:
            return ("rect", 0, height * (1 - progress), width, height * progress)
        case Direction.CENTER:
            return ("circle", width / 2, height / 2, min(width, height) * progress / 2)
        case _:
            return ("rect", 0, 0, width * progress, height)


def _crossfade(progress: float) -> List[Layer]:
    return [Layer(PREVIOUS, alpha=1 - progress), Layer(CURRENT, alpha=progress)]


def _particles(progress: float, width: int, height: int, rng: random.Random) -> List[Particle]:
    particles = []
    for index in range(PARTICLE_COUNT):
        particle_progress = clamp(progress * 2 - index / PARTICLE_COUNT)
        if particle_progress > 0:
            particles.append(Particle(
                x=rng.random() * width,
                y=rng.random() * height,
                radius=2 + rng.random() * 4,
                alpha=particle_progress * (1 - particle_progress) * 4,
            ))
    return particles


def layers(
    transition: TransitionDirective,
    progress: float,
    width: int,
    height: int,
    rng: random.Random
) -> TransitionLayout:
    """
    Layout da transição para um progresso suavizado em [0, 1].

    Args:
        transition: Diretiva da transição
        progress: Progresso já com easing aplicado
        width, height: Tamanho do canvas
        rng: Fonte aleatória (só usada pelas partículas)

    Returns:
        TransitionLayout com camadas na ordem de pintura
    """
    progress = clamp(progress)
    direction = transition.direction or Direction.LEFT

    match transition.type:
        case TransitionType.CROSSFADE:
            return TransitionLayout(layers=_crossfade(progress))
        case TransitionType.SLIDE:
            return TransitionLayout(layers=_slide(direction, progress, width, height))
        case TransitionType.ZOOM:
            return TransitionLayout(layers=[
                Layer(PREVIOUS, scale=1 + 0.2 * progress, alpha=1 - progress),
                Layer(CURRENT, scale=0.8 + 0.2 * progress, alpha=progress),
            ])
        case TransitionType.WIPE:
            return TransitionLayout(layers=[
                Layer(PREVIOUS),
                Layer(CURRENT, clip=_wipe_clip(direction, progress, width, height)),
            ])
        case TransitionType.MORPH:
            return TransitionLayout(layers=[
                Layer(PREVIOUS, alpha=1 - progress),
                Layer(CURRENT, alpha=progress, blend="screen"),
            ])
        case TransitionType.PARTICLE:
            return TransitionLayout(
                layers=_crossfade(progress),
                particles=_particles(progress, width, height, rng),
            )
        case _:
            raise TypeError(f"Unsupported transition: {transition.type!r}")


def apply(
    surface: FrameSurface,
    layout: TransitionLayout,
    previous: Image.Image,
    current: Image.Image
):
    """Pinta o layout sobre a superfície."""
    images = {PREVIOUS: previous, CURRENT: current}
    for layer in layout.layers:
        surface.draw_image(
            images[layer.source],
            x=layer.dx,
            y=layer.dy,
            scale=layer.scale,
            alpha=layer.alpha,
            clip=layer.clip,
            blend=layer.blend,
        )
    for particle in layout.particles:
        surface.fill_circle(particle.x, particle.y, particle.radius, PARTICLE_COLOR, particle.alpha)
