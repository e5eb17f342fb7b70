"""
Renderização de um quadro do vídeo-resumo.

Ordem de pintura: fundo (transição ou parallax ou gradiente),
overlays, elementos visuais do segmento e por último o "chrome"
(tempo decorrido e selo AI SUMMARY).
"""

import logging
import math
import random
import time
from typing import Callable, Dict, Optional

from PIL import Image

from ..models.config import ThemeConfig
from ..models.timeline import (
    ImageElement,
    OverlayElement,
    ProgressElement,
    Segment,
    TextAlign,
    TextElement,
    TextStyle,
)
from ..models.video import Sentiment
from ..utils.easing import clamp
from . import transition_renderer
from .frame_surface import FrameSurface, gradient_image
from .text_animator import TextFrame, animate_text, animation_progress

logger = logging.getLogger(__name__)

PARALLAX_INTENSITY = 0.05
READABILITY_ALPHA = 0.4
TINT_BASE_ALPHA = 0.1
TINT_PULSE_ALPHA = 0.05

BODY_FONT_SIZE = 36
BODY_LINE_HEIGHT = 50
SECONDARY_FONT_SIZE = 28

DEFAULT_TEXT_STYLE = TextStyle()
TIME_STYLE = TextStyle(font_size=18, bold=False, align=TextAlign.CENTER)
BADGE_STYLE = TextStyle(font_size=16, bold=True, align=TextAlign.CENTER)

ALIGN_FACTOR = {
    TextAlign.LEFT: 0.0,
    TextAlign.CENTER: 0.5,
    TextAlign.RIGHT: 1.0,
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class FrameRenderer:
    """
    Pinta quadros da timeline numa FrameSurface.

    Features:
    - Transição entre fundos no início de cada segmento
    - Parallax vertical suave fora das transições
    - Gradiente determinístico quando o fundo não carregou
    - Overlay de legibilidade e tint de sentimento pulsante
    - Elementos de texto animados, barras de progresso, imagens e overlays
    - Indicador de tempo e selo AI SUMMARY
    """

    def __init__(
        self,
        theme: ThemeConfig,
        backgrounds: Dict[str, Optional[Image.Image]],
        total_duration: float,
        sentiment: Sentiment = Sentiment.NEUTRAL,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Args:
            theme: Cores e fontes
            backgrounds: Imagens pré-carregadas por referência (None = falhou)
            total_duration: Duração total do vídeo em segundos
            sentiment: Sentimento do resumo (define o tint)
            rng: Fonte aleatória para glitch e partículas
            clock: Relógio em ms para o cursor do typewriter
        """
        self.theme = theme
        self.backgrounds = backgrounds
        self.total_duration = total_duration
        self.sentiment = sentiment
        self.rng = rng or random.Random(0)
        self.clock = clock or (lambda: time.monotonic() * 1000)
        self._gradients: Dict[tuple, Image.Image] = {}

    # ============== BACKGROUND ==============

    def resolve_background(self, segment: Optional[Segment], size: tuple) -> Image.Image:
        """Imagem de fundo do segmento ou o gradiente de fallback."""
        image = self.backgrounds.get(segment.background) if segment and segment.background else None
        if image is not None:
            return image
        logger.debug(f"No background for {segment.kind if segment else 'frame'}, using gradient")
        return self._gradient(size)

    def _gradient(self, size: tuple) -> Image.Image:
        if size not in self._gradients:
            self._gradients[size] = gradient_image(
                size, self.theme.gradient_start, self.theme.gradient_end
            )
        return self._gradients[size]

    def _has_background(self, segment: Segment) -> bool:
        return bool(segment.background) and self.backgrounds.get(segment.background) is not None

    def _render_background(
        self,
        surface: FrameSurface,
        segment: Segment,
        previous: Optional[Segment],
        local_time: float,
        segment_progress: float
    ):
        transition = segment.transitions[0] if segment.transitions else None
        current = self.resolve_background(segment, surface.size)

        if transition is not None and previous is not None and local_time < transition.duration:
            progress = transition_renderer.transition_progress(transition, local_time)
            layout = transition_renderer.layers(
                transition, progress, surface.width, surface.height, self.rng
            )
            transition_renderer.apply(
                surface, layout, self.resolve_background(previous, surface.size), current
            )
        elif self._has_background(segment):
            offset = math.sin(segment_progress * math.pi * 2) * PARALLAX_INTENSITY * surface.height
            surface.draw_image(current, y=offset)
        else:
            surface.draw_image(current)

    # ============== OVERLAYS ==============

    def _tint_color(self) -> str:
        if self.sentiment == Sentiment.POSITIVE:
            return self.theme.positive_color
        if self.sentiment == Sentiment.NEGATIVE:
            return self.theme.negative_color
        return self.theme.primary_color

    def _render_overlays(self, surface: FrameSurface, segment_progress: float):
        surface.fill("#000000", READABILITY_ALPHA)
        alpha = TINT_BASE_ALPHA + math.sin(segment_progress * math.pi * 2) * TINT_PULSE_ALPHA
        surface.fill(self._tint_color(), alpha)

    # ============== ELEMENTS ==============

    def _draw_animated_line(
        self,
        surface: FrameSurface,
        element: TextElement,
        text: str,
        anchor_x: float,
        baseline_y: float,
        style: TextStyle,
        progress: float,
        fill: Optional[str] = None
    ):
        measure = lambda value: surface.measure_text(value, style.font_size, style.bold)
        frame: TextFrame = animate_text(
            element.animation, text, progress, measure, self.rng, self.clock()
        )
        factor = ALIGN_FACTOR[style.align]
        line_width = measure(text)

        for glyph in frame.glyphs:
            left = anchor_x - factor * line_width * glyph.scale
            surface.draw_text(
                glyph.text,
                left + glyph.dx * glyph.scale,
                baseline_y + glyph.dy,
                style,
                alpha=glyph.alpha,
                scale=glyph.scale,
                fill=glyph.fill or fill,
                align=TextAlign.LEFT,
            )
        if frame.caret is not None:
            dx, dy, width, height = frame.caret
            surface.fill_rect(
                anchor_x - factor * line_width + dx, baseline_y + dy, width, height, fill or style.fill
            )

    def _render_text(self, surface: FrameSurface, element: TextElement, progress: float):
        x, y, w, _ = element.position.to_pixels(surface.width, surface.height)
        style = element.style or DEFAULT_TEXT_STYLE
        anchor_x = x + ALIGN_FACTOR[style.align] * w
        content = element.content

        self._draw_animated_line(surface, element, content.title, anchor_x, y + 50, style, progress)

        secondary = style.model_copy(update={"font_size": BODY_FONT_SIZE, "bold": False})
        cursor = y + 100
        if content.subtitle:
            self._draw_animated_line(surface, element, content.subtitle, anchor_x, cursor, secondary, progress)
            cursor += BODY_LINE_HEIGHT
        if content.body:
            for line in surface.wrap_text(content.body, w, BODY_FONT_SIZE):
                self._draw_animated_line(surface, element, line, anchor_x, cursor, secondary, progress)
                cursor += BODY_LINE_HEIGHT

        small = style.model_copy(update={"font_size": SECONDARY_FONT_SIZE})
        if content.topic:
            self._draw_animated_line(
                surface, element, f"#{content.topic}", anchor_x, cursor, small, progress,
                fill=self.theme.secondary_color
            )
            cursor += BODY_LINE_HEIGHT
        if content.badge:
            self._draw_animated_line(
                surface, element, content.badge, anchor_x, cursor, small, progress,
                fill=self.theme.primary_color
            )
            cursor += BODY_LINE_HEIGHT
        if content.cta:
            self._draw_animated_line(surface, element, content.cta, anchor_x, cursor, secondary, progress)

    def _render_progress(self, surface: FrameSurface, element: ProgressElement, progress: float):
        x, y, w, h = element.position.to_pixels(surface.width, surface.height)
        surface.fill_rect(x, y, w, h, "#ffffff", 0.3 * progress)
        surface.fill_rect(x, y, w * element.content.percentage / 100, h, self.theme.primary_color, progress)

    def _render_image(self, surface: FrameSurface, element: ImageElement, progress: float):
        image = self.backgrounds.get(element.source)
        if image is None:
            return
        x, y, w, h = element.position.to_pixels(surface.width, surface.height)
        surface.draw_image_rect(image, x, y, w, h, element.opacity * progress)

    def _render_element(self, surface: FrameSurface, element, local_time: float):
        progress = animation_progress(element.animation, local_time)
        if progress <= 0:
            return

        match element:
            case TextElement():
                self._render_text(surface, element, progress)
            case ProgressElement():
                self._render_progress(surface, element, progress)
            case ImageElement():
                self._render_image(surface, element, progress)
            case OverlayElement(color=color, alpha=alpha):
                x, y, w, h = element.position.to_pixels(surface.width, surface.height)
                surface.fill_rect(x, y, w, h, color, alpha * progress)
            case _:
                raise TypeError(f"Unsupported visual element: {element!r}")

    # ============== CHROME ==============

    def _render_chrome(self, surface: FrameSurface, global_progress: float):
        width, height = surface.size
        elapsed = math.floor(clamp(global_progress) * self.total_duration)
        time_text = f"{elapsed}s / {_round_half_up(self.total_duration)}s"

        surface.fill_rect(20, height - 60, 120, 40, "#000000", 0.7)
        surface.draw_text(time_text, 80, height - 35, TIME_STYLE)

        surface.fill_rect(width - 200, 20, 180, 40, self.theme.primary_color, 0.8)
        surface.draw_text("AI SUMMARY", width - 110, 45, BADGE_STYLE)

    # ============== FRAME ==============

    def render_frame(
        self,
        surface: FrameSurface,
        segment: Segment,
        previous: Optional[Segment],
        local_time: float,
        global_progress: float
    ):
        """
        Pinta um quadro completo na superfície.

        Args:
            surface: Superfície de desenho (mutada)
            segment: Segmento que contém o instante atual
            previous: Segmento anterior na timeline (None na intro)
            local_time: Segundos desde o início do segmento
            global_progress: Progresso no vídeo inteiro (0-1)
        """
        segment_progress = clamp(local_time / segment.duration)

        surface.clear()
        self._render_background(surface, segment, previous, local_time, segment_progress)
        self._render_overlays(surface, segment_progress)
        for element in segment.elements:
            self._render_element(surface, element, local_time)
        self._render_chrome(surface, global_progress)
