"""
Serviço de planejamento da timeline do vídeo-resumo.

Divide a duração da narração em intro, um segmento por ponto-chave e
conclusão, escolhendo transições e elementos visuais de forma
determinística (mesma entrada, mesmo plano).
"""

import logging
import math
from typing import List

from ..models.errors import InvalidDurationError
from ..models.timeline import (
    Direction,
    Easing,
    Glitch,
    ProgressContent,
    ProgressElement,
    Rect,
    ScaleIn,
    Segment,
    SegmentKind,
    SlideIn,
    TextAlign,
    TextContent,
    TextElement,
    TextStyle,
    TransitionDirective,
    TransitionType,
    Typewriter,
    Wave,
)
from ..models.video import SummaryResult, VideoDescriptor

logger = logging.getLogger(__name__)

MAX_BOOKEND_SECONDS = 8.0
BOOKEND_SHARE = 0.15

KEYPOINT_DIRECTIONS = [Direction.LEFT, Direction.RIGHT, Direction.UP, Direction.DOWN]

# Miniaturas alternativas que o YouTube publica para todo vídeo
THUMBNAIL_VARIANTS = [
    "maxresdefault.jpg",
    "hqdefault.jpg",
    "mqdefault.jpg",
    "sddefault.jpg",
    "0.jpg",
    "1.jpg",
    "2.jpg",
    "3.jpg",
]

INTRO_STYLE = TextStyle(font_size=64, fill="#ffffff", stroke="#000000", stroke_width=2)
KEYPOINT_STYLE = TextStyle(font_size=48, fill="#ffffff", stroke="#000000", stroke_width=3)
CONCLUSION_STYLE = TextStyle(
    font_size=72, fill="#22c55e", stroke="#000000", stroke_width=3, align=TextAlign.CENTER
)


def bookend_duration(total_duration: float) -> float:
    """Duração da intro (e da conclusão): 15% do total, no máximo 8s."""
    return min(MAX_BOOKEND_SECONDS, BOOKEND_SHARE * total_duration)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class SegmentPlanner:
    """
    Planeja os segmentos da timeline.

    Features:
    - Intro e conclusão com 15% da duração (máx. 8s cada)
    - Tempo restante dividido igualmente entre os pontos-chave
    - Transições alternando slide/zoom com direção cíclica
    - Animações de texto variadas por índice
    - Segmentos contíguos cobrindo exatamente [0, total]
    """

    def __init__(self, use_thumbnail_variants: bool = True):
        self.use_thumbnail_variants = use_thumbnail_variants

    def source_frames(self, video: VideoDescriptor) -> List[str]:
        """Lista de imagens candidatas a fundo: a thumbnail e suas variantes."""
        frames = [video.thumbnail]
        if self.use_thumbnail_variants and video.id:
            frames.extend(
                f"https://img.youtube.com/vi/{video.id}/{variant}"
                for variant in THUMBNAIL_VARIANTS
            )
        return frames

    def plan(
        self,
        video: VideoDescriptor,
        summary: SummaryResult,
        total_duration: float
    ) -> List[Segment]:
        """
        Gera a lista ordenada de segmentos.

        Args:
            video: Metadados do vídeo original
            summary: Resumo estruturado
            total_duration: Duração total da narração em segundos

        Returns:
            Lista de Segment (intro, pontos-chave, conclusão)

        Raises:
            InvalidDurationError: se total_duration não for finito e positivo,
                ou for pequeno demais para segmentos não vazios
        """
        if total_duration is None or not math.isfinite(total_duration) or not total_duration > 0:
            raise InvalidDurationError(total_duration)

        frames = self.source_frames(video)
        key_points = list(summary.key_points)
        count = len(key_points)

        intro_duration = bookend_duration(total_duration)
        conclusion_duration = bookend_duration(total_duration)

        # Sem pontos-chave a conclusão absorve o tempo restante
        if count == 0:
            conclusion_start = intro_duration
        else:
            conclusion_start = total_duration - conclusion_duration
        key_point_duration = (conclusion_start - intro_duration) / count if count else 0.0

        boundaries = [0.0, intro_duration]
        boundaries.extend(intro_duration + i * key_point_duration for i in range(1, count))
        boundaries.extend([conclusion_start, total_duration] if count else [total_duration])
        # Totais subnormais colapsam os limites em segmentos vazios
        if any(not end > start for start, end in zip(boundaries, boundaries[1:])):
            raise InvalidDurationError(total_duration)

        logger.info(
            f"Planning timeline: intro {intro_duration:.2f}s + "
            f"{count} x {key_point_duration:.2f}s + conclusion "
            f"{total_duration - conclusion_start:.2f}s = {total_duration:.2f}s"
        )

        segments = [self._intro_segment(video, frames, intro_duration, total_duration)]

        for index, point in enumerate(key_points):
            start = intro_duration + index * key_point_duration
            # O último ponto termina exatamente onde a conclusão começa
            end = conclusion_start if index == count - 1 else intro_duration + (index + 1) * key_point_duration
            segments.append(
                self._keypoint_segment(
                    index, point, summary, frames, start, end, total_duration
                )
            )

        segments.append(
            self._conclusion_segment(summary, frames, conclusion_start, total_duration)
        )
        return segments

    def _intro_segment(
        self,
        video: VideoDescriptor,
        frames: List[str],
        end: float,
        total_duration: float
    ) -> Segment:
        minutes = int(video.duration // 60)
        return Segment(
            start=0.0,
            end=end,
            kind=SegmentKind.INTRO,
            text=video.title,
            narration_text=(
                f'Welcome to this AI-powered summary of "{video.title}" '
                f"by {video.channel_title}."
            ),
            background=frames[0],
            transitions=[
                TransitionDirective(
                    type=TransitionType.CROSSFADE, duration=1.5, easing=Easing.EASE_IN_OUT
                )
            ],
            elements=[
                TextElement(
                    content=TextContent(
                        title=video.title,
                        subtitle=f"by {video.channel_title}",
                        badge=f"{minutes}min → {_round_half_up(total_duration)}s AI Summary",
                    ),
                    animation=SlideIn(duration=2.0, delay=0.5),
                    position=Rect(x=10, y=20, width=80, height=60),
                    style=INTRO_STYLE,
                )
            ],
        )

    def _keypoint_segment(
        self,
        index: int,
        point: str,
        summary: SummaryResult,
        frames: List[str],
        start: float,
        end: float,
        total_duration: float
    ) -> Segment:
        count = len(summary.key_points)
        topics = summary.main_topics
        topic = topics[index % len(topics)] if topics else None

        return Segment(
            start=start,
            end=end,
            kind=SegmentKind.KEYPOINT,
            text=point,
            narration_text=point,
            background=frames[(index + 1) % len(frames)],
            transitions=[
                TransitionDirective(
                    type=TransitionType.SLIDE if index % 2 == 0 else TransitionType.ZOOM,
                    duration=1.0,
                    direction=KEYPOINT_DIRECTIONS[index % 4],
                    easing=Easing.EASE_IN_OUT,
                )
            ],
            elements=[
                TextElement(
                    content=TextContent(
                        title=f"Key Insight {index + 1}",
                        body=point,
                        topic=topic,
                    ),
                    animation=self._keypoint_animation(index),
                    position=Rect(x=5, y=25, width=90, height=50),
                    style=KEYPOINT_STYLE,
                ),
                ProgressElement(
                    content=ProgressContent(
                        current=index + 1,
                        total=count,
                        percentage=(index + 1) / count * 100,
                        time_remaining=_round_half_up(max(0.0, total_duration - end)),
                    ),
                    animation=SlideIn(duration=0.8, delay=0.3),
                    position=Rect(x=10, y=80, width=80, height=6),
                ),
            ],
        )

    @staticmethod
    def _keypoint_animation(index: int):
        """Alterna typewriter / wave / scaleIn para evitar monotonia."""
        variant = index % 3
        if variant == 0:
            return Typewriter(duration=1.5, delay=0.5)
        if variant == 1:
            return Wave(duration=1.5, delay=0.5, stagger=0.05)
        return ScaleIn(duration=1.5, delay=0.5)

    def _conclusion_segment(
        self,
        summary: SummaryResult,
        frames: List[str],
        start: float,
        total_duration: float
    ) -> Segment:
        count = len(summary.key_points)
        return Segment(
            start=start,
            end=total_duration,
            kind=SegmentKind.CONCLUSION,
            text="Summary Complete",
            narration_text=(
                "That covers the main insights. The original video goes into much "
                "more detail, so I recommend watching the full version. "
                "Thanks for watching this AI summary!"
            ),
            background=frames[-1],
            transitions=[
                TransitionDirective(
                    type=TransitionType.PARTICLE, duration=2.0, easing=Easing.EASE_OUT
                )
            ],
            elements=[
                TextElement(
                    content=TextContent(
                        title="Summary Complete!",
                        subtitle=f"{count} key insights covered",
                        cta="Watch the full video for complete details",
                    ),
                    animation=Glitch(duration=2.0, delay=0.0),
                    position=Rect(x=10, y=25, width=80, height=50),
                    style=CONCLUSION_STYLE,
                )
            ],
        )
