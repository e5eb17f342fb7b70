"""
Geração da thumbnail do vídeo-resumo.
"""

import logging
import math
import uuid
from pathlib import Path
from typing import Optional

from PIL import Image

from ..models.config import ThemeConfig
from ..models.timeline import TextAlign, TextStyle
from ..models.video import VideoDescriptor
from .frame_surface import FrameSurface

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = (1280, 720)
JPEG_QUALITY = 95

BADGE_STYLE = TextStyle(font_size=36, bold=True)
DURATION_STYLE = TextStyle(font_size=24, bold=True, align=TextAlign.CENTER)
TITLE_STYLE = TextStyle(font_size=64, bold=True, align=TextAlign.CENTER)


class ThumbnailGenerator:
    """
    Gera a thumbnail 1280x720 (JPEG).

    Com a thumbnail original: imagem + overlay escuro + selo "AI SUMMARY"
    + selo de duração. Sem imagem: gradiente do tema com o título.
    """

    def __init__(self, theme: Optional[ThemeConfig] = None, output_dir: str = "output"):
        self.theme = theme or ThemeConfig()
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def render(
        self,
        video: VideoDescriptor,
        duration: float,
        source_image: Optional[Image.Image]
    ) -> Image.Image:
        width, height = THUMBNAIL_SIZE
        surface = FrameSurface(width, height, self.theme.font_path, self.theme.bold_font_path)

        if source_image is None:
            surface.linear_gradient(self.theme.gradient_start, self.theme.gradient_end)
            y = 200
            for line in surface.wrap_text(video.title, width - 100, TITLE_STYLE.font_size, bold=True):
                surface.draw_text(line, width / 2, y, TITLE_STYLE)
                y += 80
            return surface.to_image()

        surface.draw_image(source_image)
        surface.fill("#000000", 0.5)

        surface.fill_rect(50, 50, 300, 80, self.theme.primary_color)
        surface.draw_text("AI SUMMARY", 70, 105, BADGE_STYLE)

        surface.fill_rect(50, height - 120, 200, 60, self.theme.positive_color, radius=8)
        surface.draw_text(f"{int(math.floor(duration + 0.5))}s", 150, height - 85, DURATION_STYLE)
        return surface.to_image()

    def generate(
        self,
        video: VideoDescriptor,
        duration: float,
        source_image: Optional[Image.Image],
        job_id: Optional[str] = None
    ) -> Path:
        """
        Renderiza e salva a thumbnail.

        Args:
            video: Metadados do vídeo original
            duration: Duração do resumo em segundos
            source_image: Thumbnail original carregada (None = fallback)
            job_id: Usado no nome do arquivo

        Returns:
            Caminho do JPEG
        """
        image = self.render(video, duration, source_image)
        path = self.output_dir / f"thumbnail_{video.id}_{job_id or uuid.uuid4().hex[:8]}.jpg"
        image.save(path, "JPEG", quality=JPEG_QUALITY)
        logger.info(
            f"Thumbnail saved: {path.name}"
            f"{' (fallback)' if source_image is None else ''}"
        )
        return path
