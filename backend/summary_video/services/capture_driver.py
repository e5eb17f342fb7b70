"""
Loop de captura: renderiza cada quadro da timeline e envia ao gravador.

O loop é síncrono por quadro e devolve o controle ao event loop uma vez
por tick através do hook ``yield_to_host`` (por padrão asyncio.sleep(0)).
"""

import asyncio
import logging
import random
import uuid
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional

from PIL import Image

from ..models.config import FullConfig
from ..models.errors import GenerationCancelled
from ..models.timeline import ImageElement, Segment
from ..models.video import AudioResource, GeneratedArtifact, SummaryResult, VideoDescriptor
from .asset_loader import AssetLoader, release_images
from .frame_recorder import FFmpegRecorder, FrameSink
from .frame_renderer import FrameRenderer
from .frame_surface import FrameSurface

logger = logging.getLogger(__name__)


class CancellationToken:
    """Sinal de cancelamento cooperativo verificado a cada quadro."""

    def __init__(self):
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def _default_yield() -> Awaitable[None]:
    return asyncio.sleep(0)


def segment_at(segments: List[Segment], t: float) -> int:
    """Índice do segmento que contém t (busca linear); após o fim, o último."""
    for index, segment in enumerate(segments):
        if segment.contains(t):
            return index
    return len(segments) - 1


def background_sources(segments: List[Segment]) -> List[str]:
    """Referências de imagem usadas pela timeline, sem repetição."""
    sources = []
    for segment in segments:
        if segment.background:
            sources.append(segment.background)
        sources.extend(e.source for e in segment.elements if isinstance(e, ImageElement))
    return list(dict.fromkeys(sources))


class CaptureDriver:
    """
    Dirige a renderização quadro a quadro.

    Features:
    - frame = 0, 1, ... enquanto frame / fps < duração total
    - Segmento anterior = o anterior na lista (para as transições)
    - Cancelamento verificado a cada quadro
    - Gravador sempre liberado em falha ou cancelamento
    - Mux final em thread, fora do event loop
    - Gravador e hook de yield injetáveis
    """

    def __init__(
        self,
        config: FullConfig,
        asset_loader: Optional[AssetLoader] = None,
        output_dir: str = "output",
        recorder_factory: Optional[Callable[[Path], FrameSink]] = None,
        yield_to_host: Optional[Callable[[], Awaitable[None]]] = None,
        seed: Optional[int] = None
    ):
        self.config = config
        self.asset_loader = asset_loader or AssetLoader(config.assets)
        self.output_dir = Path(output_dir)
        self.recorder_factory = recorder_factory or (
            lambda path: FFmpegRecorder(config.render, path)
        )
        self.yield_to_host = yield_to_host or _default_yield
        self.seed = seed

    async def capture(
        self,
        video: VideoDescriptor,
        summary: SummaryResult,
        segments: List[Segment],
        audio: AudioResource,
        cancel: Optional[CancellationToken] = None,
        backgrounds: Optional[Dict[str, Optional[Image.Image]]] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
        job_id: Optional[str] = None
    ) -> GeneratedArtifact:
        """
        Renderiza e grava todos os quadros.

        Args:
            video: Metadados do vídeo original
            summary: Resumo (usa o sentimento)
            segments: Timeline planejada
            audio: Narração; define a duração total
            cancel: Token de cancelamento
            backgrounds: Imagens já carregadas (senão carrega aqui)
            progress_callback: Callback (quadro, total de quadros)
            job_id: Usado no nome do arquivo

        Returns:
            GeneratedArtifact com os handles do MP4

        Raises:
            EncodingError: falha do gravador (recursos já liberados)
            GenerationCancelled: cancelamento (recursos já liberados)
        """
        render = self.config.render
        fps = render.fps
        total = audio.duration_seconds
        total_frames = self._frame_count(total, fps)

        # Imagens carregadas aqui são fechadas aqui
        owns_backgrounds = backgrounds is None
        if owns_backgrounds:
            backgrounds = await self.asset_loader.load_all(background_sources(segments))

        frame = 0
        renderer = FrameRenderer(
            theme=render.theme,
            backgrounds=backgrounds,
            total_duration=total,
            sentiment=summary.sentiment,
            rng=random.Random(self.seed if self.seed is not None else video.id),
            clock=lambda: frame / fps * 1000,
        )
        surface = FrameSurface(
            render.resolution.width,
            render.resolution.height,
            render.theme.font_path,
            render.theme.bold_font_path,
        )

        name = f"summary_{video.id}_{job_id or uuid.uuid4().hex[:8]}.mp4"
        recorder = self.recorder_factory(self.output_dir / name)
        logger.info(f"Capturing {total_frames} frames ({total:.2f}s @ {fps}fps) for {video.id}")

        try:
            recorder.start()
            while frame / fps < total:
                t = frame / fps
                index = segment_at(segments, t)
                segment = segments[index]
                previous = segments[index - 1] if index > 0 else None

                renderer.render_frame(surface, segment, previous, t - segment.start, t / total)
                recorder.write_frame(surface.to_rgb_bytes())
                frame += 1

                if progress_callback:
                    progress_callback(frame, total_frames)
                if cancel is not None and cancel.cancelled:
                    raise GenerationCancelled(f"Capture cancelled at frame {frame}/{total_frames}")
                await self.yield_to_host()

            output_path = await asyncio.to_thread(recorder.finalize, audio.path)
        except BaseException:
            recorder.abort()
            raise
        finally:
            if owns_backgrounds:
                release_images(backgrounds)

        logger.info(f"Capture finished: {frame} frames -> {output_path}")
        return GeneratedArtifact(
            artifact_handle=Path(output_path).resolve().as_uri(),
            download_handle=f"/outputs/{Path(output_path).name}",
            thumbnail_handle=video.thumbnail,
            duration=total,
            segments=segments,
            audio_handle=audio.url or (Path(audio.path).resolve().as_uri() if audio.path else None),
            source_frames=list(backgrounds.keys()),
        )

    @staticmethod
    def _frame_count(total: float, fps: int) -> int:
        # Mesma condição do loop de captura
        count = 0
        while count / fps < total:
            count += 1
        return count
