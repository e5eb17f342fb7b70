"""
Orquestrador do pipeline de geração do vídeo-resumo.
"""

import asyncio
import logging
import zlib
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional

from ..models.config import FullConfig
from ..models.errors import EncodingError, GenerationCancelled
from ..models.job import JobStatus, JobStatusEnum
from ..models.timeline import Segment
from ..models.video import AudioResource, GeneratedArtifact, SummaryResult, VideoDescriptor
from ..utils.logger import get_job_logger
from .asset_loader import AssetLoader, release_images
from .capture_driver import CancellationToken, CaptureDriver, background_sources
from .narration_generator import (
    ElevenLabsNarrator,
    SilentTrackGenerator,
    build_narration_script,
    estimate_duration,
)
from .segment_planner import SegmentPlanner
from .thumbnail_generator import ThumbnailGenerator

logger = logging.getLogger(__name__)


class SummaryVideoOrchestrator:
    """
    Orquestra narração, planejamento, captura e thumbnail.

    Features:
    - Atualização de progresso em tempo real (status_callback)
    - Narração silenciosa quando a síntese não está disponível ou falha
    - Vídeo placeholder quando a gravação falha
    - Cancelamento cooperativo com status "cancelled"
    - Colaboradores injetáveis (testes)
    """

    def __init__(
        self,
        config: FullConfig,
        output_dir: str = "storage/outputs",
        status_callback: Optional[Callable[[JobStatus], Any]] = None,
        planner: Optional[SegmentPlanner] = None,
        capture_driver: Optional[CaptureDriver] = None,
        narrator: Optional[ElevenLabsNarrator] = None,
        silent_track: Optional[SilentTrackGenerator] = None,
        thumbnails: Optional[ThumbnailGenerator] = None,
        asset_loader: Optional[AssetLoader] = None
    ):
        self.config = config
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.status_callback = status_callback

        self.planner = planner or SegmentPlanner(config.assets.use_thumbnail_variants)
        self.asset_loader = asset_loader or AssetLoader(config.assets)
        self.capture_driver = capture_driver or CaptureDriver(
            config, self.asset_loader, output_dir=str(self.output_dir)
        )
        self.narrator = narrator or ElevenLabsNarrator(
            config.api.elevenlabs, config.narration, output_dir=str(self.output_dir)
        )
        self.silent_track = silent_track or SilentTrackGenerator(
            config.render.ffmpeg_binary, output_dir=str(self.output_dir)
        )
        self.thumbnails = thumbnails or ThumbnailGenerator(
            config.render.theme, output_dir=str(self.output_dir)
        )

    # ============== STEPS ==============

    async def narrate(
        self,
        video: VideoDescriptor,
        summary: SummaryResult,
        job_id: Optional[str] = None
    ) -> AudioResource:
        """Gera a narração; sem API ou em caso de erro, silêncio da duração estimada."""
        script = build_narration_script(video, summary)

        if self.narrator.available:
            outcome = await self.narrator.synthesize(script, job_id)
            if outcome.ok:
                return outcome.value
            logger.warning(f"Narration failed, using silent track: {outcome.error}")
        else:
            logger.info("No ElevenLabs API key, using silent narration track")

        duration = estimate_duration(script, self.config.narration)
        return await asyncio.to_thread(self.silent_track.generate, duration, job_id)

    def plan(
        self,
        video: VideoDescriptor,
        summary: SummaryResult,
        total_duration: Optional[float] = None
    ) -> List[Segment]:
        """Plano de segmentos; sem duração informada usa a estimativa do roteiro."""
        if total_duration is None:
            total_duration = estimate_duration(
                build_narration_script(video, summary), self.config.narration
            )
        return self.planner.plan(video, summary, total_duration)

    def placeholder_artifact(
        self,
        video: VideoDescriptor,
        segments: List[Segment],
        audio: AudioResource
    ) -> GeneratedArtifact:
        """
        Artefato substituto quando a gravação falha.

        O vídeo genérico é escolhido de forma estável pelo id do vídeo.
        """
        videos = self.config.placeholder.videos
        url = videos[zlib.crc32(video.id.encode("utf-8")) % len(videos)]
        return GeneratedArtifact(
            artifact_handle=url,
            download_handle=url,
            thumbnail_handle=video.thumbnail,
            duration=audio.duration_seconds,
            segments=segments,
            audio_handle=audio.url or audio.path,
            source_frames=self.planner.source_frames(video),
            is_placeholder=True,
        )

    # ============== PIPELINE ==============

    async def run(
        self,
        job_id: str,
        video: VideoDescriptor,
        summary: SummaryResult,
        cancel: Optional[CancellationToken] = None
    ) -> GeneratedArtifact:
        """
        Executa o pipeline completo.

        Args:
            job_id: ID único do job
            video: Metadados do vídeo original
            summary: Resumo estruturado
            cancel: Token de cancelamento

        Returns:
            GeneratedArtifact (placeholder se a gravação falhar)

        Raises:
            InvalidDurationError: duração da narração inválida
            GenerationCancelled: job cancelado
        """
        started_at = datetime.now()
        job_logger = get_job_logger(__name__, job_id)
        cancel = cancel or CancellationToken()
        backgrounds = {}
        # Atualizações de progresso em voo, drenadas antes de qualquer status final
        pending: List[asyncio.Task] = []

        try:
            # 1. Narração
            await self._update_status(
                job_id, JobStatusEnum.NARRATING, 0.05, "Gerando narração", started_at
            )
            audio = await self.narrate(video, summary, job_id)
            job_logger.info(
                f"Narration: {audio.duration_seconds:.2f}s"
                f"{' (silent placeholder)' if audio.is_placeholder else ''}"
            )
            self._check_cancel(cancel)

            # 2. Planejamento
            await self._update_status(
                job_id, JobStatusEnum.PLANNING, 0.10, "Planejando segmentos", started_at
            )
            segments = self.planner.plan(video, summary, audio.duration_seconds)
            job_logger.info(f"Planned {len(segments)} segments")

            # 3. Imagens de fundo
            await self._update_status(
                job_id, JobStatusEnum.LOADING_ASSETS, 0.15, "Carregando imagens", started_at
            )
            backgrounds = await self.asset_loader.load_all(
                background_sources(segments) + [video.thumbnail]
            )
            self._check_cancel(cancel)

            # 4. Captura
            await self._update_status(
                job_id, JobStatusEnum.RENDERING, 0.20, "Renderizando quadros", started_at
            )
            fps = self.config.render.fps

            def on_frame(frame: int, total: int):
                if frame % fps == 0 or frame == total:
                    pending.append(asyncio.create_task(self._update_status(
                        job_id,
                        JobStatusEnum.RENDERING,
                        0.20 + (frame / total) * 0.70,
                        f"Renderizando quadro {frame}/{total}",
                        started_at,
                        {"frames_completed": frame, "frames_total": total}
                    )))

            try:
                artifact = await self.capture_driver.capture(
                    video, summary, segments, audio,
                    cancel=cancel,
                    backgrounds=backgrounds,
                    progress_callback=on_frame,
                    job_id=job_id,
                )
            except EncodingError as e:
                job_logger.error(f"Recording failed, returning placeholder video: {e}")
                if not self.config.placeholder.videos:
                    raise
                artifact = self.placeholder_artifact(video, segments, audio)
            finally:
                if pending:
                    await asyncio.gather(*pending)

            if not artifact.is_placeholder:
                # 5. Thumbnail
                await self._update_status(
                    job_id, JobStatusEnum.THUMBNAIL, 0.92, "Gerando thumbnail", started_at
                )
                thumbnail_path = await asyncio.to_thread(
                    self.thumbnails.generate,
                    video,
                    artifact.duration,
                    backgrounds.get(video.thumbnail),
                    job_id,
                )
                artifact = artifact.model_copy(update={
                    "thumbnail_handle": f"/outputs/{thumbnail_path.name}",
                    "source_frames": self.planner.source_frames(video),
                })

            # 6. Finalizar
            await self._update_status(
                job_id, JobStatusEnum.COMPLETED, 1.0, "Concluído", started_at,
                {
                    "video_url": artifact.download_handle,
                    "thumbnail_url": artifact.thumbnail_handle,
                    "duration": artifact.duration,
                    "segments": len(artifact.segments),
                    "is_placeholder": artifact.is_placeholder,
                }
            )
            job_logger.info(f"Summary video ready: {artifact.artifact_handle}")
            return artifact

        except GenerationCancelled:
            job_logger.info("Job cancelled")
            await self._update_status(
                job_id, JobStatusEnum.CANCELLED, 0, "Cancelado", started_at
            )
            raise

        except Exception as e:
            job_logger.error(f"Erro no pipeline: {e}", exc_info=True)
            await self._update_status(
                job_id, JobStatusEnum.FAILED, 0, "Erro", started_at, error=str(e)
            )
            raise

        finally:
            release_images(backgrounds)

    @staticmethod
    def _check_cancel(cancel: CancellationToken):
        if cancel.cancelled:
            raise GenerationCancelled("Job cancelled")

    async def _update_status(
        self,
        job_id: str,
        status: JobStatusEnum,
        progress: float,
        current_step: str,
        started_at: datetime,
        details: dict = None,
        error: str = None
    ):
        """Atualiza status do job."""
        job_status = JobStatus(
            job_id=job_id,
            status=status,
            progress=progress,
            current_step=current_step,
            details=details or {},
            started_at=started_at,
            updated_at=datetime.now(),
            error=error
        )

        if self.status_callback:
            try:
                result = self.status_callback(job_status)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.warning(f"Status callback error: {e}")
