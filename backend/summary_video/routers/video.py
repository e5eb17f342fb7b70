"""
Router para planejamento e geração de vídeos-resumo.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException
from pydantic import BaseModel

from ..models.errors import GenerationCancelled, InvalidDurationError
from ..models.job import JobStatus, JobStatusEnum
from ..models.timeline import Segment
from ..models.video import SummaryResult, VideoDescriptor
from ..services.capture_driver import CancellationToken
from ..services.narration_generator import build_narration_script, estimate_duration
from ..services.segment_planner import SegmentPlanner
from .config import get_config, merge_overrides

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/video", tags=["video"])

OUTPUT_DIR = "storage/outputs"


class PlanRequest(BaseModel):
    video: VideoDescriptor
    summary: SummaryResult
    total_duration: Optional[float] = None


class PlanResponse(BaseModel):
    total_duration: float
    narration_script: str
    source_frames: List[str]
    segments: List[Segment]


@router.post("/plan", response_model=PlanResponse)
async def plan_video(request: PlanRequest):
    """
    Retorna o plano de segmentos sem renderizar.

    Sem total_duration, usa a duração estimada do roteiro de narração.
    """
    config = get_config()
    script = build_narration_script(request.video, request.summary)
    total_duration = request.total_duration
    if total_duration is None:
        total_duration = estimate_duration(script, config.narration)

    planner = SegmentPlanner(config.assets.use_thumbnail_variants)
    try:
        segments = planner.plan(request.video, request.summary, total_duration)
    except InvalidDurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PlanResponse(
        total_duration=total_duration,
        narration_script=script,
        source_frames=planner.source_frames(request.video),
        segments=segments,
    )


class GenerateVideoRequest(BaseModel):
    video: VideoDescriptor
    summary: SummaryResult
    config_override: Optional[Dict[str, Any]] = None


class GenerateVideoResponse(BaseModel):
    job_id: str
    status: str
    message: str
    estimated_duration_seconds: Optional[float] = None


# In-memory job storage (in production, use Redis or database)
_jobs_db: Dict[str, Dict] = {}
_cancel_tokens: Dict[str, CancellationToken] = {}


@router.post("/generate", response_model=GenerateVideoResponse)
async def generate_video(
    request: GenerateVideoRequest,
    background_tasks: BackgroundTasks
):
    """
    Inicia a geração do vídeo-resumo.
    Retorna imediatamente com um job_id para acompanhamento.
    """
    job_id = str(uuid.uuid4())
    config = merge_overrides(get_config(), request.config_override)
    estimated_duration = estimate_duration(
        build_narration_script(request.video, request.summary), config.narration
    )

    _jobs_db[job_id] = {
        "id": job_id,
        "video_id": request.video.id,
        "title": request.video.title,
        "status": JobStatusEnum.PENDING.value,
        "progress": 0,
        "current_step": "Aguardando",
        "details": {},
        "created_at": datetime.now().isoformat(),
        "started_at": None,
        "completed_at": None,
        "error": None,
        "result": None
    }
    _cancel_tokens[job_id] = CancellationToken()

    background_tasks.add_task(
        _run_video_generation,
        job_id,
        request.video,
        request.summary,
        request.config_override
    )

    return GenerateVideoResponse(
        job_id=job_id,
        status="pending",
        message="Geração de vídeo iniciada",
        estimated_duration_seconds=estimated_duration
    )


async def _run_video_generation(
    job_id: str,
    video: VideoDescriptor,
    summary: SummaryResult,
    config_override: Optional[Dict[str, Any]] = None
):
    """
    Background task para executar a geração do vídeo.
    """
    from ..services.job_orchestrator import SummaryVideoOrchestrator

    def status_callback(status: JobStatus):
        """Atualiza o status do job em memória."""
        if job_id in _jobs_db:
            _jobs_db[job_id].update({
                "status": status.status.value,
                "progress": status.progress,
                "current_step": status.current_step,
                "updated_at": status.updated_at.isoformat(),
                "error": status.error,
                "details": status.details
            })

    try:
        config = merge_overrides(get_config(), config_override)
        _jobs_db[job_id]["started_at"] = datetime.now().isoformat()

        orchestrator = SummaryVideoOrchestrator(
            config=config,
            output_dir=OUTPUT_DIR,
            status_callback=status_callback
        )
        artifact = await orchestrator.run(job_id, video, summary, cancel=_cancel_tokens.get(job_id))

        _jobs_db[job_id].update({
            "status": JobStatusEnum.COMPLETED.value,
            "progress": 1.0,
            "completed_at": datetime.now().isoformat(),
            "result": artifact.model_dump(mode="json")
        })

    except GenerationCancelled:
        _jobs_db[job_id].update({
            "status": JobStatusEnum.CANCELLED.value,
            "completed_at": datetime.now().isoformat()
        })

    except Exception as e:
        logger.error(f"Job {job_id} failed: {e}")
        _jobs_db[job_id].update({
            "status": JobStatusEnum.FAILED.value,
            "error": str(e),
            "completed_at": datetime.now().isoformat()
        })

    finally:
        _cancel_tokens.pop(job_id, None)


def get_job(job_id: str) -> Optional[Dict]:
    """Busca o job em memória."""
    return _jobs_db.get(job_id)


def cancel_job_token(job_id: str) -> bool:
    """Sinaliza o cancelamento do job em execução."""
    token = _cancel_tokens.get(job_id)
    if token is None:
        return False
    token.cancel()
    return True
