"""
Router para gerenciamento de jobs.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from pydantic import BaseModel

from ..models.job import JobStatusEnum
from .video import OUTPUT_DIR, _jobs_db, cancel_job_token, get_job

router = APIRouter(prefix="/api/jobs", tags=["jobs"])

FINISHED = {
    JobStatusEnum.COMPLETED.value,
    JobStatusEnum.FAILED.value,
    JobStatusEnum.CANCELLED.value,
}


class JobStatusResponse(BaseModel):
    job_id: str
    status: str
    progress: float
    current_step: str
    details: Dict[str, Any] = {}
    created_at: str
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    error: Optional[str] = None


class JobResultResponse(BaseModel):
    job_id: str
    status: str
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration_seconds: Optional[float] = None
    segments_count: Optional[int] = None
    is_placeholder: bool = False
    processing_time_seconds: Optional[float] = None


class JobListItem(BaseModel):
    job_id: str
    video_id: str
    status: str
    progress: float
    current_step: str
    created_at: str
    completed_at: Optional[str] = None


class JobListResponse(BaseModel):
    jobs: List[JobListItem]
    total: int


def _require_job(job_id: str) -> Dict:
    job = get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job não encontrado")
    return job


@router.get("", response_model=JobListResponse)
async def list_jobs(
    status: Optional[str] = None,
    limit: int = 20
):
    """
    Lista os jobs recentes (mais novos primeiro).
    """
    jobs = list(_jobs_db.values())
    if status:
        jobs = [j for j in jobs if j.get("status") == status]
    jobs.sort(key=lambda j: j.get("created_at", ""), reverse=True)

    return JobListResponse(
        jobs=[
            JobListItem(
                job_id=j["id"],
                video_id=j.get("video_id", ""),
                status=j.get("status", "unknown"),
                progress=j.get("progress", 0),
                current_step=j.get("current_step", ""),
                created_at=j.get("created_at", ""),
                completed_at=j.get("completed_at")
            )
            for j in jobs[:limit]
        ],
        total=len(_jobs_db)
    )


@router.get("/{job_id}", response_model=JobStatusResponse)
@router.get("/{job_id}/status", response_model=JobStatusResponse)
async def get_job_status(job_id: str):
    """
    Retorna o status atual do job.
    """
    job = _require_job(job_id)
    return JobStatusResponse(
        job_id=job["id"],
        status=job.get("status", "unknown"),
        progress=job.get("progress", 0),
        current_step=job.get("current_step", ""),
        details=job.get("details", {}),
        created_at=job.get("created_at", ""),
        started_at=job.get("started_at"),
        completed_at=job.get("completed_at"),
        error=job.get("error")
    )


@router.get("/{job_id}/result", response_model=JobResultResponse)
async def get_job_result(job_id: str):
    """
    Retorna o resultado do job (se completo).
    """
    job = _require_job(job_id)
    status = job.get("status")
    if status != JobStatusEnum.COMPLETED.value or not job.get("result"):
        return JobResultResponse(job_id=job_id, status=status)

    result = job["result"]
    processing_time = None
    if job.get("started_at") and job.get("completed_at"):
        started = datetime.fromisoformat(job["started_at"])
        completed = datetime.fromisoformat(job["completed_at"])
        processing_time = (completed - started).total_seconds()

    return JobResultResponse(
        job_id=job_id,
        status=status,
        video_url=result.get("download_handle"),
        thumbnail_url=result.get("thumbnail_handle"),
        duration_seconds=result.get("duration"),
        segments_count=len(result.get("segments", [])),
        is_placeholder=result.get("is_placeholder", False),
        processing_time_seconds=processing_time
    )


@router.get("/{job_id}/download")
async def download_video(job_id: str):
    """
    Download do vídeo gerado.
    """
    job = _require_job(job_id)
    if job.get("status") != JobStatusEnum.COMPLETED.value:
        raise HTTPException(status_code=400, detail="Job ainda não concluído")

    result = job.get("result") or {}
    if result.get("is_placeholder"):
        raise HTTPException(status_code=404, detail="Vídeo placeholder, use video_url")

    path = Path(OUTPUT_DIR) / Path(result.get("download_handle", "")).name
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Arquivo não encontrado")

    return FileResponse(path, media_type="video/mp4", filename=path.name)


@router.post("/{job_id}/cancel")
async def cancel_job(job_id: str):
    """
    Cancela um job em execução.
    """
    job = _require_job(job_id)
    if job.get("status") in FINISHED:
        raise HTTPException(status_code=400, detail="Job já finalizado")

    cancel_job_token(job_id)
    _jobs_db[job_id]["status"] = JobStatusEnum.CANCELLED.value
    _jobs_db[job_id]["completed_at"] = datetime.now().isoformat()

    return {"status": "cancelled", "job_id": job_id}


@router.delete("/{job_id}")
async def delete_job(job_id: str):
    """
    Remove um job e seus arquivos.
    """
    job = _require_job(job_id)
    result = job.get("result") or {}
    if not result.get("is_placeholder"):
        for handle in (result.get("download_handle"), result.get("thumbnail_handle")):
            if handle and handle.startswith("/outputs/"):
                (Path(OUTPUT_DIR) / Path(handle).name).unlink(missing_ok=True)

    del _jobs_db[job_id]
    return {"status": "deleted", "job_id": job_id}
