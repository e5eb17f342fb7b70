"""
Modelos de jobs e status.
"""

from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum


class JobStatusEnum(str, Enum):
    PENDING = "pending"
    NARRATING = "narrating"
    PLANNING = "planning"
    LOADING_ASSETS = "loading_assets"
    RENDERING = "rendering"
    ENCODING = "encoding"
    THUMBNAIL = "thumbnail"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobStatus(BaseModel):
    """Status atual do job."""
    job_id: str
    status: JobStatusEnum
    progress: float
    current_step: str
    details: Dict[str, Any] = {}
    started_at: datetime
    updated_at: datetime
    error: Optional[str] = None
