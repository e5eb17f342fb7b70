"""
Modelos de vídeo: entradas dos colaboradores externos e o artefato gerado.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from enum import Enum

from .timeline import Segment


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class VideoDescriptor(BaseModel):
    """Metadados do vídeo original (somente leitura)."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    channel_title: str
    duration: float = Field(ge=0)  # segundos
    thumbnail: str
    published_at: str = ""
    view_count: int = 0
    tags: List[str] = []
    description: Optional[str] = None


class SummaryResult(BaseModel):
    """Resumo estruturado produzido pelo LLM (somente leitura)."""
    model_config = ConfigDict(frozen=True)

    summary: str
    key_points: List[str] = []
    main_topics: List[str] = []
    sentiment: Sentiment = Sentiment.NEUTRAL
    difficulty: Difficulty = Difficulty.INTERMEDIATE


class AudioResource(BaseModel):
    """Faixa de narração com duração conhecida."""
    path: Optional[str] = None
    url: Optional[str] = None
    duration_seconds: float = Field(gt=0)
    is_placeholder: bool = False


class GeneratedArtifact(BaseModel):
    """Resultado de uma geração de vídeo-resumo."""
    artifact_handle: str
    download_handle: str
    thumbnail_handle: str
    duration: float
    segments: List[Segment]
    audio_handle: Optional[str] = None
    source_frames: List[str] = []
    is_placeholder: bool = False
