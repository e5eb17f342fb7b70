"""
Modelos de configuração do sistema.
"""

from pydantic import BaseModel, Field
from typing import Optional, List


# ============== API CONFIGS ==============


class ApiConfigItem(BaseModel):
    api_key: str = ""
    enabled: bool = True


class ElevenLabsConfig(ApiConfigItem):
    voice_id: str = "21m00Tcm4TlvDq8ikWAM"
    model_id: str = "eleven_monolingual_v1"
    stability: float = Field(default=0.75, ge=0, le=1)
    similarity_boost: float = Field(default=0.85, ge=0, le=1)
    style: float = Field(default=0.7, ge=0, le=1)


class ApiConfig(BaseModel):
    elevenlabs: ElevenLabsConfig = ElevenLabsConfig()


# ============== RENDER CONFIGS ==============


class Resolution(BaseModel):
    width: int = Field(default=1920, ge=16)
    height: int = Field(default=1080, ge=16)


class ThemeConfig(BaseModel):
    primary_color: str = "#3B82F6"
    secondary_color: str = "#8B5CF6"
    gradient_start: str = "#1e40af"
    gradient_end: str = "#7c3aed"
    positive_color: str = "#22c55e"
    negative_color: str = "#ef4444"
    font_path: Optional[str] = None  # TrueType; sem fonte usa a default do Pillow
    bold_font_path: Optional[str] = None


class RenderConfig(BaseModel):
    resolution: Resolution = Resolution()
    fps: int = Field(default=30, ge=1, le=120)
    crf: int = Field(default=23, ge=18, le=28)
    preset: str = "medium"
    audio_codec: str = "aac"
    audio_bitrate: int = 192
    theme: ThemeConfig = ThemeConfig()
    ffmpeg_binary: str = "ffmpeg"
    encode_timeout: int = 600


# ============== NARRATION ==============


class NarrationConfig(BaseModel):
    """Heurística de duração da narração: palavras / wpm * 60, limitada a [min, max]."""
    words_per_minute: float = Field(default=150, gt=0)
    min_duration: float = Field(default=30, gt=0)
    max_duration: float = Field(default=120, gt=0)


# ============== ASSETS ==============


class AssetConfig(BaseModel):
    timeout_seconds: float = Field(default=5.0, gt=0, le=60)
    max_attempts: int = Field(default=2, ge=1, le=5)
    use_thumbnail_variants: bool = True


class PlaceholderConfig(BaseModel):
    """Vídeos genéricos usados quando a gravação falha."""
    videos: List[str] = [
        "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/BigBuckBunny.mp4",
        "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/ElephantsDream.mp4",
        "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/ForBiggerBlazes.mp4",
        "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/ForBiggerEscapes.mp4",
    ]


# ============== FULL CONFIG ==============


class FullConfig(BaseModel):
    api: ApiConfig = ApiConfig()
    render: RenderConfig = RenderConfig()
    narration: NarrationConfig = NarrationConfig()
    assets: AssetConfig = AssetConfig()
    placeholder: PlaceholderConfig = PlaceholderConfig()
