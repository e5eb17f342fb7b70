"""
Narração do vídeo-resumo: roteiro, estimativa de duração, síntese via
ElevenLabs e faixa silenciosa de fallback.
"""

import logging
import subprocess
import uuid
from pathlib import Path
from typing import Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..models.config import ElevenLabsConfig, NarrationConfig
from ..models.errors import NarrationError, Outcome
from ..models.video import AudioResource, SummaryResult, VideoDescriptor
from ..utils.easing import clamp

logger = logging.getLogger(__name__)

LEAD_INS = [
    "First, let's talk about",
    "Next, an important point is that",
    "Another key insight is",
    "Here's something crucial to understand:",
    "Additionally, you should know that",
    "Finally, the last major takeaway is",
]

RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


# ============== SCRIPT ==============


def build_narration_script(video: VideoDescriptor, summary: SummaryResult) -> str:
    """Roteiro falado: abertura, um trecho por ponto-chave e encerramento."""
    key_points = summary.key_points
    parts = [
        f'Welcome to this AI-powered summary of "{video.title}" by {video.channel_title}.',
        f"In the next few minutes, I'll walk you through the {len(key_points)} most important "
        f"insights from this {int(video.duration // 60)}-minute video about "
        f"{' and '.join(summary.main_topics[:2])}.",
    ]

    for index, point in enumerate(key_points):
        lead_in = LEAD_INS[min(index, len(LEAD_INS) - 1)]
        parts.append(f"{lead_in} {point}.")
        if index < len(key_points) - 1:
            parts.append("Let me explain this further.")

    parts.append(
        f"That covers the main insights from this {summary.difficulty.value} level content "
        f"with a {summary.sentiment.value} tone."
    )
    parts.append(
        f"The original video goes into much more detail about {', '.join(summary.main_topics)}, "
        f"so I recommend watching the full version for complete understanding."
    )
    parts.append("Thanks for watching this AI summary!")
    return " ".join(parts)


def estimate_duration(script: str, config: Optional[NarrationConfig] = None) -> float:
    """
    Duração estimada da fala em segundos.

    palavras / wpm * 60, limitada a [min_duration, max_duration].
    """
    config = config or NarrationConfig()
    words = len(script.split())
    return clamp(words / config.words_per_minute * 60, config.min_duration, config.max_duration)


def probe_duration(path: Path) -> Optional[float]:
    """Duração do áudio via ffprobe; None se não for possível medir."""
    try:
        result = subprocess.run([
            "ffprobe",
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(path)
        ], capture_output=True, text=True, check=True, timeout=30)
        duration = float(result.stdout.strip())
    except (OSError, subprocess.SubprocessError, ValueError) as e:
        logger.warning(f"Could not get audio duration with ffprobe: {e}")
        return None
    return duration if duration > 0 else None


# ============== ELEVENLABS ==============


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(error, (httpx.TimeoutException, httpx.TransportError))


class ElevenLabsNarrator:
    """
    Sintetiza a narração com a API do ElevenLabs.

    Features:
    - Retry com exponential backoff em timeouts e status retentáveis
    - Mensagens de erro por status (401, 403, 422, 429)
    - Duração medida com ffprobe, com a heurística como fallback
    - Resultado explícito (Outcome), sem exceções para o chamador
    """

    BASE_URL = "https://api.elevenlabs.io/v1"

    def __init__(
        self,
        config: ElevenLabsConfig,
        narration: Optional[NarrationConfig] = None,
        output_dir: str = "temp",
        client: Optional[httpx.AsyncClient] = None,
        max_attempts: int = 3,
        wait=None
    ):
        self.config = config
        self.narration = narration or NarrationConfig()
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.max_attempts = max_attempts
        self.wait = wait or wait_exponential(multiplier=1, min=4, max=30)
        self._client = client
        self._owns_client = client is None

    @property
    def available(self) -> bool:
        return bool(self.config.enabled and self.config.api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        """Retorna cliente HTTP reutilizável."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(connect=30, read=120, write=30, pool=60)
            )
            self._owns_client = True
        return self._client

    async def close(self):
        """Fecha o cliente HTTP (só se foi criado aqui)."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, script: str) -> bytes:
        client = await self._get_client()
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                response = await client.post(
                    f"{self.BASE_URL}/text-to-speech/{self.config.voice_id}",
                    headers={
                        "Accept": "audio/mpeg",
                        "xi-api-key": self.config.api_key,
                        "Content-Type": "application/json"
                    },
                    json={
                        "text": script,
                        "model_id": self.config.model_id,
                        "voice_settings": {
                            "stability": self.config.stability,
                            "similarity_boost": self.config.similarity_boost,
                            "style": self.config.style,
                            "use_speaker_boost": True
                        }
                    }
                )
                response.raise_for_status()
                return response.content

    @staticmethod
    def _error_from_status(e: httpx.HTTPStatusError) -> NarrationError:
        status_code = e.response.status_code
        try:
            body = e.response.json()
            detail = body.get("detail", {})
            error_msg = (detail.get("message", "") if isinstance(detail, dict) else str(detail)) \
                or body.get("message", "") or str(body)
        except ValueError:
            error_msg = e.response.text[:200] if e.response.text else str(e)

        if status_code == 401:
            return NarrationError("API key inválida ou expirada", status_code)
        if status_code == 403:
            return NarrationError("Sem permissão ou créditos esgotados", status_code)
        if status_code == 422:
            return NarrationError(f"Texto inválido: {error_msg}", status_code)
        if status_code == 429:
            return NarrationError("Rate limit excedido, aguarde alguns minutos", status_code)
        return NarrationError(error_msg or f"HTTP {status_code}", status_code)

    async def synthesize(self, script: str, job_id: Optional[str] = None) -> Outcome[AudioResource]:
        """
        Gera o áudio da narração.

        Args:
            script: Roteiro completo
            job_id: Usado no nome do arquivo

        Returns:
            Outcome com o AudioResource ou um NarrationError
        """
        logger.info(f"Synthesizing narration ({len(script.split())} words) with voice {self.config.voice_id}")
        try:
            content = await self._request(script)
        except httpx.HTTPStatusError as e:
            return Outcome.failure(self._error_from_status(e))
        except httpx.TimeoutException:
            return Outcome.failure(NarrationError("Timeout após várias tentativas"))
        except httpx.HTTPError as e:
            return Outcome.failure(NarrationError(f"Erro de conexão: {e}"))
        finally:
            await self.close()

        output_path = self.output_dir / f"narration_{job_id or uuid.uuid4().hex[:8]}.mp3"
        output_path.write_bytes(content)

        duration = probe_duration(output_path) or estimate_duration(script, self.narration)
        logger.info(f"Narration generated: {duration:.2f}s -> {output_path.name}")
        return Outcome.success(AudioResource(path=str(output_path), duration_seconds=duration))


# ============== SILENT FALLBACK ==============


class SilentTrackGenerator:
    """Faixa silenciosa com a duração estimada, usada quando não há síntese."""

    def __init__(self, ffmpeg_binary: str = "ffmpeg", output_dir: str = "temp"):
        self.ffmpeg_binary = ffmpeg_binary
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate(self, duration: float, job_id: Optional[str] = None) -> AudioResource:
        """
        Gera o silêncio com ffmpeg (anullsrc).

        Se o ffmpeg falhar, retorna o recurso sem arquivo: o vídeo é
        gravado sem faixa de áudio, com a mesma duração.
        """
        output_path = self.output_dir / f"silence_{job_id or uuid.uuid4().hex[:8]}.m4a"
        cmd = [
            self.ffmpeg_binary, "-y",
            "-f", "lavfi",
            "-i", "anullsrc=r=44100:cl=stereo",
            "-t", f"{duration:.3f}",
            "-c:a", "aac",
            str(output_path),
        ]
        try:
            subprocess.run(cmd, check=True, capture_output=True, timeout=60)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"Could not generate silent track, video will have no audio: {e}")
            return AudioResource(duration_seconds=duration, is_placeholder=True)

        logger.info(f"Silent narration track: {duration:.2f}s")
        return AudioResource(path=str(output_path), duration_seconds=duration, is_placeholder=True)
