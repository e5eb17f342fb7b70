"""
Gravação dos quadros renderizados com FFMPEG.

Os quadros são enviados como rawvideo rgb24 pelo stdin de um processo
ffmpeg; ao finalizar, a faixa de narração é adicionada ao vídeo.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol

from ..models.config import RenderConfig
from ..models.errors import EncodingError

logger = logging.getLogger(__name__)

FFMPEG_THREADS = 2


class FrameSink(Protocol):
    """Interface do destino dos quadros (permite fakes nos testes)."""

    def start(self):
        ...

    def write_frame(self, frame: bytes):
        ...

    def finalize(self, audio_path: Optional[str] = None) -> Path:
        ...

    def abort(self):
        ...


def _to_absolute_path(path) -> str:
    """Converte qualquer caminho para absoluto."""
    return str(Path(path).resolve())


class FFmpegRecorder:
    """
    Grava quadros RGB em MP4 (H.264) e adiciona o áudio no final.

    Features:
    - Quadros via stdin, sem arquivos intermediários por quadro
    - Log de stderr do ffmpeg para diagnóstico
    - Mux do áudio com AAC e +faststart
    - abort() mata o processo e remove arquivos parciais
    """

    def __init__(self, config: RenderConfig, output_path: Path):
        self.config = config
        self.width = config.resolution.width
        self.height = config.resolution.height
        self.fps = config.fps
        self.output_path = Path(output_path).resolve()
        self.video_path = self.output_path.with_name(f"{self.output_path.stem}_video.mp4")
        self.stderr_log = self.output_path.with_name(f"{self.output_path.stem}_ffmpeg.log")
        self._process: Optional[subprocess.Popen] = None
        self._stderr_file = None
        self.frames_written = 0

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.abort()
        return False

    @property
    def frame_size(self) -> int:
        return self.width * self.height * 3

    def _build_command(self) -> List[str]:
        cfg = self.config
        return [
            cfg.ffmpeg_binary, "-y",
            "-threads", str(FFMPEG_THREADS),
            "-f", "rawvideo",
            "-pix_fmt", "rgb24",
            "-s", f"{self.width}x{self.height}",
            "-r", str(self.fps),
            "-i", "-",
            "-c:v", "libx264",
            "-preset", cfg.preset,
            "-crf", str(cfg.crf),
            "-pix_fmt", "yuv420p",
            "-an",
            str(self.video_path),
        ]

    def start(self):
        """Inicia o processo ffmpeg. Levanta EncodingError se não for possível."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = self._build_command()
        logger.info(f"Starting recorder {self.width}x{self.height}@{self.fps}fps -> {self.output_path.name}")
        logger.debug(f"Command: {' '.join(cmd)}")

        try:
            self._stderr_file = open(self.stderr_log, "w")
            self._process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=self._stderr_file,
            )
        except OSError as e:
            self._close_log()
            raise EncodingError(f"Could not start {self.config.ffmpeg_binary}: {e}") from e

        if self._process.poll() is not None:
            self._close_log()
            raise EncodingError(f"ffmpeg exited immediately: {self._get_ffmpeg_error()}")

    def write_frame(self, frame: bytes):
        """Envia um quadro rgb24. Levanta EncodingError se o pipe quebrar."""
        if self._process is None or self._process.stdin is None:
            raise EncodingError("Recorder not started")
        if len(frame) != self.frame_size:
            raise EncodingError(f"Frame has {len(frame)} bytes, expected {self.frame_size}")
        try:
            self._process.stdin.write(frame)
        except (BrokenPipeError, ValueError, OSError) as e:
            raise EncodingError(f"ffmpeg stopped accepting frames: {self._get_ffmpeg_error()}") from e
        self.frames_written += 1

    def finalize(self, audio_path: Optional[str] = None) -> Path:
        """
        Fecha o stream, espera o ffmpeg e adiciona o áudio.

        Args:
            audio_path: Faixa de narração (opcional)

        Returns:
            Caminho do MP4 final
        """
        if self._process is None:
            raise EncodingError("Recorder not started")

        try:
            self._process.stdin.close()
            returncode = self._process.wait(timeout=self.config.encode_timeout)
        except subprocess.TimeoutExpired as e:
            self.abort()
            raise EncodingError(f"ffmpeg timeout after {self.config.encode_timeout}s") from e
        except (BrokenPipeError, OSError) as e:
            self.abort()
            raise EncodingError(f"ffmpeg failed while closing: {e}") from e
        finally:
            self._close_log()

        if returncode != 0:
            error_msg = self._get_ffmpeg_error()
            self.abort()
            raise EncodingError(f"ffmpeg failed (exit {returncode}): {error_msg}")

        logger.info(f"Encoded {self.frames_written} frames")

        if audio_path:
            self._add_audio_to_video(audio_path)
            self.video_path.unlink(missing_ok=True)
        else:
            self.video_path.replace(self.output_path)

        self.stderr_log.unlink(missing_ok=True)
        self._process = None
        return self.output_path

    def abort(self):
        """Mata o processo e remove arquivos parciais. Idempotente."""
        if self._process is not None:
            if self._process.poll() is None:
                self._process.kill()
                self._process.wait()
            if self._process.stdin and not self._process.stdin.closed:
                try:
                    self._process.stdin.close()
                except OSError:
                    logger.debug("stdin already broken while aborting")
            self._process = None
            logger.warning(f"Recording aborted after {self.frames_written} frames")
        self._close_log()
        for path in (self.video_path, self.output_path):
            path.unlink(missing_ok=True)

    def _add_audio_to_video(self, audio_path: str):
        """Adiciona o áudio ao vídeo gravado."""
        cfg = self.config
        audio_path_abs = _to_absolute_path(audio_path)
        if not Path(audio_path_abs).exists():
            self.abort()
            raise EncodingError(f"Audio file not found: {audio_path_abs}")

        cmd = [
            cfg.ffmpeg_binary, "-y",
            "-threads", str(FFMPEG_THREADS),
            "-i", str(self.video_path),
            "-i", audio_path_abs,
            "-c:v", "copy",
            "-c:a", "aac" if cfg.audio_codec == "aac" else "libmp3lame",
            "-b:a", f"{cfg.audio_bitrate}k",
            "-map", "0:v:0",
            "-map", "1:a:0",
            "-shortest",
            "-movflags", "+faststart",
            str(self.output_path),
        ]
        logger.info(f"Adding audio to video: {Path(audio_path_abs).name}")

        try:
            with open(self.stderr_log, "w") as stderr_file:
                subprocess.run(
                    cmd,
                    check=True,
                    stdout=subprocess.DEVNULL,
                    stderr=stderr_file,
                    timeout=cfg.encode_timeout
                )
        except subprocess.TimeoutExpired as e:
            self.abort()
            raise EncodingError(f"ffmpeg [add_audio] timeout after {cfg.encode_timeout}s") from e
        except subprocess.CalledProcessError as e:
            error_msg = self._get_ffmpeg_error()
            self.abort()
            raise EncodingError(f"ffmpeg [add_audio] failed: {error_msg}") from e

    def _close_log(self):
        if self._stderr_file is not None and not self._stderr_file.closed:
            self._stderr_file.close()
        self._stderr_file = None

    def _get_ffmpeg_error(self) -> str:
        """Extrai mensagem de erro do log FFMPEG."""
        if self._stderr_file is not None:
            self._stderr_file.flush()
        try:
            content = self.stderr_log.read_text(errors="replace")
        except OSError:
            return "Unknown error"
        for line in reversed(content.split("\n")):
            if "error" in line.lower():
                return line[:200]
        return content[-300:] or "Unknown error"
