"""
Erros do compositor e o registro de resultado usado nas fronteiras
com serviços externos.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class CompositorError(Exception):
    """Erro base do pipeline de composição."""
    pass


class InvalidDurationError(CompositorError):
    """Duração total inválida (não finita ou <= 0). Falha imediata, o chamador corrige a entrada."""

    def __init__(self, duration: float):
        self.duration = duration
        super().__init__(f"Total duration must be positive, got {duration}")


class AssetLoadError(CompositorError):
    """Falha ao carregar uma imagem (rede, timeout ou formato). Recuperável."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load asset {source}: {reason}")


class EncodingError(CompositorError):
    """Falha do sink de gravação (ffmpeg) ao iniciar ou durante a captura."""
    pass


class NarrationError(CompositorError):
    """Falha na síntese de voz."""

    def __init__(self, message: str, status_code: int = 0):
        self.message = message
        self.status_code = status_code
        super().__init__(f"{message} (HTTP {status_code})" if status_code else message)


class GenerationCancelled(Exception):
    """Sinal de cancelamento cooperativo. Não é um erro do compositor."""
    pass


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Valor ou erro retornado por uma chamada externa."""
    value: Optional[T] = None
    error: Optional[CompositorError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CompositorError) -> "Outcome[T]":
        return cls(error=error)
