"""
Logging do compositor de vídeos-resumo.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Bibliotecas que logam cada requisição ou cada decodificação de imagem
NOISY_LOGGERS = ("httpx", "httpcore", "PIL", "multipart")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Configura o logging da aplicação.

    Args:
        level: Nível (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Arquivo de log opcional, além do stdout
        format_string: Formato das mensagens
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=numeric_level,
        format=format_string or DEFAULT_FORMAT,
        handlers=handlers
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class JobLoggerAdapter(logging.LoggerAdapter):
    """Prefixa as mensagens com o id do job."""

    def __init__(self, logger: logging.Logger, job_id: str):
        super().__init__(logger, {"job_id": job_id})

    def process(self, msg, kwargs):
        return f"[Job {self.extra['job_id']}] {msg}", kwargs


def get_job_logger(name: str, job_id: str) -> JobLoggerAdapter:
    """Logger com o contexto do job."""
    return JobLoggerAdapter(logging.getLogger(name), job_id)
