"""
Router para configurações do sistema.
"""

import json
import logging
from pathlib import Path

from fastapi import APIRouter

from ..models.config import FullConfig, NarrationConfig, RenderConfig

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/config", tags=["config"])

# Config file path
CONFIG_FILE = Path("storage/config.json")


def get_config() -> FullConfig:
    """Carrega a configuração do arquivo ou retorna os defaults."""
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE) as f:
                return FullConfig(**json.load(f))
        except (OSError, ValueError) as e:
            logger.warning(f"Invalid config file {CONFIG_FILE}, using defaults: {e}")
    return FullConfig()


def save_config(config: FullConfig):
    """Salva a configuração no arquivo."""
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_FILE, "w") as f:
        json.dump(config.model_dump(mode="json"), f, indent=2)


def merge_overrides(config: FullConfig, overrides: dict) -> FullConfig:
    """Aplica overrides parciais (um nível de dicionários) sobre a configuração."""
    data = config.model_dump(mode="json")
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(data.get(key), dict):
            data[key].update(value)
        else:
            data[key] = value
    return FullConfig(**data)


@router.get("", response_model=FullConfig)
async def get_configuration():
    """
    Retorna configurações atuais.
    """
    return get_config()


@router.put("", response_model=FullConfig)
async def update_configuration(config: FullConfig):
    """
    Substitui as configurações.
    """
    save_config(config)
    return config


@router.patch("/render", response_model=RenderConfig)
async def update_render_config(render_config: RenderConfig):
    """
    Atualiza apenas configurações de renderização.
    """
    config = get_config()
    config.render = render_config
    save_config(config)
    return config.render


@router.patch("/narration", response_model=NarrationConfig)
async def update_narration_config(narration_config: NarrationConfig):
    """
    Atualiza apenas a heurística de duração da narração.
    """
    config = get_config()
    config.narration = narration_config
    save_config(config)
    return config.narration
