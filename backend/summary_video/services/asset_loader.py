"""
Carregamento de imagens de fundo (thumbnails) por URL ou caminho local.
"""

import asyncio
import io
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

import httpx
from PIL import Image, UnidentifiedImageError
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..models.config import AssetConfig
from ..models.errors import AssetLoadError, Outcome

logger = logging.getLogger(__name__)


class AssetLoader:
    """
    Carrega imagens com timeout limitado.

    Features:
    - URLs http(s) via httpx com retry em erros de transporte
    - Caminhos locais (ou file://)
    - Falhas retornadas como Outcome, nunca levantadas
    - Cliente HTTP sempre fechado ao final do lote
    """

    def __init__(self, config: Optional[AssetConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or AssetConfig()
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Retorna cliente HTTP reutilizável."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout_seconds),
                follow_redirects=True
            )
            self._owns_client = True
        return self._client

    async def close(self):
        """Fecha o cliente HTTP (só se foi criado aqui)."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _fetch(self, url: str) -> bytes:
        client = await self._get_client()
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        ):
            with attempt:
                response = await client.get(url)
                response.raise_for_status()
                return response.content

    @staticmethod
    def _decode(data: bytes) -> Image.Image:
        image = Image.open(io.BytesIO(data))
        image.load()
        return image.convert("RGB")

    async def load(self, source: str) -> Outcome[Image.Image]:
        """
        Carrega uma imagem.

        Args:
            source: URL http(s), file:// ou caminho local

        Returns:
            Outcome com a imagem RGB ou um AssetLoadError
        """
        try:
            if source.startswith(("http://", "https://")):
                data = await asyncio.wait_for(
                    self._fetch(source),
                    timeout=self.config.timeout_seconds * self.config.max_attempts
                )
            else:
                path = Path(source.removeprefix("file://"))
                data = path.read_bytes()
            return Outcome.success(self._decode(data))

        except asyncio.TimeoutError:
            return Outcome.failure(AssetLoadError(source, "timeout"))
        except httpx.HTTPStatusError as e:
            return Outcome.failure(AssetLoadError(source, f"HTTP {e.response.status_code}"))
        except (httpx.HTTPError, RetryError) as e:
            return Outcome.failure(AssetLoadError(source, f"network error: {e}"))
        except (UnidentifiedImageError, ValueError) as e:
            return Outcome.failure(AssetLoadError(source, f"invalid image: {e}"))
        except OSError as e:
            return Outcome.failure(AssetLoadError(source, f"unreadable: {e}"))

    async def load_all(self, sources: Iterable[str]) -> Dict[str, Optional[Image.Image]]:
        """
        Carrega todas as imagens em paralelo.

        Returns:
            Dict referência -> imagem, com None para as que falharam
        """
        unique = list(dict.fromkeys(s for s in sources if s))
        try:
            outcomes = await asyncio.gather(*(self.load(source) for source in unique))
        finally:
            await self.close()

        images: Dict[str, Optional[Image.Image]] = {}
        for source, outcome in zip(unique, outcomes):
            if outcome.ok:
                images[source] = outcome.value
            else:
                logger.warning(f"Asset unavailable, using fallback: {outcome.error}")
                images[source] = None

        loaded = sum(1 for image in images.values() if image is not None)
        logger.info(f"Loaded {loaded}/{len(unique)} background images")
        return images


def release_images(images: Optional[Dict[str, Optional[Image.Image]]]):
    """Fecha as imagens de um lote carregado por load_all."""
    for image in (images or {}).values():
        if image is not None:
            image.close()
