"""Background image generation through the Eden AI image API."""

import logging
from typing import Optional

import httpx

from clipforge.config import EdenAIConfig
from clipforge.errors import CapabilityNotConfigured, UpstreamUnavailable
from clipforge.services.base import ImageGenerator
from clipforge.services.fallbacks import ContentType

logger = logging.getLogger(__name__)

_VERTICAL_RESOLUTION = "512x768"
_LANDSCAPE_RESOLUTION = "768x512"


def resolution_for(content_type: ContentType) -> str:
    """Short-form categories render vertically, everything else landscape."""
    return _VERTICAL_RESOLUTION if content_type.is_vertical else _LANDSCAPE_RESOLUTION


class EdenAIImageGenerator(ImageGenerator):
    """Async client for Eden AI's /image/generation endpoint."""

    def __init__(self, config: EdenAIConfig, timeout: float):
        self._config = config
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if not self._config.api_key:
            raise CapabilityNotConfigured("image_generator", "CLIPFORGE_EDENAI__API_KEY")
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={"Authorization": f"Bearer {self._config.api_key}"},
                timeout=httpx.Timeout(self._timeout, connect=30.0),
            )
        return self._client

    async def generate(self, prompt: str, content_type: str) -> str:
        client = self.client
        category = ContentType.parse(content_type)
        payload = {
            "providers": self._config.provider,
            "text": f"Professional {content_type} visual: {prompt}",
            "resolution": resolution_for(category),
            "num_images": 1,
        }
        logger.info("POST %s provider=%s resolution=%s", self._config.api_url, payload["providers"], payload["resolution"])
        try:
            response = await client.post(self._config.api_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamUnavailable("image_generator", f"{type(e).__name__}: {e}") from e

        items = (data.get(self._config.provider) or {}).get("items") or []
        url = items[0].get("image_resource_url") if items else None
        if not url:
            raise UpstreamUnavailable("image_generator", "response contained no image")
        return url

    async def close(self):
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
