"""Creatomate render API client.

Provides:
- Render submission from a per-type template with text, image and audio
  modifications
- Render status lookup, normalized to RenderStatus

Both calls retry on transient HTTP errors (429/5xx, network failures);
everything else surfaces immediately as UpstreamUnavailable.
"""

import logging
from typing import Optional

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from clipforge.config import RenderConfig
from clipforge.errors import CapabilityNotConfigured, UpstreamUnavailable
from clipforge.schemas.pipeline import RenderRequest, RenderStatus
from clipforge.services.base import VideoAssembler
from clipforge.services.fallbacks import ContentType, render_template

logger = logging.getLogger(__name__)

_TRANSIENT_HTTP_CODES = {429, 500, 502, 503, 504}


def _is_retriable(exc: BaseException) -> bool:
    """Return True for rate limits, server errors and network failures."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _TRANSIENT_HTTP_CODES
    return isinstance(exc, httpx.TransportError)


_transient_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception(_is_retriable),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


class CreatomateVideoAssembler(VideoAssembler):

    def __init__(self, config: RenderConfig, timeout: float):
        self._config = config
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _ensure_configured(self) -> None:
        if not self._config.api_key:
            raise CapabilityNotConfigured("video_assembler", "CLIPFORGE_RENDER__API_KEY")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._config.api_url.rstrip("/"),
                headers={"Authorization": f"Bearer {self._config.api_key}"},
                timeout=httpx.Timeout(self._timeout, connect=30.0),
            )
        return self._client

    @_transient_retry
    async def _post_render(self, payload: dict) -> dict:
        response = await self.client.post("/renders", json=payload)
        response.raise_for_status()
        return response.json()

    @_transient_retry
    async def _get_render(self, job_id: str) -> dict:
        response = await self.client.get(f"/renders/{job_id}")
        response.raise_for_status()
        return response.json()

    async def submit(self, request: RenderRequest) -> str:
        template_id = render_template(ContentType.parse(request.content_type), self._config.templates)
        payload = {
            "template_id": template_id,
            "modifications": {
                "text-content": request.script,
                "background-image": request.image_url,
                "audio-track": request.audio_url,
            },
        }
        self._ensure_configured()
        logger.info("POST %s/renders template=%s", self._config.api_url, template_id)
        try:
            data = await self._post_render(payload)
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamUnavailable("video_assembler", f"submit failed: {type(e).__name__}: {e}") from e

        # The API answers with a list when the template yields several outputs
        render = data[0] if isinstance(data, list) and data else data
        job_id = render.get("id") if isinstance(render, dict) else None
        if not job_id:
            raise UpstreamUnavailable("video_assembler", "submit response had no render id")
        logger.info("  render id: %s", job_id)
        return str(job_id)

    async def status(self, job_id: str) -> RenderStatus:
        self._ensure_configured()
        try:
            data = await self._get_render(job_id)
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamUnavailable("video_assembler", f"status failed: {type(e).__name__}: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamUnavailable("video_assembler", "status response was not an object")

        status = RenderStatus(
            status=str(data.get("status", "unknown")),
            url=data.get("url"),
            error=data.get("error_message"),
        )
        logger.debug("GET renders/%s -> %s", job_id, status.status)
        return status

    async def close(self):
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
