"""
Durable media hosting on S3-compatible object storage (AWS S3, Cloudflare
R2, MinIO).

boto3 is synchronous, so uploads run in a worker thread. Remote assets are
downloaded with httpx first; local narration files are read from disk.
"""

import asyncio
import logging
import mimetypes
import uuid

import boto3
import httpx
from botocore.exceptions import BotoCoreError, ClientError

from clipforge.config import HostingConfig
from clipforge.errors import CapabilityNotConfigured, HostingUnavailable
from clipforge.services.base import MediaAsset, MediaHost
from clipforge.services.file_manager import FileManager

logger = logging.getLogger(__name__)

_DEFAULT_EXTENSIONS = {"video": ".mp4", "audio": ".mp3", "script": ".txt"}


def _url_extension(url: str) -> str:
    """".mp4" for https://host/path/video.mp4?sig=..., "" when there is none."""
    name = url.split("?", 1)[0].rsplit("/", 1)[-1]
    return "." + name.rsplit(".", 1)[-1] if "." in name else ""


class S3MediaHost(MediaHost):
    """Uploads assets under {prefix}/{kind}s/ and returns their public URL."""

    def __init__(self, config: HostingConfig, file_manager: FileManager, timeout: float):
        self._config = config
        self._files = file_manager
        self._timeout = timeout
        self._s3 = None

    @property
    def s3(self):
        if not self._config.bucket:
            raise CapabilityNotConfigured("media_host", "CLIPFORGE_HOSTING__BUCKET")
        if self._s3 is None:
            self._s3 = boto3.client(
                service_name="s3",
                endpoint_url=self._config.endpoint_url or None,
                aws_access_key_id=self._config.access_key_id or None,
                aws_secret_access_key=self._config.secret_access_key or None,
                region_name=self._config.region,
            )
            logger.info("Initialized S3 client for bucket %s", self._config.bucket)
        return self._s3

    def _object_key(self, kind: str, extension: str) -> str:
        prefix = self._config.prefix.strip("/")
        return f"{prefix}/{kind}s/{uuid.uuid4().hex}{extension}"

    def _object_url(self, key: str) -> str:
        if self._config.public_base_url:
            return f"{self._config.public_base_url.rstrip('/')}/{key}"
        return f"https://{self._config.bucket}.s3.{self._config.region}.amazonaws.com/{key}"

    async def _read(self, asset: MediaAsset, kind: str) -> tuple[bytes, str, str]:
        """Return (body, extension, content_type) for an asset."""
        if asset.text is not None:
            return asset.text.encode("utf-8"), ".txt", "text/plain; charset=utf-8"

        path = asset.path
        if path is None and asset.url is not None:
            # Our own /media URLs are read from disk instead of over HTTP
            path = self._files.resolve_public_url(asset.url)

        if path is not None:
            body = await asyncio.to_thread(path.read_bytes)
            extension = path.suffix or _DEFAULT_EXTENSIONS.get(kind, "")
        else:
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                response = await client.get(asset.url)
                response.raise_for_status()
                body = response.content
            extension = _url_extension(asset.url) or _DEFAULT_EXTENSIONS.get(kind, "")

        content_type = mimetypes.guess_type(f"file{extension}")[0] or "application/octet-stream"
        return body, extension, content_type

    async def upload(self, asset: MediaAsset, kind: str) -> str:
        s3 = self.s3
        try:
            body, extension, content_type = await self._read(asset, kind)
        except (OSError, httpx.HTTPError) as e:
            raise HostingUnavailable(f"could not read {asset!r}: {e}") from e

        key = self._object_key(kind, extension)
        try:
            await asyncio.to_thread(
                s3.put_object,
                Bucket=self._config.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise HostingUnavailable(f"upload of {key} failed: {e}") from e

        url = self._object_url(key)
        logger.info("Hosted %s (%d bytes) at %s", kind, len(body), url)
        return url
