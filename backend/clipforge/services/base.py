"""Abstract base classes for the external generation capabilities.

The orchestrator depends only on these interfaces. Concrete clients wrap a
single vendor each; tests substitute in-memory doubles.

Contract shared by every implementation: any failure (transport error,
timeout, malformed response, missing credentials) is raised as
clipforge.errors.UpstreamUnavailable or one of its subclasses.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from clipforge.schemas.pipeline import RenderRequest, RenderStatus, ValidationVerdict


class PromptValidator(ABC):
    """Content-policy and viability check for a prompt."""

    @abstractmethod
    async def validate(self, prompt: str, content_type: str) -> ValidationVerdict:
        ...


class ScriptGenerator(ABC):
    @abstractmethod
    async def generate(self, prompt: str, content_type: str) -> str:
        """Return the finished script as plain text."""
        ...


class ImageGenerator(ABC):
    @abstractmethod
    async def generate(self, prompt: str, content_type: str) -> str:
        """Return a URL of the generated background image."""
        ...


class SpeechSynthesizer(ABC):
    @abstractmethod
    async def synthesize(self, text: str, max_length: int) -> str:
        """Narrate text (cut to max_length characters) and return an audio URL."""
        ...


class VideoAssembler(ABC):
    """Server-side asynchronous renderer: submit a job, then poll it."""

    @abstractmethod
    async def submit(self, request: RenderRequest) -> str:
        """Queue a render and return its job id."""
        ...

    @abstractmethod
    async def status(self, job_id: str) -> RenderStatus:
        ...


class MediaAsset:
    """An asset to host: a remote URL, a local file, or inline text."""

    def __init__(self, *, url: str = None, path: Union[str, Path] = None, text: str = None):
        if sum(x is not None for x in (url, path, text)) != 1:
            raise ValueError("MediaAsset takes exactly one of url, path or text")
        self.url = url
        self.path = Path(path) if path is not None else None
        self.text = text

    def __repr__(self) -> str:
        source = self.url or self.path or f"<{len(self.text)} chars>"
        return f"MediaAsset({source})"


class MediaHost(ABC):
    @abstractmethod
    async def upload(self, asset: MediaAsset, kind: str) -> str:
        """Store the asset durably and return its public URL.

        Args:
            asset: What to upload
            kind: One of "video", "audio", "script"
        """
        ...
