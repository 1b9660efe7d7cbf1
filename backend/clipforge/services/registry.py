"""Capability registry.

Builds one explicitly constructed client per capability from settings.
The orchestrator receives the bundle; nothing here is a module global, so
tests construct their own bundle of doubles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from clipforge.config import Settings
from clipforge.services.base import (
    ImageGenerator,
    MediaHost,
    PromptValidator,
    ScriptGenerator,
    SpeechSynthesizer,
    VideoAssembler,
)
from clipforge.services.file_manager import FileManager

logger = logging.getLogger(__name__)


@dataclass
class Capabilities:
    """The external collaborators one pipeline run depends on."""

    validator: PromptValidator
    script_generator: ScriptGenerator
    image_generator: ImageGenerator
    speech_synthesizer: SpeechSynthesizer
    video_assembler: VideoAssembler
    media_host: MediaHost

    async def close(self) -> None:
        """Close any client that holds an HTTP connection pool."""
        for client in (
            self.validator,
            self.script_generator,
            self.image_generator,
            self.speech_synthesizer,
            self.video_assembler,
            self.media_host,
        ):
            close = getattr(client, "close", None)
            if close is not None:
                await close()


def build_file_manager(settings: Settings) -> FileManager:
    return FileManager(settings.storage.media_dir, settings.server.public_base_url)


def build_capabilities(settings: Settings) -> Capabilities:
    """Return the vendor-backed capability bundle for the given settings.

    Clients connect lazily, so building never fails for missing credentials;
    unconfigured capabilities raise CapabilityNotConfigured when called.
    """
    from clipforge.services.image_generator import EdenAIImageGenerator
    from clipforge.services.media_host import S3MediaHost
    from clipforge.services.prompt_validator import GeminiPromptValidator
    from clipforge.services.script_generator import OpenAIScriptGenerator
    from clipforge.services.speech_synthesizer import OpenAISpeechSynthesizer
    from clipforge.services.video_assembler import CreatomateVideoAssembler

    timeout = settings.http.timeout_seconds
    file_manager = build_file_manager(settings)

    logger.debug("Building capability clients (timeout=%ss)", timeout)
    return Capabilities(
        validator=GeminiPromptValidator(settings.google),
        script_generator=OpenAIScriptGenerator(settings.openai, timeout=timeout),
        image_generator=EdenAIImageGenerator(settings.edenai, timeout=timeout),
        speech_synthesizer=OpenAISpeechSynthesizer(settings.openai, file_manager, timeout=timeout),
        video_assembler=CreatomateVideoAssembler(settings.render, timeout=timeout),
        media_host=S3MediaHost(settings.hosting, file_manager, timeout=timeout),
    )
