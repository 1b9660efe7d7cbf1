"""Narration via the OpenAI text-to-speech API.

Audio bytes are stored locally by FileManager and exposed under the API's
/media mount, so downstream steps receive a URL like every other step.
"""

import asyncio
import logging
from typing import Optional

from openai import AsyncOpenAI

from clipforge.config import OpenAIConfig
from clipforge.errors import CapabilityNotConfigured, UpstreamUnavailable
from clipforge.services.base import SpeechSynthesizer
from clipforge.services.file_manager import FileManager

logger = logging.getLogger(__name__)


class OpenAISpeechSynthesizer(SpeechSynthesizer):

    def __init__(
        self,
        config: OpenAIConfig,
        file_manager: FileManager,
        timeout: float,
        client: Optional[AsyncOpenAI] = None,
    ):
        self._config = config
        self._files = file_manager
        self._timeout = timeout
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._config.api_key:
                raise CapabilityNotConfigured("speech_synthesizer", "CLIPFORGE_OPENAI__API_KEY")
            self._client = AsyncOpenAI(api_key=self._config.api_key, timeout=self._timeout)
        return self._client

    async def synthesize(self, text: str, max_length: int) -> str:
        client = self.client
        text = text[:max_length]
        if not text.strip():
            raise UpstreamUnavailable("speech_synthesizer", "nothing to narrate")

        try:
            response = await client.audio.speech.create(
                model=self._config.tts_model,
                voice=self._config.tts_voice,
                input=text,
            )
            audio = response.content
        except Exception as e:
            raise UpstreamUnavailable("speech_synthesizer", f"{type(e).__name__}: {e}") from e

        path = await asyncio.to_thread(self._files.save_audio, audio)
        logger.info("Saved narration (%d chars, %d bytes) to %s", len(text), len(audio), path)
        return self._files.public_url(path)
