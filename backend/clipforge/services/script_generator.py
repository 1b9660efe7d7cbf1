"""Script generation via the OpenAI chat completions API."""

import logging
from typing import Optional

from openai import AsyncOpenAI

from clipforge.config import OpenAIConfig
from clipforge.errors import CapabilityNotConfigured, UpstreamUnavailable
from clipforge.services.base import ScriptGenerator

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert writer of viral social media scripts and video sales letters."

SCRIPT_PROMPT = """Write a detailed script for {content_type} based on this prompt: {prompt}

Specific guidelines:

For TikTok/Reels/Shorts:
- Hook in the first 3 seconds
- Vertical 9:16 format
- Young, direct language
- Strong call to action
- Relevant hashtags

For VSL/Ads:
- Structure: Problem -> Agitation -> Solution -> Proof -> Offer -> CTA
- Persuasion triggers
- Objections answered

For general scripts:
- Clear beginning, middle and end
- High-energy moments
- Smooth transitions

Write in the language of the prompt. Reply with the final script only, without explanations."""


class OpenAIScriptGenerator(ScriptGenerator):

    def __init__(self, config: OpenAIConfig, timeout: float, client: Optional[AsyncOpenAI] = None):
        self._config = config
        self._timeout = timeout
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._config.api_key:
                raise CapabilityNotConfigured("script_generator", "CLIPFORGE_OPENAI__API_KEY")
            self._client = AsyncOpenAI(api_key=self._config.api_key, timeout=self._timeout)
        return self._client

    async def generate(self, prompt: str, content_type: str) -> str:
        client = self.client
        try:
            response = await client.chat.completions.create(
                model=self._config.script_model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": SCRIPT_PROMPT.format(prompt=prompt, content_type=content_type)},
                ],
                max_tokens=self._config.max_tokens,
            )
        except Exception as e:
            raise UpstreamUnavailable("script_generator", f"{type(e).__name__}: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise UpstreamUnavailable("script_generator", "empty completion")
        return content.strip()
