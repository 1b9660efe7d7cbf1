"""Prompt validation backed by Gemini structured output."""

import logging
from typing import Optional

from google import genai
from google.genai import types as genai_types
from pydantic import ValidationError

from clipforge.config import GoogleConfig
from clipforge.errors import UpstreamUnavailable
from clipforge.schemas.pipeline import ValidationVerdict
from clipforge.services.base import PromptValidator
from clipforge.services.genai_client import build_genai_client

logger = logging.getLogger(__name__)

VALIDATION_PROMPT = """Validate this idea for viral content and analyse its viability.

Type: {content_type}
Prompt: {prompt}

Validation criteria:
- Appropriate content (no violence, hate speech, etc.)
- Viral potential for {content_type}
- Clarity of the request
- Technical feasibility

Answer in JSON with "approved", "reason" (only when rejected) and "analysis"
(target audience, tone and strategy). Write the analysis in the language of the prompt."""


class GeminiPromptValidator(PromptValidator):
    """Validator using a Gemini model with a JSON response schema.

    Temperature is pinned to 0 so identical prompts get identical decisions.
    """

    def __init__(self, config: GoogleConfig, client: Optional[genai.Client] = None):
        self._config = config
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = build_genai_client(self._config)
        return self._client

    async def validate(self, prompt: str, content_type: str) -> ValidationVerdict:
        config = genai_types.GenerateContentConfig(
            temperature=0.0,
            response_mime_type="application/json",
            response_schema=ValidationVerdict,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self._config.model,
                contents=VALIDATION_PROMPT.format(prompt=prompt, content_type=content_type),
                config=config,
            )
            verdict = ValidationVerdict.model_validate_json(response.text or "")
        except UpstreamUnavailable:
            raise
        except ValidationError as e:
            raise UpstreamUnavailable("prompt_validator", f"malformed verdict: {e}") from e
        except Exception as e:
            raise UpstreamUnavailable("prompt_validator", f"{type(e).__name__}: {e}") from e

        if not verdict.analysis:
            verdict.analysis = f"{content_type} content approved for production."
        logger.debug("Validation verdict for %s: approved=%s", content_type, verdict.approved)
        return verdict
