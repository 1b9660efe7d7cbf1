"""Gemini client construction using the google-genai SDK.

Two modes:
- API key (default): genai.Client(api_key=...)
- Vertex AI: genai.Client(vertexai=True, project=..., location=...), with
  authentication via Application Default Credentials (ADC)

Usage:
    from clipforge.services.genai_client import build_genai_client

    client = build_genai_client(settings.google)
"""

from google import genai

from clipforge.config import GoogleConfig
from clipforge.errors import CapabilityNotConfigured


def build_genai_client(config: GoogleConfig) -> genai.Client:
    """Create a Gemini client for the configured mode.

    Raises:
        CapabilityNotConfigured: If neither an API key nor a Vertex AI
            project is configured.
    """
    if config.use_vertex_ai:
        if not config.project_id:
            raise CapabilityNotConfigured("prompt_validator", "CLIPFORGE_GOOGLE__PROJECT_ID")
        return genai.Client(
            vertexai=True,
            project=config.project_id,
            location=config.location,
        )

    if not config.api_key:
        raise CapabilityNotConfigured("prompt_validator", "CLIPFORGE_GOOGLE__API_KEY")
    return genai.Client(api_key=config.api_key)
