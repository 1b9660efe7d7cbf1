"""clipforge - AI-powered short-form video and script generation service.

This module provides startup validation so misconfigured deployments fail
fast instead of silently degrading every pipeline run to fallbacks.
Call validate_configuration() during application startup.
"""

import logging

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

DEFAULT_SESSION_SECRET = "clipforge-dev-secret"

# Secrets published with the project; they must never sign cookies in production
KNOWN_INSECURE_SECRETS = frozenset({DEFAULT_SESSION_SECRET, "change-me", "changeme", "secret"})


def configure_logging(settings) -> None:
    """Install the root log format once for API and CLI entry points."""
    logging.basicConfig(
        level=settings.logging.level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def missing_credentials(settings) -> list[str]:
    """Return the capability credentials that are not configured."""
    required = {
        "google.api_key": settings.google.api_key or (settings.google.use_vertex_ai and settings.google.project_id),
        "openai.api_key": settings.openai.api_key,
        "edenai.api_key": settings.edenai.api_key,
        "render.api_key": settings.render.api_key,
        "hosting.bucket": settings.hosting.bucket,
    }
    return [name for name, value in required.items() if not value]


def validate_configuration(settings) -> None:
    """Validate settings before serving traffic.

    In development, missing capability credentials are allowed: every call
    to an unconfigured capability is absorbed by the orchestrator as a
    fallback. Any other environment must be fully configured.

    Raises:
        RuntimeError: If a non-development deployment is missing credentials
            or its session secret is empty or a published example value.
    """
    missing = missing_credentials(settings)

    if settings.environment == "development":
        if missing:
            logger.warning(
                "Running without credentials for %s; those steps will use fallbacks",
                ", ".join(missing),
            )
        return

    problems = [f"missing {name}" for name in missing]
    secret = settings.server.session_secret.strip()
    if not secret:
        problems.append("server.session_secret is empty")
    elif secret in KNOWN_INSECURE_SECRETS:
        problems.append("server.session_secret is a published example value")
    if problems:
        raise RuntimeError(
            f"Invalid configuration for environment '{settings.environment}': "
            + "; ".join(problems)
            + ". Set the matching CLIPFORGE_* environment variables or config.yaml entries."
        )
    logger.info("Configuration validated for environment %s", settings.environment)
