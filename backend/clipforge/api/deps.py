"""Request dependencies: session user and the shared pipeline."""

import uuid

from fastapi import Request

from clipforge.errors import AuthRequired
from clipforge.orchestrator.pipeline import ContentPipeline

SESSION_USER_KEY = "user_id"


def current_user_id(request: Request) -> uuid.UUID:
    """Return the session's user id or raise AuthRequired."""
    raw = request.session.get(SESSION_USER_KEY)
    if not raw:
        raise AuthRequired()
    try:
        return uuid.UUID(raw)
    except ValueError:
        request.session.clear()
        raise AuthRequired()


def get_pipeline(request: Request) -> ContentPipeline:
    return request.app.state.pipeline
