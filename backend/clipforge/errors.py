"""Exception taxonomy for clipforge.

Pipeline errors:
    ValidationRejected describes the only fatal pipeline outcome; the
    orchestrator records its message as the run error and the project ends
    as failed. UpstreamUnavailable and its subclasses are absorbed by the
    orchestrator, which substitutes the step's fallback value.

API errors:
    ApiError subclasses carry an HTTP status code and are rendered by the
    exception handler registered in clipforge.api.app.
"""

from typing import Optional


class ClipforgeError(Exception):
    """Base class for all clipforge errors."""


class ValidationRejected(ClipforgeError):
    """The prompt validator rejected the request on content-policy grounds."""

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason or "no reason given"
        super().__init__(f"Prompt rejected: {self.reason}")


class InvalidTransition(ClipforgeError):
    """A project status change that the state machine does not allow."""


class UpstreamUnavailable(ClipforgeError):
    """A generation capability failed, timed out or returned garbage."""

    def __init__(self, capability: str, detail: str):
        self.capability = capability
        self.detail = detail
        super().__init__(f"{capability} unavailable: {detail}")


class CapabilityNotConfigured(UpstreamUnavailable):
    """The capability has no credentials configured."""

    def __init__(self, capability: str, setting: str):
        self.setting = setting
        super().__init__(capability, f"not configured (set {setting})")


class RenderFailed(UpstreamUnavailable):
    def __init__(self, job_id: str, detail: str = "render reported failure"):
        self.job_id = job_id
        super().__init__("video_assembler", f"job {job_id}: {detail}")


class RenderTimeout(UpstreamUnavailable):
    def __init__(self, job_id: str, attempts: int, interval: float):
        self.job_id = job_id
        self.attempts = attempts
        super().__init__(
            "video_assembler",
            f"job {job_id} did not finish after {attempts} polls ({attempts * interval:.0f}s)",
        )


class HostingUnavailable(UpstreamUnavailable):
    def __init__(self, detail: str):
        super().__init__("media_host", detail)


class ApiError(ClipforgeError):
    """Error surfaced to HTTP callers with a status code."""

    status_code = 500

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class BadRequest(ApiError):
    status_code = 400


class AuthRequired(ApiError):
    status_code = 401

    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(detail)


class AuthInvalid(ApiError):
    status_code = 401

    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(detail)


class RecordNotFound(ApiError):
    status_code = 404
