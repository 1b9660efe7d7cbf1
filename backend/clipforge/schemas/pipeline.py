"""Pydantic schemas exchanged between the orchestrator and capability clients."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ValidationVerdict(BaseModel):
    """Prompt validator output.

    Also used as the structured-output schema sent to the validation model,
    so field descriptions double as instructions.
    """

    approved: bool = Field(True, description="False only for inappropriate or unworkable requests")
    reason: Optional[str] = Field(None, description="Why the request was rejected")
    analysis: str = Field("", description="Audience, tone and strategy analysis")


class RenderRequest(BaseModel):
    script: str
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    content_type: str


class RenderStatus(BaseModel):
    """One status poll of a render job; status is the assembler's raw value."""

    status: str
    url: Optional[str] = None
    error: Optional[str] = None


class HostedUrls(BaseModel):
    video: Optional[str] = None
    audio: Optional[str] = None
    script: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.video or self.audio or self.script)


class StepOutcome(str, Enum):
    OK = "ok"
    FALLBACK = "fallback"
    REJECTED = "rejected"
    SKIPPED = "skipped"


PIPELINE_STEPS = ("validation", "script", "image", "audio", "video", "hosting")


class PipelineResult(BaseModel):
    """Accumulator for one pipeline run, folded into a Project update."""

    analysis: str = ""
    script: str = ""
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    video_url: Optional[str] = None
    hosted_urls: HostedUrls = Field(default_factory=HostedUrls)
    error: Optional[str] = None
    steps: dict[str, StepOutcome] = Field(default_factory=dict)
    durations: dict[str, float] = Field(default_factory=dict)

    @property
    def rejected(self) -> bool:
        return self.steps.get("validation") == StepOutcome.REJECTED

    @property
    def degraded(self) -> bool:
        """True when at least one step used its fallback value."""
        return any(outcome == StepOutcome.FALLBACK for outcome in self.steps.values())
