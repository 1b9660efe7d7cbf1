"""Main pipeline orchestrator with per-step fallbacks and run metadata tracking.

Coordinates the six-step content generation pipeline with:
- Sequential steps: validation, script, image, audio, video, hosting
- Static fallback substitution for every failed step except validation
- Typed per-step outcomes (ok / fallback / rejected / skipped)
- Per-step timing recorded on a PipelineRun
- Exactly one terminal status write per project
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from clipforge.config import Settings
from clipforge.db.models import PipelineRun
from clipforge.errors import UpstreamUnavailable, ValidationRejected
from clipforge.orchestrator.polling import wait_for_render
from clipforge.orchestrator.state import COMPLETED, FAILED, is_terminal
from clipforge.schemas.pipeline import (
    PIPELINE_STEPS,
    HostedUrls,
    PipelineResult,
    RenderRequest,
    StepOutcome,
)
from clipforge.services import project_store
from clipforge.services.base import MediaAsset
from clipforge.services.fallbacks import (
    FALLBACK_AUDIO_URL,
    ContentType,
    fallback_image_url,
    fallback_script,
    fallback_video_url,
)
from clipforge.services.registry import Capabilities, build_capabilities

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def pre_approved_analysis(content_type: str) -> str:
    return f"{content_type} content pre-approved for engagement and conversion."


class ContentPipeline:
    """Runs the generation steps for one prompt against a capability bundle.

    The bundle is shared read-only between concurrent runs; all per-run
    state lives in the PipelineResult returned by run().
    """

    def __init__(self, capabilities: Capabilities, settings: Settings):
        self.capabilities = capabilities
        self.settings = settings

    async def close(self) -> None:
        await self.capabilities.close()

    def _absorb(self, result: PipelineResult, step: str, exc: Exception) -> None:
        """Record a fallback for step and log the cause."""
        result.steps[step] = StepOutcome.FALLBACK
        if isinstance(exc, UpstreamUnavailable):
            logger.warning(f"Step {step} using fallback: {exc}")
        else:
            logger.warning(f"Step {step} using fallback: {type(exc).__name__}: {exc}", exc_info=True)

    async def run(self, prompt: str, content_type: str) -> PipelineResult:
        """Execute validation, script, image, audio, video and hosting in order.

        Never raises for capability failures. A rejected prompt returns a
        result with ``error`` set and every downstream step skipped.

        Args:
            prompt: User prompt
            content_type: Submitted type string; unknown values use the
                custom fallbacks

        Returns:
            PipelineResult with every approved-run field populated
        """
        caps = self.capabilities
        category = ContentType.parse(content_type)
        result = PipelineResult()
        step_log = result.durations

        # Step 1: Validation
        step_start = time.monotonic()
        try:
            verdict = await caps.validator.validate(prompt, content_type)
        except Exception as e:
            self._absorb(result, "validation", e)
            result.analysis = pre_approved_analysis(content_type)
        else:
            if not verdict.approved:
                rejection = ValidationRejected(verdict.reason)
                result.error = str(rejection)
                result.steps["validation"] = StepOutcome.REJECTED
                for step in PIPELINE_STEPS[1:]:
                    result.steps[step] = StepOutcome.SKIPPED
                logger.info(f"Prompt rejected by validator: {rejection.reason}")
                return result
            result.analysis = verdict.analysis
            result.steps["validation"] = StepOutcome.OK
        step_log["validation"] = time.monotonic() - step_start

        # Step 2: Script
        step_start = time.monotonic()
        try:
            script = await caps.script_generator.generate(prompt, content_type)
            if not script or not script.strip():
                raise UpstreamUnavailable("script_generator", "empty script")
            result.script = script
            result.steps["script"] = StepOutcome.OK
        except Exception as e:
            self._absorb(result, "script", e)
            result.script = fallback_script(category)
        step_log["script"] = time.monotonic() - step_start

        # Step 3: Image
        step_start = time.monotonic()
        try:
            result.image_url = await caps.image_generator.generate(prompt, content_type)
            result.steps["image"] = StepOutcome.OK
        except Exception as e:
            self._absorb(result, "image", e)
            result.image_url = fallback_image_url(category)
        step_log["image"] = time.monotonic() - step_start

        # Step 4: Audio
        step_start = time.monotonic()
        max_chars = self.settings.pipeline.tts_max_chars
        try:
            result.audio_url = await caps.speech_synthesizer.synthesize(
                result.script[:max_chars], max_chars
            )
            result.steps["audio"] = StepOutcome.OK
        except Exception as e:
            self._absorb(result, "audio", e)
            result.audio_url = FALLBACK_AUDIO_URL
        step_log["audio"] = time.monotonic() - step_start

        # Step 5: Video (submit + poll)
        step_start = time.monotonic()
        try:
            job_id = await caps.video_assembler.submit(
                RenderRequest(
                    script=result.script,
                    image_url=result.image_url,
                    audio_url=result.audio_url,
                    content_type=content_type,
                )
            )
            result.video_url = await wait_for_render(
                caps.video_assembler,
                job_id,
                interval=self.settings.render.poll_interval,
                max_attempts=self.settings.render.poll_max_attempts,
            )
            result.steps["video"] = StepOutcome.OK
        except Exception as e:
            self._absorb(result, "video", e)
            result.video_url = fallback_video_url(category)
        step_log["video"] = time.monotonic() - step_start

        # Step 6: Hosting (no substitution: absence is acceptable)
        step_start = time.monotonic()
        try:
            result.hosted_urls = HostedUrls(
                video=await caps.media_host.upload(MediaAsset(url=result.video_url), "video"),
                audio=await caps.media_host.upload(MediaAsset(url=result.audio_url), "audio"),
                script=await caps.media_host.upload(MediaAsset(text=result.script), "script"),
            )
            result.steps["hosting"] = StepOutcome.OK
        except Exception as e:
            self._absorb(result, "hosting", e)
            result.hosted_urls = HostedUrls()
        step_log["hosting"] = time.monotonic() - step_start

        for step, duration in step_log.items():
            logger.info(f"Step {step} finished in {duration:.2f}s ({result.steps[step].value})")
        return result


def _completed_fields(result: PipelineResult) -> dict:
    return {
        "status": COMPLETED,
        "video_url": result.video_url,
        "script_text": result.script,
        "audio_url": result.audio_url,
        "metadata": {
            "analysis": result.analysis,
            "image_url": result.image_url,
            "hosted_urls": result.hosted_urls.model_dump(),
            "steps": {step: outcome.value for step, outcome in result.steps.items()},
            "processed_at": _utcnow().isoformat(),
        },
    }


def _failed_fields(error: str, steps: Optional[dict] = None) -> dict:
    metadata = {"error": error, "failed_at": _utcnow().isoformat()}
    if steps:
        metadata["steps"] = {step: outcome.value for step, outcome in steps.items()}
    return {"status": FAILED, "metadata": metadata}


async def run_project(
    session: AsyncSession,
    project_id: uuid.UUID,
    pipeline: ContentPipeline,
) -> PipelineResult:
    """Run the pipeline for a stored project and persist its terminal status.

    Args:
        session: Async database session for all operations
        project_id: Project to execute; must be in processing status
        pipeline: Shared pipeline instance

    Returns:
        The PipelineResult folded into the project

    Raises:
        ValueError: If project not found
        Exception: Re-raises any unexpected failure after persisting failed status

    Side effects:
        - Creates PipelineRun record with timing metadata
        - Writes the project's terminal status exactly once
    """
    project = await project_store.get_project(session, project_id)
    if project is None:
        raise ValueError(f"Project {project_id} not found")

    logger.info(f"Starting pipeline for project {project.id} ({project.type})")

    run = PipelineRun(project_id=project.id)
    session.add(run)
    await session.commit()
    await session.refresh(run)
    run_id = run.id

    pipeline_start = time.monotonic()

    try:
        result = await pipeline.run(project.prompt, project.type)

        if result.rejected:
            fields = _failed_fields(result.error, result.steps)
        else:
            fields = _completed_fields(result)
        await project_store.update_project(session, project_id, **fields)

        run.completed_at = _utcnow().replace(tzinfo=None)
        run.total_duration_seconds = time.monotonic() - pipeline_start
        run.log = {
            "steps": {step: outcome.value for step, outcome in result.steps.items()},
            "durations": result.durations,
        }
        await session.commit()

        logger.info(
            f"Pipeline for project {project.id} finished as {fields['status']} "
            f"in {run.total_duration_seconds:.2f}s"
            + (" (degraded)" if result.degraded else "")
        )
        return result

    except Exception as e:
        error = f"{type(e).__name__}: {e}"
        logger.error(f"Pipeline failed for project {project_id}: {error}")
        await session.rollback()

        # Persist failure state unless the terminal write already happened
        project = await project_store.get_project(session, project_id)
        if project is not None and not is_terminal(project.status):
            await project_store.update_project(session, project_id, **_failed_fields(error))

        run = await session.get(PipelineRun, run_id)
        if run is not None:
            run.completed_at = _utcnow().replace(tzinfo=None)
            run.total_duration_seconds = time.monotonic() - pipeline_start
            run.log = {"error": error}
            await session.commit()

        # Re-raise exception for caller to handle
        raise


def build_pipeline(settings: Settings) -> ContentPipeline:
    """Wire a pipeline against the vendor clients configured in settings."""
    return ContentPipeline(build_capabilities(settings), settings)
