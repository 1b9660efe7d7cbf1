"""Render polling loop for the video assembly step.

A submitted job is polled at a fixed interval until the assembler reports
"succeeded" or "failed", or the attempt budget runs out. The whole wait is
also capped by a wall-clock deadline, since each status request may retry
on its own. The wait blocks the pipeline run only; runs execute as
background tasks.
"""

import asyncio
import logging
from typing import Optional

from clipforge.errors import RenderFailed, RenderTimeout
from clipforge.orchestrator.state import RENDER_FAILED, RENDER_SUCCEEDED
from clipforge.services.base import VideoAssembler

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_MAX_ATTEMPTS = 30
# Extra wall-clock allowance on top of max_attempts * interval
DEADLINE_SLACK = 30.0


async def _poll(assembler: VideoAssembler, job_id: str, interval: float, max_attempts: int) -> str:
    for attempt in range(1, max_attempts + 1):
        status = await assembler.status(job_id)

        if status.status == RENDER_SUCCEEDED:
            if not status.url:
                raise RenderFailed(job_id, "succeeded without an output url")
            logger.info(f"Render {job_id} succeeded after {attempt} poll(s)")
            return status.url

        if status.status == RENDER_FAILED:
            raise RenderFailed(job_id, status.error or "render reported failure")

        logger.debug(f"Render {job_id} is {status.status} (poll {attempt}/{max_attempts})")
        if attempt < max_attempts:
            await asyncio.sleep(interval)

    raise RenderTimeout(job_id, max_attempts, interval)


async def wait_for_render(
    assembler: VideoAssembler,
    job_id: str,
    *,
    interval: float = DEFAULT_POLL_INTERVAL,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    deadline: Optional[float] = None,
) -> str:
    """Poll a render job until it reaches a terminal state.

    Args:
        assembler: Capability that accepted the job
        job_id: Id returned by assembler.submit()
        interval: Seconds between polls
        max_attempts: Poll budget; total wait is about max_attempts * interval
        deadline: Wall-clock cap in seconds for the whole wait, including
            slow status requests. Defaults to
            max_attempts * interval + DEADLINE_SLACK.

    Returns:
        URL of the rendered video

    Raises:
        RenderFailed: The job reported failure, or succeeded without a URL
        RenderTimeout: The budget or the deadline was exhausted before a
            terminal status
        UpstreamUnavailable: A status request itself failed
    """
    if deadline is None:
        deadline = max_attempts * interval + DEADLINE_SLACK
    try:
        async with asyncio.timeout(deadline):
            return await _poll(assembler, job_id, interval, max_attempts)
    except TimeoutError as e:
        logger.warning(f"Render {job_id} exceeded the {deadline:.0f}s polling deadline")
        raise RenderTimeout(job_id, max_attempts, interval) from e
