"""Background processing tasks for the content pipeline.

Runs are dispatched fire-and-forget from the API, so progress is tracked in
memory only; a process restart loses in-flight runs, which the orphan sweep
then marks as failed.
"""

import logging
import uuid
from datetime import datetime, timezone

from clipforge.db import async_session
from clipforge.orchestrator.pipeline import ContentPipeline, run_project
from clipforge.orchestrator.state import COMPLETED, FAILED, PROCESSING
from clipforge.services import project_store

logger = logging.getLogger(__name__)

ORPHANED_RUN_ERROR = "Processing interrupted by a server restart"

# Module-level dict for in-memory progress tracking
TASK_STATUS: dict[str, dict] = {}


async def run_project_task(project_id: uuid.UUID, pipeline: ContentPipeline) -> None:
    """Run the pipeline for a project in the background.

    Errors are logged, never raised: there is no caller left to receive them.

    Args:
        project_id: Project UUID
        pipeline: Shared pipeline instance
    """
    task_id = f"project_{project_id}"
    TASK_STATUS[task_id] = {"status": PROCESSING, "started_at": datetime.now(timezone.utc).isoformat()}

    try:
        async with async_session() as session:
            result = await run_project(session, project_id, pipeline)
        TASK_STATUS[task_id] = {
            "status": FAILED if result.rejected else COMPLETED,
            "steps": {step: outcome.value for step, outcome in result.steps.items()},
        }
    except Exception as e:
        logger.error(f"Pipeline task failed for {project_id}: {e}", exc_info=True)
        TASK_STATUS[task_id] = {"status": "error", "error": str(e)}


async def fail_orphaned_projects() -> int:
    """Mark every project stuck in processing as failed.

    Only safe at startup, before this process has dispatched any run, and
    only with a single API process: runs in flight in other workers would
    be failed too.

    Returns:
        Number of projects marked failed
    """
    failed_at = datetime.now(timezone.utc).isoformat()
    async with async_session() as session:
        orphans = await project_store.list_projects_by_status(session, PROCESSING)
        for project in orphans:
            await project_store.update_project(
                session,
                project.id,
                status=FAILED,
                metadata={"error": ORPHANED_RUN_ERROR, "failed_at": failed_at},
            )
    if orphans:
        logger.warning(f"Marked {len(orphans)} orphaned project(s) as failed")
    return len(orphans)
