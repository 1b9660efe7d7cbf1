"""API route handlers."""

import logging
import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from clipforge.api.deps import SESSION_USER_KEY, current_user_id, get_pipeline
from clipforge.db import async_session
from clipforge.errors import AuthRequired, RecordNotFound
from clipforge.orchestrator.pipeline import ContentPipeline
from clipforge.orchestrator.state import PROCESSING
from clipforge.schemas.api import (
    Credentials,
    MessageResponse,
    ProcessRequest,
    ProcessResponse,
    ProjectOut,
    UserOut,
    UserResponse,
)
from clipforge.services import auth, project_store
from clipforge.workers.processing_tasks import run_project_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

@router.post("/auth/register", response_model=UserResponse)
async def register(credentials: Credentials, request: Request):
    """Create an account and start a session for it."""
    async with async_session() as session:
        user = await auth.register_user(session, credentials.email, credentials.password)
    request.session[SESSION_USER_KEY] = str(user.id)
    return UserResponse(user=UserOut.model_validate(user))


@router.post("/auth/login", response_model=UserResponse)
async def login(credentials: Credentials, request: Request):
    async with async_session() as session:
        user = await auth.authenticate(session, credentials.email, credentials.password)
    request.session[SESSION_USER_KEY] = str(user.id)
    logger.info(f"User {user.id} logged in")
    return UserResponse(user=UserOut.model_validate(user))


@router.post("/auth/logout", response_model=MessageResponse)
async def logout(request: Request):
    request.session.clear()
    return MessageResponse(message="Logged out")


@router.get("/auth/me", response_model=UserResponse)
async def me(request: Request, user_id: uuid.UUID = Depends(current_user_id)):
    async with async_session() as session:
        user = await project_store.get_user(session, user_id)
    if user is None:
        # Account vanished under a live session
        request.session.clear()
        raise AuthRequired()
    return UserResponse(user=UserOut.model_validate(user))


# ---------------------------------------------------------------------------
# Processing
# ---------------------------------------------------------------------------

@router.post("/processar", response_model=ProcessResponse)
async def process(
    body: ProcessRequest,
    background_tasks: BackgroundTasks,
    user_id: uuid.UUID = Depends(current_user_id),
    pipeline: ContentPipeline = Depends(get_pipeline),
):
    """Create a project and run the pipeline for it in the background.

    Returns immediately with the project in processing status; clients poll
    GET /api/status/{id} for the outcome.
    """
    async with async_session() as session:
        project = await project_store.create_project(session, user_id, body.type, body.prompt)

    background_tasks.add_task(run_project_task, project.id, pipeline)
    logger.info(f"Dispatched pipeline for project {project.id}")

    return ProcessResponse(
        project_id=project.id,
        status=PROCESSING,
        message="Processing started",
    )


@router.get("/status/{project_id}", response_model=ProjectOut)
async def project_status(project_id: str, user_id: uuid.UUID = Depends(current_user_id)):
    async with async_session() as session:
        project = await project_store.get_project(session, project_id)
    # Other users' projects are reported as missing
    if project is None or project.user_id != user_id:
        raise RecordNotFound("Project not found")
    return ProjectOut.from_project(project)


@router.get("/projetos/{owner_id}", response_model=list[ProjectOut])
async def list_projects(owner_id: str, user_id: uuid.UUID = Depends(current_user_id)):
    if owner_id != str(user_id):
        raise AuthRequired("Not authorized")
    async with async_session() as session:
        projects = await project_store.list_projects_by_owner(session, user_id)
    return [ProjectOut.from_project(p) for p in projects]
