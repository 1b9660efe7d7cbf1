"""
Project record store: users and generation projects.

All functions accept an AsyncSession parameter; writes are committed before
returning so a background pipeline and a polling request never observe a
half-applied update.
"""
import logging
import uuid
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clipforge.db.models import Project, User
from clipforge.orchestrator.state import PROCESSING, check_transition

logger = logging.getLogger(__name__)

IdLike = Union[uuid.UUID, str]

# Fields update_project accepts; ownership and identity are immutable
UPDATABLE_FIELDS = {"status", "video_url", "script_text", "audio_url", "metadata"}


def _coerce_id(value: IdLike) -> Optional[uuid.UUID]:
    """Parse an id from a path parameter; malformed ids yield None."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

async def create_user(session: AsyncSession, email: str, password_hash: str) -> User:
    """Create a user. Caller checks for duplicates first."""
    user = User(email=normalize_email(email), password_hash=password_hash)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    logger.info("Created user %s", user.id)
    return user


async def get_user(session: AsyncSession, user_id: IdLike) -> Optional[User]:
    uid = _coerce_id(user_id)
    if uid is None:
        return None
    return await session.get(User, uid)


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(
        select(User).where(User.email == normalize_email(email))
    )
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

async def create_project(
    session: AsyncSession,
    owner_id: IdLike,
    content_type: str,
    prompt: str,
) -> Project:
    """Create a project in processing status.

    Args:
        session: Active database session
        owner_id: Owning user id
        content_type: Content category as submitted (e.g. "tiktok")
        prompt: User prompt

    Returns:
        Created Project instance

    Raises:
        ValueError: If owner_id is not a valid id
    """
    uid = _coerce_id(owner_id)
    if uid is None:
        raise ValueError(f"Invalid owner id: {owner_id}")

    project = Project(
        user_id=uid,
        type=content_type,
        prompt=prompt,
        status=PROCESSING,
    )
    session.add(project)
    await session.commit()
    await session.refresh(project)
    logger.info(f"Created project {project.id} ({content_type}) for user {uid}")
    return project


async def get_project(session: AsyncSession, project_id: IdLike) -> Optional[Project]:
    pid = _coerce_id(project_id)
    if pid is None:
        return None
    return await session.get(Project, pid)


async def list_projects_by_owner(session: AsyncSession, owner_id: IdLike) -> list[Project]:
    """List a user's projects in creation order."""
    uid = _coerce_id(owner_id)
    if uid is None:
        return []
    result = await session.execute(
        select(Project)
        .where(Project.user_id == uid)
        .order_by(Project.created_at, Project.id)
    )
    return list(result.scalars().all())


async def list_projects_by_status(session: AsyncSession, status: str) -> list[Project]:
    result = await session.execute(
        select(Project).where(Project.status == status).order_by(Project.created_at)
    )
    return list(result.scalars().all())


async def update_project(
    session: AsyncSession,
    project_id: IdLike,
    **fields,
) -> Optional[Project]:
    """Partially update a project.

    Only the given fields change. ``metadata`` is merged key-wise into the
    stored map rather than replacing it. A status change must be allowed by
    the project state machine.

    Args:
        session: Active database session
        project_id: Project to update
        **fields: Any of status, video_url, script_text, audio_url, metadata

    Returns:
        Updated Project, or None if it does not exist

    Raises:
        ValueError: If an unknown or immutable field is given
        InvalidTransition: If the status change is not allowed
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update project fields: {sorted(unknown)}")

    project = await get_project(session, project_id)
    if project is None:
        return None

    if "status" in fields:
        check_transition(project.status, fields["status"])
        project.status = fields["status"]

    for name in ("video_url", "script_text", "audio_url"):
        if name in fields:
            setattr(project, name, fields[name])

    if "metadata" in fields and fields["metadata"] is not None:
        merged = dict(project.metadata_json or {})
        merged.update(fields["metadata"])
        project.metadata_json = merged

    await session.commit()
    await session.refresh(project)
    return project
