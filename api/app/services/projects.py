"""Project service. Every operation is scoped to the owning principal.

Read, update and delete resolve in a fixed order: a project that does not
exist is ``NotFoundError`` for every caller; a project that exists but is
owned by someone else is ``ForbiddenError``.

Update and delete run as a single conditional statement
(``WHERE id = ? AND owner_id = ?``). Only when that statement matches no row
is the project re-read to tell the two failures apart, so a concurrent
ownership change or delete cannot slip between the check and the write.
"""

from __future__ import annotations

import uuid

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenError, NotFoundError
from app.core.logging import get_logger
from app.models.models import Incident, Project
from app.services.repository import Repository, parse_id

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("name", "description")
NULLABLE_FIELDS = ("description",)


async def _raise_for_missing_or_foreign(repo: Repository[Project], project_id: uuid.UUID | str) -> None:
    project = await repo.find_by_id(project_id)
    if project is None:
        raise NotFoundError("Project not found")
    raise ForbiddenError("Access denied")


async def create_project(db: AsyncSession, data: dict, owner_id: uuid.UUID) -> Project:
    project = await Repository(db, Project).create(
        name=data["name"],
        description=data.get("description"),
        owner_id=owner_id,
    )
    logger.info("project_created", project_id=str(project.id), owner_id=str(owner_id))
    return project


async def list_projects(db: AsyncSession, owner_id: uuid.UUID) -> list[Project]:
    """Projects owned by ``owner_id``, newest first, with their incidents loaded."""
    return await Repository(db, Project).find_many(
        Project.owner_id == owner_id,
        order_by=Project.created_at.desc(),
    )


async def get_project(db: AsyncSession, project_id: uuid.UUID | str, caller_id: uuid.UUID) -> Project:
    project = await Repository(db, Project).find_by_id(project_id)
    if project is None:
        raise NotFoundError("Project not found")
    if project.owner_id != caller_id:
        raise ForbiddenError("Access denied")
    return project


async def update_project(
    db: AsyncSession,
    project_id: uuid.UUID | str,
    patch: dict,
    caller_id: uuid.UUID,
) -> Project:
    """Apply a partial patch of name and/or description. ``owner_id`` is never patchable.

    An explicit ``None`` description clears it; ``name`` is required and a ``None`` is ignored.
    """
    repo = Repository(db, Project)
    values = {
        k: v for k, v in patch.items()
        if k in UPDATABLE_FIELDS and (v is not None or k in NULLABLE_FIELDS)
    }

    if values:
        matched = await repo.update_by_id(project_id, values, Project.owner_id == caller_id)
        if not matched:
            await _raise_for_missing_or_foreign(repo, project_id)
        logger.info("project_updated", project_id=str(project_id), fields=list(values))
        project = await repo.find_by_id(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    # Empty patch: nothing to write, the ownership rules still apply.
    return await get_project(db, project_id, caller_id)


async def delete_project(db: AsyncSession, project_id: uuid.UUID | str, caller_id: uuid.UUID) -> dict:
    """Delete an owned project. Its incidents are kept and detached (``project_id`` set to NULL)."""
    repo = Repository(db, Project)
    pid = parse_id(project_id)

    deleted = await repo.delete_by_id(project_id, Project.owner_id == caller_id)
    if not deleted:
        await _raise_for_missing_or_foreign(repo, project_id)

    await db.execute(
        update(Incident)
        .where(Incident.project_id == pid)
        .values(project_id=None)
        .execution_options(synchronize_session=False)
    )
    logger.info("project_deleted", project_id=str(pid), owner_id=str(caller_id))
    return {"message": "Project deleted successfully"}


async def delete_projects_for_owner(db: AsyncSession, owner_id: uuid.UUID) -> int:
    """Remove every project of ``owner_id``, detaching their incidents first."""
    projects = await list_projects(db, owner_id)
    for project in projects:
        await delete_project(db, project.id, owner_id)
    return len(projects)
