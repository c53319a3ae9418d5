"""Project Routes - innovation listings, owner edits and admin moderation.

Invariants:
    - GET /api/projects lists approved projects only; owners see their own
      (any status) under /api/projects/my
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.api.dependencies import get_current_user, require_admin
from qipad.infrastructure.database import get_db
from qipad.models.user import User
from qipad.schemas.marketplace import (
    ProjectCreate, ProjectResponse, ProjectStatusUpdate, ProjectUpdate,
)
from qipad.services.marketplace_service import ProjectService

router = APIRouter(prefix="/api", tags=["projects"])


@router.get("/projects", response_model=list[ProjectResponse])
async def list_projects(db: AsyncSession = Depends(get_db)):
    return await ProjectService(db).list_approved()


@router.get("/projects/my", response_model=list[ProjectResponse])
async def my_projects(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    return await ProjectService(db).list_for_owner(user.id)


@router.get("/projects/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: UUID, db: AsyncSession = Depends(get_db)):
    return await ProjectService(db).get(project_id)


@router.post("/projects", response_model=ProjectResponse)
async def create_project(
    body: ProjectCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectService(db).create(user, body)


@router.put("/projects/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID,
    body: ProjectUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectService(db).update(project_id, user, body)


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await ProjectService(db).delete(project_id, user)
    return {"message": "Project deleted successfully"}


@router.put("/admin/projects/{project_id}/status", response_model=ProjectResponse)
async def moderate_project(
    project_id: UUID,
    body: ProjectStatusUpdate,
    _admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ProjectService(db).set_status(project_id, body.status)
