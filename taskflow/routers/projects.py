"""
Projects router.

POST   /projects
GET    /projects
GET    /projects/{project_id}
DELETE /projects/{project_id}
POST   /projects/{project_id}/members
DELETE /projects/{project_id}/members/{member_id}
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskflow.core.errors import UnauthorizedError
from taskflow.db.base import get_db
from taskflow.models.project import Project
from taskflow.routers.deps import acting_user_id, member_project
from taskflow.schemas.project import MemberAdd, ProjectCreate, ProjectResponse
from taskflow.services.projects import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


def _project_to_response(p: Project) -> ProjectResponse:
    return ProjectResponse(
        id=p.id,
        name=p.name,
        description=p.description,
        owner_id=p.owner_id,
        members=sorted(p.member_ids()),
        created_at=p.created_at.isoformat() if p.created_at else "",
    )


def _require_owner(project: Project, user_id: Optional[str]) -> None:
    if user_id != project.owner_id:
        raise UnauthorizedError(user_id=user_id, project_id=project.id)


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project owned by the caller",
)
def create_project(
    payload: ProjectCreate,
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    service = ProjectService(db)
    if not user_id:
        raise UnauthorizedError(user_id=None, project_id="<new>")
    project = service.create_project(user_id, payload.name, payload.description)
    return _project_to_response(project)


@router.get("", response_model=list[ProjectResponse], summary="Projects the caller can access")
def list_projects(
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    if not user_id:
        return []
    return [_project_to_response(p) for p in ProjectService(db).list_projects_for_user(user_id)]


@router.get("/{project_id}", response_model=ProjectResponse, summary="Get a project")
def get_project(project: Project = Depends(member_project)):
    return _project_to_response(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a project with its tasks and automation rules (owner only)",
)
def delete_project(
    project: Project = Depends(member_project),
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    _require_owner(project, user_id)
    ProjectService(db).delete_project(project.id)


@router.post(
    "/{project_id}/members",
    response_model=ProjectResponse,
    summary="Add a member (owner only)",
)
def add_member(
    payload: MemberAdd,
    project: Project = Depends(member_project),
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    _require_owner(project, user_id)
    return _project_to_response(ProjectService(db).add_member(project.id, payload.user_id))


@router.delete(
    "/{project_id}/members/{member_id}",
    response_model=ProjectResponse,
    summary="Remove a member (owner only)",
)
def remove_member(
    member_id: str,
    project: Project = Depends(member_project),
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    _require_owner(project, user_id)
    return _project_to_response(ProjectService(db).remove_member(project.id, member_id))
