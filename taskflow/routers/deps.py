"""
Shared router dependencies.

The acting user comes from the `X-User-Id` header set by the auth gateway
in front of this service; identity is not verified here.
"""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from taskflow.db.base import get_db
from taskflow.models.project import Project
from taskflow.services.projects import ProjectService


def acting_user_id(
    x_user_id: Optional[str] = Header(default=None, description="Id of the calling user."),
) -> Optional[str]:
    return x_user_id


def member_project(
    project_id: str,
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
) -> Project:
    """Load `project_id` and check the caller belongs to it (404 / 403)."""
    service = ProjectService(db)
    project = service.get_project(project_id)
    service.require_member(project, user_id)
    return project
