"""
Project service: projects, membership, and the access check the HTTP
layer runs before touching a project's tasks or rules.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from taskflow.core.errors import ProjectNotFoundError, UnauthorizedError, UserNotFoundError
from taskflow.models.project import Project, ProjectMember
from taskflow.models.task import Task
from taskflow.models.user import User
from taskflow.services.rule_store import RuleStore


class ProjectService:
    def __init__(self, db: Session):
        self.db = db

    def create_project(
        self, owner_id: str, name: str, description: Optional[str] = None
    ) -> Project:
        if self.db.get(User, owner_id) is None:
            raise UserNotFoundError(owner_id)
        project = Project(name=name, description=description, owner_id=owner_id)
        self.db.add(project)
        self.db.commit()
        self.db.refresh(project)
        return project

    def get_project(self, project_id: str) -> Project:
        project = self.db.get(Project, project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def list_projects_for_user(self, user_id: str) -> list[Project]:
        member_of = (
            self.db.query(ProjectMember.project_id)
            .filter(ProjectMember.user_id == user_id)
        )
        return (
            self.db.query(Project)
            .filter((Project.owner_id == user_id) | Project.id.in_(member_of))
            .order_by(Project.created_at)
            .all()
        )

    def require_member(self, project: Project, user_id: Optional[str]) -> None:
        """Raise UnauthorizedError unless `user_id` owns or belongs to `project`."""
        if user_id and (user_id == project.owner_id or user_id in project.member_ids()):
            return
        raise UnauthorizedError(user_id=user_id, project_id=project.id)

    def add_member(self, project_id: str, user_id: str) -> Project:
        project = self.get_project(project_id)
        if self.db.get(User, user_id) is None:
            raise UserNotFoundError(user_id)
        if user_id != project.owner_id and user_id not in project.member_ids():
            project.members.append(ProjectMember(user_id=user_id))
            self.db.commit()
            self.db.refresh(project)
        return project

    def remove_member(self, project_id: str, user_id: str) -> Project:
        project = self.get_project(project_id)
        project.members = [m for m in project.members if m.user_id != user_id]
        self.db.commit()
        self.db.refresh(project)
        return project

    def delete_project(self, project_id: str) -> None:
        """Delete a project with its tasks and automation rules."""
        project = self.get_project(project_id)
        RuleStore(self.db).delete_project_rules(project_id, commit=False)
        for task in self.db.query(Task).filter(Task.project_id == project_id).all():
            self.db.delete(task)
        self.db.delete(project)
        self.db.commit()
