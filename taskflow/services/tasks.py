"""
Task service: the kanban board operations that feed the automation engine.

Status changes and assignments are committed first, then reported to the
engine:

  update_task_status → TASK_STATUS_CHANGE {task_id, status, user_id=assignee, due_date}
  assign_task        → TASK_ASSIGNMENT    {task_id, assignee_id, user_id=assignee, status, due_date}

If a rule fails the engine raises after the other rules ran; the task
change itself stays committed.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from taskflow.core.errors import TaskNotFoundError, UserNotFoundError
from taskflow.models.automation_rule import TriggerType
from taskflow.models.task import Comment, Task
from taskflow.models.user import User
from taskflow.services.context import EventContext
from taskflow.services.engine import AutomationEngine, EngineResult, build_automation_engine


class TaskService:
    def __init__(self, db: Session, engine: Optional[AutomationEngine] = None):
        self.db = db
        self.engine = engine or build_automation_engine(db)

    def create_task(
        self,
        project_id: str,
        title: str,
        description: Optional[str] = None,
        status: str = "todo",
        priority: Optional[str] = None,
        assignee_id: Optional[str] = None,
        due_date: Optional[datetime] = None,
        created_by: Optional[str] = None,
    ) -> Task:
        if assignee_id is not None and self.db.get(User, assignee_id) is None:
            raise UserNotFoundError(assignee_id)
        task = Task(
            project_id=project_id,
            title=title,
            description=description,
            status=status,
            priority=priority,
            assignee_id=assignee_id,
            due_date=due_date,
            created_by=created_by,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        return task

    def get_task(self, task_id: str) -> Task:
        task = self.db.get(Task, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def list_tasks(self, project_id: str, status: Optional[str] = None) -> list[Task]:
        q = self.db.query(Task).filter(Task.project_id == project_id)
        if status:
            q = q.filter(Task.status == status)
        return q.order_by(Task.created_at, Task.id).all()

    def update_task_status(self, task_id: str, status: str) -> tuple[Task, EngineResult]:
        task = self.get_task(task_id)
        task.status = status
        self.db.commit()

        result = self.engine.check_and_trigger(
            task.project_id,
            TriggerType.TASK_STATUS_CHANGE,
            EventContext(
                task_id=task.id,
                status=status,
                user_id=task.assignee_id,
                assignee_id=task.assignee_id,
                due_date=task.due_date,
            ),
        )
        self.db.refresh(task)
        return task, result

    def assign_task(self, task_id: str, assignee_id: str) -> tuple[Task, EngineResult]:
        task = self.get_task(task_id)
        if self.db.get(User, assignee_id) is None:
            raise UserNotFoundError(assignee_id)
        task.assignee_id = assignee_id
        self.db.commit()

        result = self.engine.check_and_trigger(
            task.project_id,
            TriggerType.TASK_ASSIGNMENT,
            EventContext(
                task_id=task.id,
                assignee_id=assignee_id,
                user_id=assignee_id,
                status=task.status,
                due_date=task.due_date,
            ),
        )
        self.db.refresh(task)
        return task, result

    def add_comment(self, task_id: str, user_id: str, text: str) -> Task:
        task = self.get_task(task_id)
        task.comments.append(Comment(user_id=user_id, text=text))
        self.db.commit()
        self.db.refresh(task)
        return task

    def delete_task(self, task_id: str) -> None:
        task = self.get_task(task_id)
        self.db.delete(task)
        self.db.commit()

    def find_overdue_tasks(self, now: datetime, done_status: str) -> list[Task]:
        """Tasks whose due date is at or before `now` and that are not done."""
        return (
            self.db.query(Task)
            .filter(
                Task.due_date.is_not(None),
                Task.due_date <= now,
                Task.status != done_status,
            )
            .order_by(Task.due_date, Task.id)
            .all()
        )
