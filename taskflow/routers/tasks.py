"""
Tasks router.

GET    /projects/{project_id}/tasks     board: tasks grouped by status
POST   /projects/{project_id}/tasks
GET    /tasks/{task_id}
DELETE /tasks/{task_id}
PATCH  /tasks/{task_id}/status          fires TASK_STATUS_CHANGE automations
PATCH  /tasks/{task_id}/assignee        fires TASK_ASSIGNMENT automations
POST   /tasks/{task_id}/comments
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from taskflow.db.base import get_db
from taskflow.models.project import Project
from taskflow.models.task import Task
from taskflow.routers.deps import acting_user_id, member_project
from taskflow.schemas.task import (
    BoardColumn,
    CommentCreate,
    CommentResponse,
    TaskAssign,
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskStatusUpdate,
)
from taskflow.services.projects import ProjectService
from taskflow.services.tasks import TaskService

router = APIRouter(tags=["tasks"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _task_to_response(t: Task) -> TaskResponse:
    return TaskResponse(
        id=t.id,
        project_id=t.project_id,
        title=t.title,
        description=t.description,
        status=t.status,
        priority=t.priority,
        assignee_id=t.assignee_id,
        due_date=t.due_date.isoformat() if t.due_date else None,
        comments=[
            CommentResponse(
                id=c.id,
                user_id=c.user_id,
                text=c.text,
                created_at=c.created_at.isoformat() if c.created_at else "",
            )
            for c in t.comments
        ],
        created_at=t.created_at.isoformat() if t.created_at else "",
    )


def _member_task(task_id: str, user_id: Optional[str], db: Session) -> Task:
    task = TaskService(db).get_task(task_id)
    projects = ProjectService(db)
    projects.require_member(projects.get_project(task.project_id), user_id)
    return task


# ---------------------------------------------------------------------------
# Project-scoped
# ---------------------------------------------------------------------------

@router.get(
    "/projects/{project_id}/tasks",
    response_model=TaskListResponse,
    summary="List a project's tasks as kanban columns",
)
def list_tasks(
    task_status: Optional[str] = Query(
        default=None, alias="status", description="Only tasks in this column."
    ),
    project: Project = Depends(member_project),
    db: Session = Depends(get_db),
):
    tasks = TaskService(db).list_tasks(project.id, status=task_status)
    items = [_task_to_response(t) for t in tasks]

    columns: dict[str, list[TaskResponse]] = {}
    for item in items:
        columns.setdefault(item.status, []).append(item)

    return TaskListResponse(
        total=len(items),
        items=items,
        columns=[BoardColumn(status=s, tasks=ts) for s, ts in columns.items()],
    )


@router.post(
    "/projects/{project_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
def create_task(
    payload: TaskCreate,
    project: Project = Depends(member_project),
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    task = TaskService(db).create_task(
        project_id=project.id,
        title=payload.title,
        description=payload.description,
        status=payload.status,
        priority=payload.priority,
        assignee_id=payload.assignee_id,
        due_date=payload.due_date,
        created_by=user_id,
    )
    return _task_to_response(task)


# ---------------------------------------------------------------------------
# Task-scoped
# ---------------------------------------------------------------------------

@router.get("/tasks/{task_id}", response_model=TaskResponse, summary="Get a task")
def get_task(
    task_id: str,
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    return _task_to_response(_member_task(task_id, user_id, db))


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
)
def delete_task(
    task_id: str,
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    task = _member_task(task_id, user_id, db)
    TaskService(db).delete_task(task.id)


@router.patch(
    "/tasks/{task_id}/status",
    response_model=TaskResponse,
    summary="Move a task to another column",
    responses={
        500: {"description": "Status saved, but one or more automation rules failed."},
    },
)
def update_task_status(
    task_id: str,
    payload: TaskStatusUpdate,
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    """
    Set the task's status, then run the project's `TASK_STATUS_CHANGE` rules.

    The response reflects the task after automations ran. A status set by a
    `CHANGE_STATUS` action does not trigger further rules.
    """
    task = _member_task(task_id, user_id, db)
    task, _ = TaskService(db).update_task_status(task.id, payload.status)
    return _task_to_response(task)


@router.patch(
    "/tasks/{task_id}/assignee",
    response_model=TaskResponse,
    summary="Assign a task",
    responses={
        500: {"description": "Assignment saved, but one or more automation rules failed."},
    },
)
def assign_task(
    task_id: str,
    payload: TaskAssign,
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    """Set the assignee, then run the project's `TASK_ASSIGNMENT` rules."""
    task = _member_task(task_id, user_id, db)
    task, _ = TaskService(db).assign_task(task.id, payload.assignee_id)
    return _task_to_response(task)


@router.post(
    "/tasks/{task_id}/comments",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a task",
)
def add_comment(
    task_id: str,
    payload: CommentCreate,
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    task = _member_task(task_id, user_id, db)
    return _task_to_response(TaskService(db).add_comment(task.id, user_id, payload.text))
