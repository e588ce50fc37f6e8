"""
Task / kanban schemas.

POST  /projects/{project_id}/tasks  → TaskCreate       → TaskResponse
PATCH /tasks/{task_id}/status       → TaskStatusUpdate → TaskResponse
PATCH /tasks/{task_id}/assignee     → TaskAssign       → TaskResponse
POST  /tasks/{task_id}/comments     → CommentCreate    → TaskResponse
"""
from datetime import datetime
from typing import Annotated, Optional
from pydantic import BaseModel, Field


class TaskCreate(BaseModel):
    title: Annotated[str, Field(min_length=1, max_length=256)]
    description: Optional[str] = None
    status: Annotated[str, Field(min_length=1, max_length=64)] = "todo"
    priority: Optional[str] = Field(default=None, examples=["high"])
    assignee_id: Optional[str] = None
    due_date: Optional[datetime] = Field(
        default=None,
        description="Deadline. Once passed, DUE_DATE_PASSED rules fire on every scan.",
    )


class TaskStatusUpdate(BaseModel):
    status: Annotated[str, Field(min_length=1, max_length=64, examples=["in-progress"])]


class TaskAssign(BaseModel):
    assignee_id: Annotated[str, Field(min_length=1, max_length=128)]


class CommentCreate(BaseModel):
    text: Annotated[str, Field(min_length=1, max_length=10_000)]


class CommentResponse(BaseModel):
    id: int
    user_id: str
    text: str
    created_at: str


class TaskResponse(BaseModel):
    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    status: str
    priority: Optional[str] = None
    assignee_id: Optional[str] = None
    due_date: Optional[str] = None
    comments: list[CommentResponse] = Field(default_factory=list)
    created_at: str


class BoardColumn(BaseModel):
    status: str
    tasks: list[TaskResponse]


class TaskListResponse(BaseModel):
    total: int
    items: list[TaskResponse]
    columns: list[BoardColumn] = Field(
        description="Tasks grouped by status, one column per distinct status."
    )
