from typing import Annotated, Optional
from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    id: Annotated[str, Field(min_length=1, max_length=128)]
    display_name: Annotated[str, Field(min_length=1, max_length=256)]
    email: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    display_name: str
    email: Optional[str] = None
    badges: list[str]


class NotificationResponse(BaseModel):
    id: int
    user_id: str
    message: str
    read: bool
    created_at: str


class NotificationListResponse(BaseModel):
    total: int
    unread: int
    items: list[NotificationResponse]
