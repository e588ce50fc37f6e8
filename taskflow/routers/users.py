"""
Users router.

POST /users
GET  /users/{user_id}                 profile with badges
GET  /users/{user_id}/notifications   newest first, caller only
POST /notifications/{notification_id}/read   owner only
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from taskflow.db.base import get_db
from taskflow.models.notification import Notification
from taskflow.models.user import User
from taskflow.routers.deps import acting_user_id
from taskflow.schemas.user import (
    NotificationListResponse,
    NotificationResponse,
    UserCreate,
    UserResponse,
)
from taskflow.services.users import UserService

router = APIRouter(tags=["users"])


def _user_to_response(u: User) -> UserResponse:
    return UserResponse(
        id=u.id,
        display_name=u.display_name,
        email=u.email,
        badges=list(u.badges or []),
    )


def _notification_to_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=n.id,
        user_id=n.user_id,
        message=n.message,
        read=n.read,
        created_at=n.created_at.isoformat() if n.created_at else "",
    )


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
    responses={409: {"description": "A user with this id already exists."}},
)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    user = UserService(db).create_user(payload.id, payload.display_name, payload.email)
    return _user_to_response(user)


@router.get("/users/{user_id}", response_model=UserResponse, summary="Get a user and their badges")
def get_user(user_id: str, db: Session = Depends(get_db)):
    return _user_to_response(UserService(db).get_user(user_id))


@router.get(
    "/users/{user_id}/notifications",
    response_model=NotificationListResponse,
    summary="List a user's notifications (newest first)",
)
def list_notifications(
    user_id: str,
    unread_only: bool = Query(default=False),
    caller_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    items = service.list_notifications(user_id, caller_id, unread_only=unread_only)
    return NotificationListResponse(
        total=len(items),
        unread=sum(1 for n in items if not n.read),
        items=[_notification_to_response(n) for n in items],
    )


@router.post(
    "/notifications/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark a notification as read",
)
def mark_read(
    notification_id: int,
    caller_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    notification = UserService(db).mark_notification_read(notification_id, caller_id)
    return _notification_to_response(notification)
