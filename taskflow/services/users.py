from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from taskflow.core.errors import (
    NotificationAccessError,
    NotificationNotFoundError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from taskflow.models.notification import Notification
from taskflow.models.user import User


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def create_user(self, user_id: str, display_name: str, email: Optional[str] = None) -> User:
        if self.db.get(User, user_id) is not None:
            raise UserAlreadyExistsError(user_id)
        user = User(id=user_id, display_name=display_name, email=email, badges=[])
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_user(self, user_id: str) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def require_self(self, user_id: str, acting_user_id: Optional[str]) -> None:
        """Notifications are private: only their owner may read or change them."""
        if acting_user_id != user_id:
            raise NotificationAccessError(user_id=acting_user_id, owner_id=user_id)

    def list_notifications(
        self,
        user_id: str,
        acting_user_id: Optional[str],
        unread_only: bool = False,
    ) -> list[Notification]:
        self.get_user(user_id)
        self.require_self(user_id, acting_user_id)
        q = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            q = q.filter(Notification.read == False)  # noqa: E712
        return q.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    def mark_notification_read(
        self, notification_id: int, acting_user_id: Optional[str]
    ) -> Notification:
        notification = self.db.get(Notification, notification_id)
        if notification is None:
            raise NotificationNotFoundError(notification_id)
        self.require_self(notification.user_id, acting_user_id)
        notification.read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification
