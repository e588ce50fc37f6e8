"""
Action executor: the side effect of a matched automation rule.

  ASSIGN_BADGE       add params.badge_id to user context.user_id (set union)
  CHANGE_STATUS      set task context.task_id to params.new_status
  SEND_NOTIFICATION  create Notification(user_id=context.user_id,
                     message=params.notification_message, read=False)

CHANGE_STATUS writes the status directly. It does not go back through the
engine, so a status set by a rule never fires TASK_STATUS_CHANGE rules.

The executor only flushes; the engine owns commit / rollback.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Union

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from taskflow.core.errors import (
    MalformedRuleError,
    MissingContextError,
    TaskNotFoundError,
    UserNotFoundError,
)
from taskflow.models.automation_rule import ActionType
from taskflow.models.notification import Notification
from taskflow.models.task import Task
from taskflow.models.user import User
from taskflow.schemas.automation import (
    AssignBadgeAction,
    ChangeStatusAction,
    RuleAction,
    SendNotificationAction,
)
from taskflow.services.context import EventContext

logger = logging.getLogger(__name__)

Action = Union[AssignBadgeAction, ChangeStatusAction, SendNotificationAction]

_action_adapter: TypeAdapter[Action] = TypeAdapter(RuleAction)


def parse_action(
    action_type: str,
    params: Optional[dict[str, Any]],
    rule_id: Optional[str] = None,
) -> Action:
    """Turn stored (action_type, action_params) columns into a typed action.

    Raises MalformedRuleError for an unknown type or missing params.
    """
    if action_type not in {t.value for t in ActionType}:
        raise MalformedRuleError(message=f"Unknown action type {action_type!r}", rule_id=rule_id)
    try:
        return _action_adapter.validate_python({"type": action_type, "params": params or {}})
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise MalformedRuleError(
            message=f"Invalid action {action_type!r}: {problems}",
            rule_id=rule_id,
        ) from exc


class ActionExecutor:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, action: Action, context: EventContext) -> None:
        if isinstance(action, AssignBadgeAction):
            self.assign_badge(
                _require(context.user_id, "user_id", action.type),
                action.params.badge_id,
            )
        elif isinstance(action, ChangeStatusAction):
            self.change_task_status(
                _require(context.task_id, "task_id", action.type),
                action.params.new_status,
            )
        elif isinstance(action, SendNotificationAction):
            self.send_notification(
                _require(context.user_id, "user_id", action.type),
                action.params.notification_message,
            )
        else:
            raise MalformedRuleError(message=f"Unsupported action: {action!r}")

    # -----------------------------------------------------------------------
    # Individual actions
    # -----------------------------------------------------------------------

    def assign_badge(self, user_id: str, badge_id: str) -> bool:
        """Returns True if the badge was added, False if the user already had it."""
        user = self.db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        badges = list(user.badges or [])
        if badge_id in badges:
            return False
        # Reassign so the JSON column is marked dirty.
        user.badges = badges + [badge_id]
        self.db.flush()
        logger.info(f"Badge {badge_id!r} assigned to user {user_id}")
        return True

    def change_task_status(self, task_id: str, new_status: str) -> None:
        task = self.db.get(Task, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        old_status = task.status
        task.status = new_status
        self.db.flush()
        logger.info(f"Task {task_id} status {old_status!r} -> {new_status!r} by automation")

    def send_notification(self, user_id: str, message: str) -> Notification:
        if self.db.get(User, user_id) is None:
            raise UserNotFoundError(user_id)
        notification = Notification(user_id=user_id, message=message, read=False)
        self.db.add(notification)
        self.db.flush()
        return notification


def _require(value: Optional[str], field: str, action_type: str) -> str:
    if not value:
        raise MissingContextError(field=field, action_type=action_type)
    return value
