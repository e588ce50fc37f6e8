"""
Tests for the action executor and stored-action parsing.
"""
import pytest

from taskflow.core.errors import (
    MalformedRuleError,
    MissingContextError,
    TaskNotFoundError,
    UserNotFoundError,
)
from taskflow.models import Notification, Task, User
from taskflow.schemas.automation import (
    AssignBadgeAction,
    ChangeStatusAction,
    SendNotificationAction,
)
from taskflow.services.actions import ActionExecutor, parse_action
from taskflow.services.context import EventContext


class TestParseAction:
    def test_assign_badge(self):
        action = parse_action("ASSIGN_BADGE", {"badge_id": "finisher"})
        assert isinstance(action, AssignBadgeAction)
        assert action.params.badge_id == "finisher"

    def test_change_status(self):
        action = parse_action("CHANGE_STATUS", {"new_status": "in-progress"})
        assert isinstance(action, ChangeStatusAction)

    def test_send_notification(self):
        action = parse_action("SEND_NOTIFICATION", {"notification_message": "Task overdue"})
        assert isinstance(action, SendNotificationAction)

    def test_missing_required_param(self):
        with pytest.raises(MalformedRuleError) as exc_info:
            parse_action("ASSIGN_BADGE", {"new_status": "Done"}, rule_id="r1")
        assert exc_info.value.details["rule_id"] == "r1"
        assert "badge_id" in exc_info.value.message

    def test_none_params(self):
        with pytest.raises(MalformedRuleError):
            parse_action("SEND_NOTIFICATION", None)

    def test_unknown_action_type(self):
        with pytest.raises(MalformedRuleError) as exc_info:
            parse_action("DELETE_EVERYTHING", {})
        assert "Unknown action type" in exc_info.value.message


class TestAssignBadge:
    def test_badge_added_once(self, db, make_user):
        make_user("u1")
        executor = ActionExecutor(db)
        action = AssignBadgeAction(params={"badge_id": "completed-task"})

        executor.execute(action, EventContext(user_id="u1"))
        db.commit()
        assert db.get(User, "u1").badges == ["completed-task"]

        executor.execute(action, EventContext(user_id="u1"))
        db.commit()
        assert db.get(User, "u1").badges == ["completed-task"]

    def test_returns_whether_badge_was_new(self, db, make_user):
        make_user("u1", badges=["early-bird"])
        executor = ActionExecutor(db)
        assert executor.assign_badge("u1", "finisher") is True
        assert executor.assign_badge("u1", "finisher") is False
        assert executor.assign_badge("u1", "early-bird") is False
        db.commit()
        assert db.get(User, "u1").badges == ["early-bird", "finisher"]

    def test_unknown_user(self, db):
        with pytest.raises(UserNotFoundError):
            ActionExecutor(db).execute(
                AssignBadgeAction(params={"badge_id": "x"}), EventContext(user_id="ghost")
            )

    def test_missing_user_in_context(self, db):
        with pytest.raises(MissingContextError) as exc_info:
            ActionExecutor(db).execute(
                AssignBadgeAction(params={"badge_id": "x"}), EventContext(task_id="t1")
            )
        assert exc_info.value.details["field"] == "user_id"


class TestChangeStatus:
    def test_status_updated(self, db, make_user, make_project, make_task):
        make_user("u1")
        project = make_project("u1")
        task = make_task(project.id, status="todo")

        ActionExecutor(db).execute(
            ChangeStatusAction(params={"new_status": "in-progress"}),
            EventContext(task_id=task.id),
        )
        db.commit()
        db.expire_all()
        assert db.get(Task, task.id).status == "in-progress"

    def test_unknown_task(self, db):
        with pytest.raises(TaskNotFoundError):
            ActionExecutor(db).execute(
                ChangeStatusAction(params={"new_status": "Done"}), EventContext(task_id="nope")
            )

    def test_missing_task_in_context(self, db):
        with pytest.raises(MissingContextError):
            ActionExecutor(db).execute(
                ChangeStatusAction(params={"new_status": "Done"}), EventContext(user_id="u1")
            )


class TestSendNotification:
    def test_creates_one_unread_notification(self, db, make_user):
        make_user("u1")
        ActionExecutor(db).execute(
            SendNotificationAction(params={"notification_message": "Task overdue"}),
            EventContext(user_id="u1"),
        )
        db.commit()

        rows = db.query(Notification).filter(Notification.user_id == "u1").all()
        assert len(rows) == 1
        assert rows[0].message == "Task overdue"
        assert rows[0].read is False
        assert rows[0].created_at is not None

    def test_unknown_user(self, db):
        with pytest.raises(UserNotFoundError):
            ActionExecutor(db).send_notification("ghost", "hello")
