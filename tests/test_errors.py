"""
Tests for error handling: the custom exception classes and the structured
error responses they produce.
"""
from taskflow.core.errors import (
    AutomationExecutionError,
    MalformedRuleError,
    MissingContextError,
    NotificationAccessError,
    RuleNotFoundError,
    TaskNotFoundError,
    UnauthorizedError,
    UserAlreadyExistsError,
)


# ---------------------------------------------------------------------------
# Unit tests on exception classes
# ---------------------------------------------------------------------------

class TestExceptionClasses:
    def test_task_not_found(self):
        err = TaskNotFoundError("t1")
        assert err.http_status == 404
        assert err.code == "TASK_NOT_FOUND"
        assert err.message == "Task t1 not found."
        assert err.to_dict()["details"] == {"resource": "task", "id": "t1"}

    def test_rule_not_found_message(self):
        assert RuleNotFoundError("r9").message == "Automation rule r9 not found."

    def test_unauthorized(self):
        err = UnauthorizedError(user_id=None, project_id="p1")
        assert err.http_status == 403
        assert "<anonymous>" in err.message
        assert err.details == {"user_id": None, "project_id": "p1"}

    def test_notification_access(self):
        err = NotificationAccessError(user_id="bob", owner_id="alice")
        assert err.http_status == 403
        assert err.code == "UNAUTHORIZED"
        assert err.details == {"user_id": "bob", "owner_id": "alice"}

    def test_user_already_exists(self):
        err = UserAlreadyExistsError("alice")
        assert err.http_status == 409
        assert err.details["id"] == "alice"

    def test_malformed_rule_without_rule_id(self):
        err = MalformedRuleError("bad params")
        assert err.http_status == 422
        # details should not be in dict when empty
        assert "details" not in err.to_dict()

    def test_malformed_rule_with_rule_id(self):
        assert MalformedRuleError("bad", rule_id="r1").to_dict()["details"] == {"rule_id": "r1"}

    def test_missing_context(self):
        err = MissingContextError(field="user_id", action_type="ASSIGN_BADGE")
        assert err.code == "MISSING_CONTEXT"
        assert "user_id" in err.message
        assert "ASSIGN_BADGE" in err.message

    def test_automation_execution_error(self):
        failures = [{"rule_id": "r1", "code": "TASK_NOT_FOUND", "message": "Task t1 not found."}]
        err = AutomationExecutionError("p1", "TASK_STATUS_CHANGE", failures)
        assert err.http_status == 500
        assert err.code == "AUTOMATION_FAILED"
        assert err.failures == failures
        assert err.to_dict()["details"]["failures"] == failures
        assert "1 automation rule(s) failed" in err.message


# ---------------------------------------------------------------------------
# Integration tests on HTTP error responses
# ---------------------------------------------------------------------------

class TestErrorResponses:
    def test_validation_error_envelope(self, client):
        r = client.post("/users", json={"id": "", "display_name": "Nobody"})
        assert r.status_code == 422
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        fields = [e["field"] for e in body["details"]["errors"]]
        assert "id" in fields

    def test_not_found_envelope(self, client):
        r = client.get("/users/ghost")
        assert r.status_code == 404
        body = r.json()
        assert set(body) == {"code", "message", "details"}
        assert body["details"] == {"resource": "user", "id": "ghost"}
