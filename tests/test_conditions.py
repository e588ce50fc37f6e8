"""
Unit tests for the condition evaluator. Pure: no DB.
"""
from datetime import datetime, timedelta, timezone

from taskflow.schemas.automation import TriggerConditions
from taskflow.services.conditions import matches
from taskflow.services.context import EventContext

_THRESHOLD = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestEmptyConditions:
    def test_empty_conditions_match_any_context(self):
        assert matches(TriggerConditions(), EventContext()) is True
        assert matches(TriggerConditions(), EventContext(status="Done", user_id="u1")) is True

    def test_none_conditions_match(self):
        assert matches(None, EventContext(status="todo")) is True

    def test_empty_dict_matches(self):
        assert matches({}, EventContext(status="anything")) is True


class TestStatus:
    def test_equal_status_matches(self):
        assert matches({"status": "Done"}, EventContext(status="Done")) is True

    def test_different_status_does_not_match(self):
        assert matches({"status": "Done"}, EventContext(status="InProgress")) is False

    def test_status_is_case_sensitive(self):
        assert matches({"status": "Done"}, EventContext(status="done")) is False

    def test_missing_context_status_does_not_match(self):
        assert matches({"status": "Done"}, EventContext()) is False

    def test_empty_string_condition_is_not_checked(self):
        assert matches({"status": ""}, EventContext(status="todo")) is True


class TestAssignee:
    def test_same_assignee_matches(self):
        assert matches({"assignee_id": "u1"}, EventContext(assignee_id="u1")) is True

    def test_other_assignee_does_not_match(self):
        assert matches({"assignee_id": "u1"}, EventContext(assignee_id="u2")) is False

    def test_user_id_is_not_used_for_assignee(self):
        assert matches({"assignee_id": "u1"}, EventContext(user_id="u1")) is False


class TestDueDate:
    def test_due_before_threshold_matches(self):
        ctx = EventContext(due_date=_THRESHOLD - timedelta(days=1))
        assert matches(TriggerConditions(due_date=_THRESHOLD), ctx) is True

    def test_due_equal_to_threshold_matches(self):
        assert matches(TriggerConditions(due_date=_THRESHOLD), EventContext(due_date=_THRESHOLD)) is True

    def test_due_after_threshold_does_not_match(self):
        ctx = EventContext(due_date=_THRESHOLD + timedelta(seconds=1))
        assert matches(TriggerConditions(due_date=_THRESHOLD), ctx) is False

    def test_missing_context_due_date_does_not_match(self):
        assert matches(TriggerConditions(due_date=_THRESHOLD), EventContext()) is False

    def test_iso_string_condition_from_storage(self):
        ctx = EventContext(due_date=datetime(2026, 2, 1, tzinfo=timezone.utc))
        assert matches({"due_date": "2026-03-01T12:00:00Z"}, ctx) is True

    def test_naive_context_is_read_as_utc(self):
        naive = datetime(2026, 3, 1, 12, 0)
        assert matches(TriggerConditions(due_date=_THRESHOLD), EventContext(due_date=naive)) is True
        later = datetime(2026, 3, 1, 12, 1)
        assert matches(TriggerConditions(due_date=_THRESHOLD), EventContext(due_date=later)) is False

    def test_other_timezone_is_normalised(self):
        plus_two = timezone(timedelta(hours=2))
        # 13:00+02:00 == 11:00Z, before the 12:00Z threshold
        ctx = EventContext(due_date=datetime(2026, 3, 1, 13, 0, tzinfo=plus_two))
        assert matches(TriggerConditions(due_date=_THRESHOLD), ctx) is True


class TestAndSemantics:
    def test_all_conditions_hold(self):
        conditions = {"status": "Done", "assignee_id": "u1"}
        assert matches(conditions, EventContext(status="Done", assignee_id="u1")) is True

    def test_one_failing_condition_fails_the_rule(self):
        conditions = {"status": "Done", "assignee_id": "u1"}
        assert matches(conditions, EventContext(status="Done", assignee_id="u2")) is False
        assert matches(conditions, EventContext(status="todo", assignee_id="u1")) is False

    def test_unknown_condition_keys_are_ignored(self):
        assert matches({"priority": "high"}, EventContext(status="todo")) is True
