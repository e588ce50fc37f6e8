"""
Condition evaluator: does an event satisfy a rule's trigger conditions?

  status       set → context.status == conditions.status
  assignee_id  set → context.assignee_id == conditions.assignee_id
  due_date     set → context.due_date <= conditions.due_date

Unset fields are not checked, so empty conditions always match. All set
fields must pass (AND); there is no OR / NOT.

Pure: no DB, no side effects.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from taskflow.schemas.automation import TriggerConditions
from taskflow.services.context import EventContext


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; treat them as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _due_date_within(context_due: Optional[datetime], threshold: datetime) -> bool:
    if context_due is None:
        return False
    return _as_utc(context_due) <= _as_utc(threshold)


def matches(
    conditions: Union[TriggerConditions, Mapping[str, Any], None],
    context: EventContext,
) -> bool:
    """Return True only if every condition that is set holds for `context`."""
    if conditions is None:
        return True
    if not isinstance(conditions, TriggerConditions):
        conditions = TriggerConditions.model_validate(conditions)

    if conditions.status and context.status != conditions.status:
        return False
    if conditions.assignee_id and context.assignee_id != conditions.assignee_id:
        return False
    if conditions.due_date and not _due_date_within(context.due_date, conditions.due_date):
        return False
    return True
