"""
Automation rule request / response schemas.

A rule's trigger and action are tagged variants: the action is a
discriminated union on `type`, so a payload whose params lack the field
its action type needs (e.g. ASSIGN_BADGE without `badge_id`) fails
validation instead of being stored.

POST   /projects/{project_id}/automations  → AutomationRuleCreate → AutomationRuleResponse
PATCH  /automations/{rule_id}              → AutomationRuleUpdate → AutomationRuleResponse
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from taskflow.models.automation_rule import TriggerType


# ---------------------------------------------------------------------------
# Trigger
# ---------------------------------------------------------------------------

class TriggerConditions(BaseModel):
    """Field-level predicates. Every field that is set must hold (AND)."""
    model_config = ConfigDict(extra="ignore")

    status: Optional[str] = Field(
        default=None,
        description="Event status must equal this value.",
        examples=["Done"],
    )
    assignee_id: Optional[str] = Field(
        default=None,
        description="Event assignee must equal this user id.",
    )
    due_date: Optional[datetime] = Field(
        default=None,
        description="Event due date must be on or before this instant.",
        examples=["2026-03-01T00:00:00Z"],
    )


class RuleTrigger(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    type: TriggerType
    conditions: TriggerConditions = Field(default_factory=TriggerConditions)


# ---------------------------------------------------------------------------
# Actions (one variant per action type)
# ---------------------------------------------------------------------------

class AssignBadgeParams(BaseModel):
    badge_id: Annotated[str, Field(min_length=1, examples=["finisher"])]


class ChangeStatusParams(BaseModel):
    new_status: Annotated[str, Field(min_length=1, examples=["in-progress"])]


class SendNotificationParams(BaseModel):
    notification_message: Annotated[str, Field(min_length=1, examples=["Task overdue"])]


class AssignBadgeAction(BaseModel):
    type: Literal["ASSIGN_BADGE"] = "ASSIGN_BADGE"
    params: AssignBadgeParams


class ChangeStatusAction(BaseModel):
    type: Literal["CHANGE_STATUS"] = "CHANGE_STATUS"
    params: ChangeStatusParams


class SendNotificationAction(BaseModel):
    type: Literal["SEND_NOTIFICATION"] = "SEND_NOTIFICATION"
    params: SendNotificationParams


RuleAction = Annotated[
    Union[AssignBadgeAction, ChangeStatusAction, SendNotificationAction],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class AutomationRuleCreate(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=256)]
    trigger: RuleTrigger
    action: RuleAction
    is_active: bool = True


class AutomationRuleUpdate(BaseModel):
    """Partial update: omitted fields are left unchanged."""
    name: Optional[Annotated[str, Field(min_length=1, max_length=256)]] = None
    trigger: Optional[RuleTrigger] = None
    action: Optional[RuleAction] = None
    is_active: Optional[bool] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class AutomationRuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    name: str
    trigger: dict[str, Any] = Field(description='{"type": ..., "conditions": {...}}')
    action: dict[str, Any] = Field(description='{"type": ..., "params": {...}}')
    is_active: bool
    created_at: str
    updated_at: str


class AutomationRuleListResponse(BaseModel):
    total: int
    items: list[AutomationRuleResponse]
