"""
Automation rules router.

GET    /projects/{project_id}/automations   list (optionally active only)
POST   /projects/{project_id}/automations   create
GET    /automations/{rule_id}
PATCH  /automations/{rule_id}               partial update (toggle is_active, edit)
DELETE /automations/{rule_id}
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from taskflow.db.base import get_db
from taskflow.models.automation_rule import AutomationRule
from taskflow.models.project import Project
from taskflow.routers.deps import acting_user_id, member_project
from taskflow.schemas.automation import (
    AutomationRuleCreate,
    AutomationRuleListResponse,
    AutomationRuleResponse,
    AutomationRuleUpdate,
)
from taskflow.services.projects import ProjectService
from taskflow.services.rule_store import RuleStore

router = APIRouter(tags=["automations"])


def _rule_to_response(rule: AutomationRule) -> AutomationRuleResponse:
    return AutomationRuleResponse(
        id=rule.id,
        project_id=rule.project_id,
        name=rule.name,
        trigger={"type": rule.trigger_type, "conditions": rule.trigger_conditions or {}},
        action={"type": rule.action_type, "params": rule.action_params or {}},
        is_active=rule.is_active,
        created_at=rule.created_at.isoformat() if rule.created_at else "",
        updated_at=rule.updated_at.isoformat() if rule.updated_at else "",
    )


def _member_rule(rule_id: str, user_id: Optional[str], db: Session) -> AutomationRule:
    rule = RuleStore(db).get_rule(rule_id)
    projects = ProjectService(db)
    projects.require_member(projects.get_project(rule.project_id), user_id)
    return rule


@router.get(
    "/projects/{project_id}/automations",
    response_model=AutomationRuleListResponse,
    summary="List a project's automation rules",
)
def list_automations(
    active_only: bool = Query(default=False, description="Only rules with is_active=true."),
    project: Project = Depends(member_project),
    db: Session = Depends(get_db),
):
    rules = RuleStore(db).list_rules(project.id, active_only=active_only)
    return AutomationRuleListResponse(
        total=len(rules),
        items=[_rule_to_response(r) for r in rules],
    )


@router.post(
    "/projects/{project_id}/automations",
    response_model=AutomationRuleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an automation rule",
    responses={
        422: {"description": "Unknown trigger/action type, or params missing for the action."},
    },
)
def create_automation(
    payload: AutomationRuleCreate,
    project: Project = Depends(member_project),
    db: Session = Depends(get_db),
):
    """
    Create a rule of the form *when* `trigger.type` happens *and* every set
    `trigger.conditions` field matches, *do* `action`.

    ### Actions
    | Type | Required params |
    |---|---|
    | `ASSIGN_BADGE`      | `badge_id` |
    | `CHANGE_STATUS`     | `new_status` |
    | `SEND_NOTIFICATION` | `notification_message` |
    """
    return _rule_to_response(RuleStore(db).create_rule(project.id, payload))


@router.get(
    "/automations/{rule_id}",
    response_model=AutomationRuleResponse,
    summary="Get an automation rule",
)
def get_automation(
    rule_id: str,
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    return _rule_to_response(_member_rule(rule_id, user_id, db))


@router.patch(
    "/automations/{rule_id}",
    response_model=AutomationRuleResponse,
    summary="Update an automation rule",
)
def update_automation(
    rule_id: str,
    payload: AutomationRuleUpdate,
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    rule = _member_rule(rule_id, user_id, db)
    return _rule_to_response(RuleStore(db).update_rule(rule.id, payload))


@router.delete(
    "/automations/{rule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an automation rule",
)
def delete_automation(
    rule_id: str,
    user_id: Optional[str] = Depends(acting_user_id),
    db: Session = Depends(get_db),
):
    rule = _member_rule(rule_id, user_id, db)
    RuleStore(db).delete_rule(rule.id)
