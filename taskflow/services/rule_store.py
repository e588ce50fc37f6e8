"""
Rule store: persistence of AutomationRule rows keyed by project.

The engine only needs `list_active_rules`; the rest backs the
/automations CRUD endpoints.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from taskflow.core.errors import RuleNotFoundError
from taskflow.models.automation_rule import AutomationRule
from taskflow.schemas.automation import AutomationRuleCreate, AutomationRuleUpdate


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


class RuleStore:
    def __init__(self, db: Session):
        self.db = db

    def create_rule(self, project_id: str, payload: AutomationRuleCreate) -> AutomationRule:
        now = _now()
        rule = AutomationRule(
            project_id=project_id,
            name=payload.name,
            trigger_type=payload.trigger.type,
            trigger_conditions=payload.trigger.conditions.model_dump(
                mode="json", exclude_none=True
            ),
            action_type=payload.action.type,
            action_params=payload.action.params.model_dump(mode="json"),
            is_active=payload.is_active,
            created_at=now,
            updated_at=now,
        )
        self.db.add(rule)
        self.db.commit()
        self.db.refresh(rule)
        return rule

    def get_rule(self, rule_id: str) -> AutomationRule:
        rule = self.db.get(AutomationRule, rule_id)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule

    def list_rules(self, project_id: str, active_only: bool = False) -> list[AutomationRule]:
        q = self.db.query(AutomationRule).filter(AutomationRule.project_id == project_id)
        if active_only:
            q = q.filter(AutomationRule.is_active == True)  # noqa: E712
        return q.order_by(AutomationRule.created_at, AutomationRule.id).all()

    def list_active_rules(self, project_id: str) -> list[AutomationRule]:
        """Active rules of a project. Callers must not rely on the order."""
        return self.list_rules(project_id, active_only=True)

    def update_rule(self, rule_id: str, payload: AutomationRuleUpdate) -> AutomationRule:
        rule = self.get_rule(rule_id)
        if payload.name is not None:
            rule.name = payload.name
        if payload.trigger is not None:
            rule.trigger_type = payload.trigger.type
            rule.trigger_conditions = payload.trigger.conditions.model_dump(
                mode="json", exclude_none=True
            )
        if payload.action is not None:
            rule.action_type = payload.action.type
            rule.action_params = payload.action.params.model_dump(mode="json")
        if payload.is_active is not None:
            rule.is_active = payload.is_active
        rule.updated_at = _now()
        self.db.commit()
        self.db.refresh(rule)
        return rule

    def delete_rule(self, rule_id: str) -> None:
        rule = self.get_rule(rule_id)
        self.db.delete(rule)
        self.db.commit()

    def delete_project_rules(self, project_id: str, commit: bool = True) -> int:
        """Remove every rule owned by `project_id`. Returns the number deleted."""
        deleted = (
            self.db.query(AutomationRule)
            .filter(AutomationRule.project_id == project_id)
            .delete(synchronize_session=False)
        )
        if commit:
            self.db.commit()
        return deleted
