"""
Automation engine: reacts to task events with the project's rules.

check_and_trigger(project_id, trigger_type, context)
----------------------------------------------------
  1. Load the project's active rules from the rule store.
  2. Keep the rules whose trigger_type equals the event's trigger type.
  3. Evaluate each rule's conditions against the event context.
  4. Execute the action of every rule that matches.

Rules are processed one after another in store order; there is no ordering
guarantee and no rule sees another's outcome.

Failure isolation
-----------------
Each rule runs inside its own savepoint. A rule that fails (missing task or
user, malformed params, DB error) is rolled back and recorded; the remaining
rules still run. Successful actions are committed once at the end. If any
rule failed, AutomationExecutionError is raised afterwards so the caller
still sees the failure.

The engine holds no state between calls. A rule deleted after it was loaded
still runs for the current call.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

from pydantic import ValidationError
from sqlalchemy.orm import Session

from taskflow.core.errors import AutomationExecutionError, MalformedRuleError, TaskflowException
from taskflow.models.automation_rule import AutomationRule, TriggerType
from taskflow.schemas.automation import TriggerConditions
from taskflow.services.actions import ActionExecutor, parse_action
from taskflow.services.conditions import matches
from taskflow.services.context import EventContext
from taskflow.services.rule_store import RuleStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class RuleFailure:
    rule_id: str
    code: str
    message: str

    def to_dict(self) -> dict:
        return {"rule_id": self.rule_id, "code": self.code, "message": self.message}


@dataclass
class EngineResult:
    """Summary of one check_and_trigger call."""
    project_id: str
    trigger_type: str
    rules_evaluated: list[str] = field(default_factory=list)  # trigger type matched
    rules_matched: list[str] = field(default_factory=list)    # conditions held
    actions_executed: list[str] = field(default_factory=list)
    failures: list[RuleFailure] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.failures)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class AutomationEngine:
    def __init__(self, db: Session, rule_store: RuleStore, executor: ActionExecutor):
        self.db = db
        self.rule_store = rule_store
        self.executor = executor

    def check_and_trigger(
        self,
        project_id: str,
        trigger_type: Union[TriggerType, str],
        context: EventContext,
    ) -> EngineResult:
        trigger = TriggerType(trigger_type).value
        result = EngineResult(project_id=project_id, trigger_type=trigger)

        rules = self.rule_store.list_active_rules(project_id)
        for rule in rules:
            if not rule.is_active or rule.trigger_type != trigger:
                continue
            result.rules_evaluated.append(rule.id)
            self._process_rule(rule, context, result)

        self.db.commit()

        if result.failed:
            raise AutomationExecutionError(
                project_id=project_id,
                trigger_type=trigger,
                failures=[f.to_dict() for f in result.failures],
            )
        return result

    def _process_rule(
        self,
        rule: AutomationRule,
        context: EventContext,
        result: EngineResult,
    ) -> None:
        log_extra = {
            "project_id": rule.project_id,
            "rule_id": rule.id,
            "task_id": context.task_id,
            "trigger_type": result.trigger_type,
        }
        savepoint = self.db.begin_nested()
        try:
            try:
                conditions = TriggerConditions.model_validate(rule.trigger_conditions or {})
            except ValidationError as exc:
                raise MalformedRuleError(
                    message=f"Invalid trigger conditions: {exc.errors()[0]['msg']}",
                    rule_id=rule.id,
                ) from exc

            if not matches(conditions, context):
                savepoint.commit()
                return
            result.rules_matched.append(rule.id)

            action = parse_action(rule.action_type, rule.action_params, rule_id=rule.id)
            self.executor.execute(action, context)
            savepoint.commit()
            result.actions_executed.append(rule.id)
            logger.info(
                f"Rule {rule.id} ({rule.name!r}) fired {rule.action_type} "
                f"for project {rule.project_id} on {result.trigger_type}",
                extra=log_extra,
            )
        except TaskflowException as exc:
            savepoint.rollback()
            result.failures.append(RuleFailure(rule.id, exc.code, exc.message))
            logger.warning(f"Rule {rule.id} failed: {exc.code} {exc.message}", extra=log_extra)
        except Exception as exc:
            savepoint.rollback()
            result.failures.append(RuleFailure(rule.id, "INTERNAL_ERROR", str(exc)))
            logger.exception(f"Rule {rule.id} failed unexpectedly", extra=log_extra)


def build_automation_engine(db: Session) -> AutomationEngine:
    """Wire an engine with the default SQLAlchemy-backed collaborators."""
    return AutomationEngine(db=db, rule_store=RuleStore(db), executor=ActionExecutor(db))
