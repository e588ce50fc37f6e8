"""
AutomationRule: trigger / condition / action rows evaluated by the
automation engine (see taskflow/services/engine.py).

trigger_conditions: JSON object, any of {"status", "assignee_id", "due_date"}.
action_params:      JSON object, {"badge_id"} | {"new_status"} | {"notification_message"}
                    depending on action_type.
"""
import enum
import uuid
from datetime import datetime
from typing import Any
from sqlalchemy import JSON, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from taskflow.db.base import Base


class TriggerType(str, enum.Enum):
    TASK_STATUS_CHANGE = "TASK_STATUS_CHANGE"
    TASK_ASSIGNMENT = "TASK_ASSIGNMENT"
    DUE_DATE_PASSED = "DUE_DATE_PASSED"


class ActionType(str, enum.Enum):
    ASSIGN_BADGE = "ASSIGN_BADGE"
    CHANGE_STATUS = "CHANGE_STATUS"
    SEND_NOTIFICATION = "SEND_NOTIFICATION"


class AutomationRule(Base):
    __tablename__ = "automation_rules"

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=lambda: uuid.uuid4().hex
    )
    project_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    # Plain strings: unknown values still load and are reported as malformed.
    trigger_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    trigger_conditions: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    action_type: Mapped[str] = mapped_column(String(64), nullable=False)
    action_params: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
