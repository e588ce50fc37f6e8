"""
EventContext: the ephemeral description of one task event.

Built by the caller at the moment of the event (status update, assignment,
due-date scan), handed to the automation engine, discarded afterwards.
Which fields are filled depends on the trigger type.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class EventContext:
    task_id: Optional[str] = None
    # Target of ASSIGN_BADGE / SEND_NOTIFICATION.
    user_id: Optional[str] = None
    # Compared against the `assignee_id` condition.
    assignee_id: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "task_id": self.task_id,
            "user_id": self.user_id,
            "assignee_id": self.assignee_id,
            "status": self.status,
            "due_date": self.due_date.isoformat() if self.due_date else None,
        }
