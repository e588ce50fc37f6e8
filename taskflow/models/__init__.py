from .user import User
from .project import Project, ProjectMember
from .task import Task, Comment
from .notification import Notification
from .automation_rule import AutomationRule, TriggerType, ActionType

__all__ = [
    "User",
    "Project",
    "ProjectMember",
    "Task",
    "Comment",
    "Notification",
    "AutomationRule",
    "TriggerType",
    "ActionType",
]
