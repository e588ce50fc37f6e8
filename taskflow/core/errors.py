"""
Custom exception hierarchy for Taskflow.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.
"""
from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class TaskflowException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NotFoundError(TaskflowException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    resource: str = "resource"

    def __init__(self, resource_id: str | int):
        super().__init__(
            message=f"{self.resource.capitalize()} {resource_id} not found.",
            details={"resource": self.resource, "id": str(resource_id)},
        )


class ProjectNotFoundError(NotFoundError):
    code = "PROJECT_NOT_FOUND"
    resource = "project"


class TaskNotFoundError(NotFoundError):
    code = "TASK_NOT_FOUND"
    resource = "task"


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"
    resource = "user"


class RuleNotFoundError(NotFoundError):
    code = "RULE_NOT_FOUND"
    resource = "automation rule"


class NotificationNotFoundError(NotFoundError):
    code = "NOTIFICATION_NOT_FOUND"
    resource = "notification"


class UserAlreadyExistsError(TaskflowException):
    http_status = status.HTTP_409_CONFLICT
    code = "USER_ALREADY_EXISTS"

    def __init__(self, user_id: str):
        super().__init__(
            message=f"User {user_id} already exists.",
            details={"id": user_id},
        )


class UnauthorizedError(TaskflowException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "UNAUTHORIZED"

    def __init__(self, user_id: str | None, project_id: str):
        super().__init__(
            message=f"User {user_id or '<anonymous>'} has no access to project {project_id}.",
            details={"user_id": user_id, "project_id": project_id},
        )


class NotificationAccessError(TaskflowException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "UNAUTHORIZED"

    def __init__(self, user_id: str | None, owner_id: str):
        super().__init__(
            message=f"User {user_id or '<anonymous>'} cannot access notifications of user {owner_id}.",
            details={"user_id": user_id, "owner_id": owner_id},
        )


class MalformedRuleError(TaskflowException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "MALFORMED_RULE"

    def __init__(self, message: str, rule_id: str | None = None):
        super().__init__(
            message=message,
            details={"rule_id": rule_id} if rule_id else {},
        )


class MissingContextError(TaskflowException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "MISSING_CONTEXT"

    def __init__(self, field: str, action_type: str):
        super().__init__(
            message=f"Action {action_type} requires `{field}` in the event context.",
            details={"field": field, "action_type": action_type},
        )


class AutomationExecutionError(TaskflowException):
    """Raised after an engine run in which one or more rules failed.

    Rules that succeeded in the same run are already committed; `failures`
    lists the rules that did not.
    """
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "AUTOMATION_FAILED"

    def __init__(self, project_id: str, trigger_type: str, failures: list[dict[str, Any]]):
        self.failures = failures
        super().__init__(
            message=(
                f"{len(failures)} automation rule(s) failed for project "
                f"{project_id} on {trigger_type}."
            ),
            details={
                "project_id": project_id,
                "trigger_type": trigger_type,
                "failures": failures,
            },
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def taskflow_exception_handler(request: Request, exc: TaskflowException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
