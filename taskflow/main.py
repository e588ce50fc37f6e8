import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from taskflow.db.base import SessionLocal, get_db
from taskflow.core.config import settings
from taskflow.core.logging import configure_logging
from taskflow.routers import automations as automations_router
from taskflow.routers import projects as projects_router
from taskflow.routers import tasks as tasks_router
from taskflow.routers import users as users_router
from taskflow.schemas.common import ErrorResponse
from taskflow.services.due_dates import DueDateScanner
from taskflow.core.errors import (
    TaskflowException,
    taskflow_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)

    scanner = None
    if settings.DUE_DATE_SCANNER_ENABLED:
        scanner = DueDateScanner(
            session_factory=SessionLocal,
            interval_minutes=settings.DUE_DATE_SCAN_INTERVAL_MINUTES,
            done_status=settings.DONE_STATUS,
        )
        scanner.start()
    else:
        logger.info("Due date scanner disabled")
    app.state.due_date_scanner = scanner

    yield

    if scanner is not None:
        scanner.stop()


app = FastAPI(
    title="Taskflow API",
    description=(
        "**Collaborative kanban boards with automation rules**\n\n"
        "Projects, tasks and comments, plus per-project rules that react to "
        "status changes, assignments and passed due dates by awarding badges, "
        "moving tasks or notifying users.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(TaskflowException, taskflow_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
_error_responses = {
    403: {"model": ErrorResponse, "description": "Caller may not access this resource."},
    404: {"model": ErrorResponse, "description": "Resource not found."},
}
app.include_router(projects_router.router, responses=_error_responses)
app.include_router(tasks_router.router, responses=_error_responses)
app.include_router(automations_router.router, responses=_error_responses)
app.include_router(users_router.router, responses=_error_responses)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable. Returns HTTP 503 if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception:
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
