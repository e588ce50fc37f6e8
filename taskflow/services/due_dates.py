"""
Due-date scanner: feeds DUE_DATE_PASSED events into the automation engine.

Every tick (hourly by default, plus once right after start) each task whose
due_date is at or before now and whose status is not DONE_STATUS is
reported to the engine for its project with the context

    {task_id, due_date, user_id=assignee_id, assignee_id, status}

There is no de-duplication: an overdue task is reported again on every tick
until its status changes. A CHANGE_STATUS rule is the usual way to stop it.

Errors never stop the schedule: a failing task is logged and counted, a
failing tick is logged. A tick that starts while the previous one is still
running is skipped.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from taskflow.core.errors import TaskflowException
from taskflow.models.automation_rule import TriggerType
from taskflow.services.context import EventContext
from taskflow.services.engine import AutomationEngine, build_automation_engine
from taskflow.services.tasks import TaskService

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    scanned_at: datetime
    overdue_tasks: list[str] = field(default_factory=list)
    failed_tasks: list[str] = field(default_factory=list)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def scan_due_dates(
    db: Session,
    engine: Optional[AutomationEngine] = None,
    now: Optional[datetime] = None,
    done_status: str = "Done",
) -> ScanResult:
    """Report every overdue, unfinished task to the engine once."""
    engine = engine or build_automation_engine(db)
    result = ScanResult(scanned_at=now or _now())

    overdue = TaskService(db, engine=engine).find_overdue_tasks(result.scanned_at, done_status)
    for task in overdue:
        result.overdue_tasks.append(task.id)
        context = EventContext(
            task_id=task.id,
            due_date=task.due_date,
            user_id=task.assignee_id,
            assignee_id=task.assignee_id,
            status=task.status,
        )
        log_extra = {
            "project_id": task.project_id,
            "task_id": task.id,
            "trigger_type": TriggerType.DUE_DATE_PASSED.value,
        }
        try:
            engine.check_and_trigger(task.project_id, TriggerType.DUE_DATE_PASSED, context)
        except TaskflowException as exc:
            result.failed_tasks.append(task.id)
            logger.error(
                f"Due date automation failed for task {task.id}: {exc.message}", extra=log_extra
            )
        except Exception:
            db.rollback()
            result.failed_tasks.append(task.id)
            logger.exception(f"Due date automation crashed for task {task.id}", extra=log_extra)

    logger.info(
        f"Due date scan at {result.scanned_at.isoformat()}: "
        f"{len(result.overdue_tasks)} overdue, {len(result.failed_tasks)} failed"
    )
    return result


class DueDateScanner:
    """Runs scan_due_dates on an APScheduler interval job."""

    JOB_ID = "due_date_scan"

    def __init__(
        self,
        session_factory: Callable[[], Session],
        interval_minutes: int = 60,
        done_status: str = "Done",
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self.session_factory = session_factory
        self.interval_minutes = interval_minutes
        self.done_status = done_status
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self.scheduler.running and self.scheduler.get_job(self.JOB_ID) is not None

    def start(self) -> None:
        if self.scheduler.get_job(self.JOB_ID):
            logger.info("Due date scanner is already running")
            return

        self.scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=self.JOB_ID,
            name="Due date scan",
            next_run_time=_now(),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info(f"Due date scanner started (every {self.interval_minutes} min)")

    def stop(self) -> None:
        if self.scheduler.get_job(self.JOB_ID):
            self.scheduler.remove_job(self.JOB_ID)
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Due date scanner stopped")

    def run_once(self, now: Optional[datetime] = None) -> Optional[ScanResult]:
        """One tick. Returns None if skipped or if the tick failed."""
        if not self._lock.acquire(blocking=False):
            logger.warning("Previous due date scan still running, skipping tick")
            return None
        logger.debug("Due date scan started")
        try:
            db = self.session_factory()
            try:
                return scan_due_dates(db, now=now, done_status=self.done_status)
            finally:
                db.close()
        except Exception:
            logger.exception("Error checking due dates")
            return None
        finally:
            self._lock.release()
