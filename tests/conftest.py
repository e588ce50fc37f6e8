"""
Shared pytest fixtures.

Uses a SQLite database file so no Postgres is required for tests. Every
test starts from empty tables.
"""
import os

SQLITE_URL = "sqlite:///./test_taskflow.db"

# Must be set before taskflow.core.config is imported.
os.environ["DATABASE_URL"] = SQLITE_URL
os.environ["DUE_DATE_SCANNER_ENABLED"] = "false"

from datetime import datetime  # noqa: E402
from typing import Any, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from taskflow.db.base import Base, get_db  # noqa: E402
from taskflow.main import app  # noqa: E402
from taskflow.models import AutomationRule, Project, Task, User  # noqa: E402

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------

@pytest.fixture()
def make_user(db):
    def _make(user_id: str = "u1", badges: Optional[list[str]] = None) -> User:
        user = User(id=user_id, display_name=user_id.upper(), badges=badges or [])
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture()
def make_project(db):
    def _make(owner_id: str = "u1", name: str = "Board") -> Project:
        project = Project(name=name, owner_id=owner_id)
        db.add(project)
        db.commit()
        return project
    return _make


@pytest.fixture()
def make_task(db):
    def _make(
        project_id: str,
        status: str = "todo",
        assignee_id: Optional[str] = None,
        due_date: Optional[datetime] = None,
        title: str = "Write docs",
    ) -> Task:
        task = Task(
            project_id=project_id,
            title=title,
            status=status,
            assignee_id=assignee_id,
            due_date=due_date,
        )
        db.add(task)
        db.commit()
        return task
    return _make


@pytest.fixture()
def make_rule(db):
    """Insert a rule row directly, bypassing schema validation."""
    def _make(
        project_id: str,
        trigger_type: str,
        action_type: str,
        action_params: dict[str, Any],
        conditions: Optional[dict[str, Any]] = None,
        is_active: bool = True,
        name: str = "rule",
    ) -> AutomationRule:
        rule = AutomationRule(
            project_id=project_id,
            name=name,
            trigger_type=trigger_type,
            trigger_conditions=conditions or {},
            action_type=action_type,
            action_params=action_params,
            is_active=is_active,
        )
        db.add(rule)
        db.commit()
        return rule
    return _make


@pytest.fixture()
def session_factory():
    """Session factory bound to the test database, for code that opens its own sessions."""
    return TestingSessionLocal
