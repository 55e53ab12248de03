"""
Shared pytest fixtures.
"""

from datetime import date

import pytest

from workday.infrastructure.local.daily_plan_repository import SqliteDailyPlanRepository
from workday.infrastructure.local.database import (
    build_engine,
    build_session_factory,
    init_db,
)
from workday.infrastructure.local.recurring_task_repository import (
    SqliteRecurringTaskRepository,
)
from workday.infrastructure.local.rollover_service import SqliteRolloverService
from workday.infrastructure.local.task_repository import SqliteTaskRepository
from workday.models.enums import RecurrenceRule
from workday.models.recurring_task import RecurringTaskCreate


@pytest.fixture
async def session_factory():
    """Session factory over a fresh in-memory database."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)

    yield build_session_factory(engine)

    await engine.dispose()


@pytest.fixture
async def file_session_factory(tmp_path):
    """Session factory over a file database, for tests needing real concurrency."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'workday.db'}", busy_timeout=30)
    await init_db(engine)

    yield build_session_factory(engine)

    await engine.dispose()


@pytest.fixture
def test_user_id() -> str:
    return "test_user"


@pytest.fixture
def test_workspace_id() -> str:
    return "ws-team-1"


@pytest.fixture
def recurring_repo(session_factory):
    return SqliteRecurringTaskRepository(session_factory)


@pytest.fixture
def plan_repo(session_factory):
    return SqliteDailyPlanRepository(session_factory)


@pytest.fixture
def task_repo(session_factory):
    return SqliteTaskRepository(session_factory)


@pytest.fixture
def rollover_service(session_factory, plan_repo):
    return SqliteRolloverService(plan_repo, session_factory)


@pytest.fixture
def create_template(recurring_repo, test_user_id, test_workspace_id):
    """Factory creating a template; defaults to weekly on Mondays from 2024-01-01."""

    async def _create(workspace_id: str | None = None, **overrides):
        data = {
            "title": "Weekly review",
            "category": "work",
            "rule": RecurrenceRule.WEEKLY,
            "start_date": date(2024, 1, 1),
        }
        data.update(overrides)
        return await recurring_repo.create(
            test_user_id,
            workspace_id or test_workspace_id,
            RecurringTaskCreate(**data),
        )

    return _create


@pytest.fixture
async def api_client(session_factory, test_user_id, test_workspace_id):
    """HTTP client for the app, wired to the in-memory database."""
    from httpx import ASGITransport, AsyncClient

    from main import app
    from workday.api.deps import (
        get_daily_plan_repository,
        get_recurring_task_repository,
        get_rollover_service,
        get_task_repository,
    )

    plan_repo = SqliteDailyPlanRepository(session_factory)
    app.dependency_overrides[get_recurring_task_repository] = (
        lambda: SqliteRecurringTaskRepository(session_factory)
    )
    app.dependency_overrides[get_daily_plan_repository] = lambda: plan_repo
    app.dependency_overrides[get_task_repository] = lambda: SqliteTaskRepository(session_factory)
    app.dependency_overrides[get_rollover_service] = (
        lambda: SqliteRolloverService(plan_repo, session_factory)
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={
            "Authorization": f"Bearer {test_user_id}",
            "X-Workspace-Id": test_workspace_id,
        },
    ) as client:
        yield client

    app.dependency_overrides.clear()
