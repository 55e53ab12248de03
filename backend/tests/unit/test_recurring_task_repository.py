"""
Unit tests for Recurring Task Repository.
"""

from datetime import date, datetime, time
from uuid import uuid4

import pytest

from workday.core.exceptions import NotFoundError
from workday.infrastructure.local.database import RecurringTaskORM
from workday.models.enums import Priority, RecurrenceRule
from workday.models.recurring_task import RecurringTaskCreate, RecurringTaskUpdate


async def _insert_raw_template(session_factory, user_id, workspace_id, **fields):
    now = datetime.utcnow()
    values = {
        "id": str(uuid4()),
        "user_id": user_id,
        "workspace_id": workspace_id,
        "title": "Raw template",
        "category": "ops",
        "rule": "weekly",
        "start_date": date(2024, 1, 1),
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    values.update(fields)
    async with session_factory() as session:
        session.add(RecurringTaskORM(**values))
        await session.commit()
    return values["id"]


@pytest.mark.asyncio
async def test_create_and_get(recurring_repo, test_user_id, test_workspace_id):
    """Test creating a template and reading it back."""
    created = await recurring_repo.create(
        test_user_id,
        test_workspace_id,
        RecurringTaskCreate(
            title="Standup notes",
            category="team",
            estimated_minutes=15,
            priority=Priority.HIGH,
            rule=RecurrenceRule.DAILY_WEEKDAYS,
            start_date=date(2024, 1, 1),
            time_of_day=time(9, 30),
        ),
    )

    fetched = await recurring_repo.get(test_user_id, test_workspace_id, created.id)

    assert fetched is not None
    assert fetched.title == "Standup notes"
    assert fetched.rule == RecurrenceRule.DAILY_WEEKDAYS
    assert fetched.priority == Priority.HIGH
    assert fetched.time_of_day == time(9, 30)
    assert fetched.parent_template_id is None
    assert fetched.is_active is True


@pytest.mark.asyncio
async def test_get_is_scoped_to_workspace(recurring_repo, create_template, test_user_id):
    """Test that templates are invisible from other workspaces."""
    created = await create_template()

    assert await recurring_repo.get(test_user_id, "other-ws", created.id) is None
    assert await recurring_repo.get("someone_else", created.workspace_id, created.id) is None


@pytest.mark.asyncio
async def test_list_excludes_inactive_by_default(
    recurring_repo, create_template, test_user_id, test_workspace_id
):
    """Test listing with and without inactive templates."""
    await create_template(title="Active")
    await create_template(title="Paused", is_active=False)

    active = await recurring_repo.list(test_user_id, test_workspace_id)
    everything = await recurring_repo.list(
        test_user_id, test_workspace_id, include_inactive=True
    )

    assert [t.title for t in active] == ["Active"]
    assert {t.title for t in everything} == {"Active", "Paused"}


@pytest.mark.asyncio
async def test_list_active_skips_inactive_and_child_templates(
    session_factory, recurring_repo, create_template, test_user_id, test_workspace_id
):
    """Test that only active root templates are offered for materialization."""
    root = await create_template(title="Root")
    await create_template(title="Paused", is_active=False)
    await _insert_raw_template(
        session_factory,
        test_user_id,
        test_workspace_id,
        title="Child",
        parent_template_id=str(root.id),
    )
    await create_template(workspace_id="other-ws", title="Elsewhere")

    templates = await recurring_repo.list_active(test_user_id, test_workspace_id)

    assert [t.title for t in templates] == ["Root"]


@pytest.mark.asyncio
async def test_unknown_stored_rule_reads_as_custom(
    session_factory, recurring_repo, test_user_id, test_workspace_id
):
    """Test that rows with unrecognized rules load as CUSTOM."""
    template_id = await _insert_raw_template(
        session_factory, test_user_id, test_workspace_id, rule="every_full_moon"
    )

    templates = await recurring_repo.list_active(test_user_id, test_workspace_id)

    assert len(templates) == 1
    assert str(templates[0].id) == template_id
    assert templates[0].rule == RecurrenceRule.CUSTOM


@pytest.mark.asyncio
async def test_update_fields(recurring_repo, create_template, test_user_id, test_workspace_id):
    """Test partial updates, including clearing nullable fields."""
    created = await create_template(time_of_day=time(8, 0), notes="bring coffee")

    updated = await recurring_repo.update(
        test_user_id,
        test_workspace_id,
        created.id,
        RecurringTaskUpdate(title="Renamed", time_of_day=None, notes=None),
    )

    assert updated.title == "Renamed"
    assert updated.time_of_day is None
    assert updated.notes is None
    assert updated.category == created.category
    assert updated.rule == created.rule


@pytest.mark.asyncio
async def test_update_ignores_null_for_required_fields(
    recurring_repo, create_template, test_user_id, test_workspace_id
):
    """Test that explicit nulls do not blank required columns."""
    created = await create_template()

    updated = await recurring_repo.update(
        test_user_id,
        test_workspace_id,
        created.id,
        RecurringTaskUpdate(title=None, rule=None),
    )

    assert updated.title == created.title
    assert updated.rule == created.rule


@pytest.mark.asyncio
async def test_update_missing_raises(recurring_repo, test_user_id, test_workspace_id):
    """Test updating a template that does not exist."""
    with pytest.raises(NotFoundError):
        await recurring_repo.update(
            test_user_id, test_workspace_id, uuid4(), RecurringTaskUpdate(title="x")
        )


@pytest.mark.asyncio
async def test_deactivate(recurring_repo, create_template, test_user_id, test_workspace_id):
    """Test that deactivation keeps the row but hides it from materialization."""
    created = await create_template()

    assert await recurring_repo.deactivate(test_user_id, test_workspace_id, created.id) is True
    assert await recurring_repo.list_active(test_user_id, test_workspace_id) == []

    fetched = await recurring_repo.get(test_user_id, test_workspace_id, created.id)
    assert fetched is not None
    assert fetched.is_active is False


@pytest.mark.asyncio
async def test_deactivate_missing(recurring_repo, test_user_id, test_workspace_id):
    """Test deactivating a template that does not exist."""
    assert await recurring_repo.deactivate(test_user_id, test_workspace_id, uuid4()) is False
