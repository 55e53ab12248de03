"""
Unit tests for Task Repository.
"""

from datetime import date, datetime, time
from uuid import uuid4

import pytest

from workday.infrastructure.local.database import (
    TaskAttachmentORM,
    TaskORM,
    TaskSubtaskORM,
)
from workday.models.enums import PlanVisibility, Priority, TaskStatus


async def _insert_manual_task(session_factory, plan, position, **fields):
    now = datetime.utcnow()
    values = {
        "id": str(uuid4()),
        "daily_plan_id": str(plan.id),
        "user_id": plan.user_id,
        "workspace_id": plan.workspace_id,
        "title": "Manual task",
        "category": "misc",
        "status": TaskStatus.PLANNED.value,
        "position": position,
        "created_at": now,
        "updated_at": now,
    }
    values.update(fields)
    async with session_factory() as session:
        session.add(TaskORM(**values))
        await session.commit()
    return values["id"]


@pytest.fixture
async def monday_plan(plan_repo, test_user_id, test_workspace_id):
    plan, _ = await plan_repo.get_or_create(
        test_user_id, test_workspace_id, date(2024, 1, 1), PlanVisibility.TEAM
    )
    return plan


@pytest.mark.asyncio
async def test_instance_is_a_snapshot_of_the_template(task_repo, create_template, monday_plan):
    """Test the fields copied onto a new instance."""
    template = await create_template(
        title="Plan the week",
        category="planning",
        estimated_minutes=45,
        notes="Check the roadmap",
        priority=Priority.HIGH,
        time_of_day=time(9, 30),
    )

    task, created = await task_repo.get_or_create_from_template(monday_plan, template)

    assert created is True
    assert task.daily_plan_id == monday_plan.id
    assert task.title == "Plan the week"
    assert task.category == "planning"
    assert task.estimated_minutes == 45
    assert task.notes == "Check the roadmap"
    assert task.priority == Priority.HIGH
    assert task.status == TaskStatus.PLANNED
    assert task.actual_minutes is None
    assert task.recurrence_parent_id == template.id
    assert task.recurrence_rule is None
    assert task.recurrence_time is None
    assert task.recurrence_start_date is None
    assert task.recurrence_active is False
    assert task.start_time == datetime(2024, 1, 1, 9, 30)
    assert task.end_time == datetime(2024, 1, 1, 10, 15)
    assert task.position == 1


@pytest.mark.asyncio
async def test_schedule_without_estimate_has_no_end(task_repo, create_template, monday_plan):
    """Test start time without an estimate."""
    template = await create_template(time_of_day=time(14, 0))

    task, _ = await task_repo.get_or_create_from_template(monday_plan, template)

    assert task.start_time == datetime(2024, 1, 1, 14, 0)
    assert task.end_time is None


@pytest.mark.asyncio
async def test_schedule_without_time_of_day(task_repo, create_template, monday_plan):
    """Test that templates without a time produce unscheduled tasks."""
    template = await create_template(estimated_minutes=30)

    task, _ = await task_repo.get_or_create_from_template(monday_plan, template)

    assert task.start_time is None
    assert task.end_time is None


@pytest.mark.asyncio
async def test_second_call_returns_existing(task_repo, create_template, monday_plan):
    """Test that an instance is created at most once per plan."""
    template = await create_template()

    first, first_created = await task_repo.get_or_create_from_template(monday_plan, template)
    second, second_created = await task_repo.get_or_create_from_template(monday_plan, template)

    assert first_created is True
    assert second_created is False
    assert second.id == first.id
    assert await task_repo.count_by_template(template.id) == 1


@pytest.mark.asyncio
async def test_position_appends_after_existing_tasks(
    session_factory, task_repo, create_template, monday_plan
):
    """Test that new instances land after the current maximum position."""
    await _insert_manual_task(session_factory, monday_plan, position=5)
    first = await create_template(title="First")
    second = await create_template(title="Second")

    first_task, _ = await task_repo.get_or_create_from_template(monday_plan, first)
    second_task, _ = await task_repo.get_or_create_from_template(monday_plan, second)

    assert first_task.position == 6
    assert second_task.position == 7


@pytest.mark.asyncio
async def test_list_for_plans_orders_and_groups(
    session_factory, plan_repo, task_repo, create_template, monday_plan,
    test_user_id, test_workspace_id,
):
    """Test grouping by plan, ordering by position, and empty plans."""
    empty_plan, _ = await plan_repo.get_or_create(
        test_user_id, test_workspace_id, date(2024, 1, 2), PlanVisibility.TEAM
    )
    await _insert_manual_task(session_factory, monday_plan, position=3, title="Later")
    await _insert_manual_task(session_factory, monday_plan, position=1, title="Earlier")
    template = await create_template(title="Recurring")
    await task_repo.get_or_create_from_template(monday_plan, template)

    grouped = await task_repo.list_for_plans([monday_plan.id, empty_plan.id])

    assert [t.title for t in grouped[monday_plan.id]] == ["Earlier", "Later", "Recurring"]
    assert grouped[empty_plan.id] == []


@pytest.mark.asyncio
async def test_list_for_plans_passes_subtasks_and_attachments_through(
    session_factory, task_repo, monday_plan
):
    """Test that subtasks and attachments come back unchanged."""
    task_id = await _insert_manual_task(session_factory, monday_plan, position=1)
    async with session_factory() as session:
        session.add(
            TaskSubtaskORM(
                id=str(uuid4()),
                task_id=task_id,
                title="Draft agenda",
                completed=True,
                estimated_minutes=10,
                created_at=datetime(2024, 1, 1, 8, 0),
            )
        )
        session.add(
            TaskAttachmentORM(
                id=str(uuid4()),
                task_id=task_id,
                url="https://example.com/older",
                created_at=datetime(2024, 1, 1, 8, 0),
            )
        )
        session.add(
            TaskAttachmentORM(
                id=str(uuid4()),
                task_id=task_id,
                url="https://example.com/newer",
                created_at=datetime(2024, 1, 1, 9, 0),
            )
        )
        await session.commit()

    grouped = await task_repo.list_for_plans([monday_plan.id])
    task = grouped[monday_plan.id][0]

    assert [s.title for s in task.subtasks] == ["Draft agenda"]
    assert task.subtasks[0].completed is True
    assert task.subtasks[0].estimated_minutes == 10
    assert [a.url for a in task.attachments] == [
        "https://example.com/newer",
        "https://example.com/older",
    ]


@pytest.mark.asyncio
async def test_list_for_plans_empty_input(task_repo):
    """Test listing with no plan IDs."""
    assert await task_repo.list_for_plans([]) == {}
