"""
Tests for RecurringTaskService.
"""

from datetime import date
from uuid import uuid4

import pytest

from workday.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from workday.models.enums import PlanVisibility, RecurrenceRule
from workday.models.recurring_task import RecurringTaskUpdate
from workday.services.recurring_task_service import RecurringTaskService


@pytest.fixture
def service(recurring_repo, task_repo):
    return RecurringTaskService(recurring_repo=recurring_repo, task_repo=task_repo)


@pytest.fixture
def materialize_once(plan_repo, task_repo, test_user_id, test_workspace_id):
    """Create one instance of a template in the 2024-01-08 plan."""

    async def _materialize(template):
        plan, _ = await plan_repo.get_or_create(
            test_user_id, test_workspace_id, date(2024, 1, 8), PlanVisibility.TEAM
        )
        task, _ = await task_repo.get_or_create_from_template(plan, template)
        return task

    return _materialize


class TestUpdate:
    """Tests for template edits."""

    @pytest.mark.asyncio
    async def test_rule_change_without_instances(
        self, service, create_template, test_user_id, test_workspace_id
    ):
        template = await create_template()

        updated = await service.update(
            test_user_id,
            test_workspace_id,
            template.id,
            RecurringTaskUpdate(rule=RecurrenceRule.BIWEEKLY),
        )

        assert updated.rule == RecurrenceRule.BIWEEKLY

    @pytest.mark.asyncio
    async def test_rule_change_with_instances_raises(
        self, service, create_template, materialize_once, test_user_id, test_workspace_id
    ):
        template = await create_template()
        await materialize_once(template)

        with pytest.raises(BusinessLogicError) as exc_info:
            await service.update(
                test_user_id,
                test_workspace_id,
                template.id,
                RecurringTaskUpdate(rule=RecurrenceRule.MONTHLY, start_date=date(2024, 2, 5)),
            )

        assert exc_info.value.details == {"fields": ["rule", "start_date"], "instances": 1}

    @pytest.mark.asyncio
    async def test_unchanged_schedule_with_instances_is_allowed(
        self, service, create_template, materialize_once, test_user_id, test_workspace_id
    ):
        template = await create_template()
        await materialize_once(template)

        updated = await service.update(
            test_user_id,
            test_workspace_id,
            template.id,
            RecurringTaskUpdate(title="Renamed", rule=RecurrenceRule.WEEKLY),
        )

        assert updated.title == "Renamed"

    @pytest.mark.asyncio
    async def test_repeat_until_before_start_raises(
        self, service, create_template, test_user_id, test_workspace_id
    ):
        template = await create_template()

        with pytest.raises(ValidationError):
            await service.update(
                test_user_id,
                test_workspace_id,
                template.id,
                RecurringTaskUpdate(repeat_until=date(2023, 6, 1)),
            )

    @pytest.mark.asyncio
    async def test_unknown_template_raises(self, service, test_user_id, test_workspace_id):
        with pytest.raises(NotFoundError):
            await service.update(
                test_user_id, test_workspace_id, uuid4(), RecurringTaskUpdate(title="x")
            )
