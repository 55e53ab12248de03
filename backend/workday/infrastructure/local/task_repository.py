"""
SQLite implementation of Task repository.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from workday.core.exceptions import InfrastructureError
from workday.core.logger import setup_logger
from workday.infrastructure.local.database import (
    DailyPlanORM,
    TaskAttachmentORM,
    TaskORM,
    TaskSubtaskORM,
    get_session_factory,
)
from workday.infrastructure.local.recurring_task_repository import parse_time
from workday.interfaces.task_repository import ITaskRepository
from workday.models.daily_plan import DailyPlan
from workday.models.enums import Priority, RecurrenceRule, TaskStatus
from workday.models.recurring_task import RecurringTask
from workday.models.task import Attachment, Subtask, Task

logger = setup_logger(__name__)


class SqliteTaskRepository(ITaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(
        self,
        orm: TaskORM,
        subtasks: Optional[list[Subtask]] = None,
        attachments: Optional[list[Attachment]] = None,
    ) -> Task:
        """Convert ORM object to Pydantic model."""
        return Task(
            id=UUID(orm.id),
            daily_plan_id=UUID(orm.daily_plan_id),
            user_id=orm.user_id,
            workspace_id=orm.workspace_id,
            title=orm.title,
            category=orm.category,
            status=TaskStatus(orm.status),
            estimated_minutes=orm.estimated_minutes,
            actual_minutes=orm.actual_minutes,
            notes=orm.notes,
            priority=Priority(orm.priority or "none"),
            due_date=orm.due_date,
            repeat_until=orm.repeat_until,
            recurrence_rule=RecurrenceRule.parse(orm.recurrence_rule),
            recurrence_time=parse_time(orm.recurrence_time),
            recurrence_start_date=orm.recurrence_start_date,
            recurrence_active=bool(orm.recurrence_active),
            recurrence_parent_id=(
                UUID(orm.recurrence_parent_id) if orm.recurrence_parent_id else None
            ),
            start_time=orm.start_time,
            end_time=orm.end_time,
            position=orm.position,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
            subtasks=subtasks or [],
            attachments=attachments or [],
        )

    @staticmethod
    def derive_schedule(
        plan: DailyPlan, template: RecurringTask
    ) -> tuple[Optional[datetime], Optional[datetime]]:
        """Start/end timestamps for an instance of template on plan.date."""
        if template.time_of_day is None:
            return None, None
        start_time = datetime.combine(plan.date, template.time_of_day)
        end_time = None
        if template.estimated_minutes:
            end_time = start_time + timedelta(minutes=template.estimated_minutes)
        return start_time, end_time

    async def _find_instance(
        self, session: AsyncSession, plan_id: UUID, template_id: UUID
    ) -> Optional[TaskORM]:
        result = await session.execute(
            select(TaskORM)
            .where(
                and_(
                    TaskORM.daily_plan_id == str(plan_id),
                    TaskORM.recurrence_parent_id == str(template_id),
                )
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_or_create_from_template(
        self, plan: DailyPlan, template: RecurringTask
    ) -> tuple[Task, bool]:
        """Ensure the (plan, template) instance exists inside one transaction."""
        try:
            async with self._session_factory() as session:
                try:
                    async with session.begin():
                        # Serializes writers per plan where row locks exist.
                        # SQLite already holds the database write lock (BEGIN IMMEDIATE).
                        await session.execute(
                            select(DailyPlanORM.id)
                            .where(DailyPlanORM.id == str(plan.id))
                            .with_for_update()
                        )

                        existing = await self._find_instance(session, plan.id, template.id)
                        if existing:
                            return self._orm_to_model(existing), False

                        max_position = (
                            await session.execute(
                                select(func.max(TaskORM.position)).where(
                                    TaskORM.daily_plan_id == str(plan.id)
                                )
                            )
                        ).scalar()
                        start_time, end_time = self.derive_schedule(plan, template)
                        now = datetime.utcnow()
                        orm = TaskORM(
                            id=str(uuid4()),
                            daily_plan_id=str(plan.id),
                            user_id=plan.user_id,
                            workspace_id=plan.workspace_id,
                            title=template.title,
                            category=template.category,
                            estimated_minutes=template.estimated_minutes,
                            actual_minutes=None,
                            status=TaskStatus.PLANNED.value,
                            notes=template.notes,
                            priority=template.priority.value,
                            start_time=start_time,
                            end_time=end_time,
                            recurrence_rule=None,
                            recurrence_time=None,
                            recurrence_start_date=None,
                            recurrence_active=False,
                            recurrence_parent_id=str(template.id),
                            position=(max_position or 0) + 1,
                            created_at=now,
                            updated_at=now,
                        )
                        session.add(orm)
                    return self._orm_to_model(orm), True
                except IntegrityError:
                    logger.info(
                        f"Task for template {template.id} in plan {plan.id} "
                        "created concurrently, using existing row"
                    )

            async with self._session_factory() as session:
                existing = await self._find_instance(session, plan.id, template.id)
                if existing is None:
                    raise InfrastructureError(
                        f"Task for template {template.id} vanished after a uniqueness conflict"
                    )
                return self._orm_to_model(existing), False
        except SQLAlchemyError as exc:
            raise InfrastructureError(
                f"Failed to materialize template {template.id} into plan {plan.id}"
            ) from exc

    async def list_for_plans(self, plan_ids: list[UUID]) -> dict[UUID, list[Task]]:
        """Get tasks of several plans, ordered by position then creation."""
        grouped: dict[UUID, list[Task]] = {plan_id: [] for plan_id in plan_ids}
        if not plan_ids:
            return grouped

        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(TaskORM)
                    .where(TaskORM.daily_plan_id.in_([str(pid) for pid in plan_ids]))
                    .order_by(TaskORM.position.asc(), TaskORM.created_at.asc())
                )
                task_orms = list(result.scalars().all())
                task_ids = [orm.id for orm in task_orms]

                subtasks_by_task: dict[str, list[Subtask]] = {}
                attachments_by_task: dict[str, list[Attachment]] = {}
                if task_ids:
                    subtask_rows = await session.execute(
                        select(TaskSubtaskORM)
                        .where(TaskSubtaskORM.task_id.in_(task_ids))
                        .order_by(TaskSubtaskORM.created_at.asc())
                    )
                    for row in subtask_rows.scalars().all():
                        subtasks_by_task.setdefault(row.task_id, []).append(
                            Subtask(
                                id=UUID(row.id),
                                title=row.title,
                                completed=bool(row.completed),
                                estimated_minutes=row.estimated_minutes,
                                actual_minutes=row.actual_minutes,
                                start_time=row.start_time,
                                end_time=row.end_time,
                            )
                        )

                    attachment_rows = await session.execute(
                        select(TaskAttachmentORM)
                        .where(TaskAttachmentORM.task_id.in_(task_ids))
                        .order_by(TaskAttachmentORM.created_at.desc())
                    )
                    for row in attachment_rows.scalars().all():
                        attachments_by_task.setdefault(row.task_id, []).append(
                            Attachment(id=UUID(row.id), url=row.url)
                        )
        except SQLAlchemyError as exc:
            raise InfrastructureError("Failed to load plan tasks") from exc

        for orm in task_orms:
            grouped.setdefault(UUID(orm.daily_plan_id), []).append(
                self._orm_to_model(
                    orm,
                    subtasks=subtasks_by_task.get(orm.id),
                    attachments=attachments_by_task.get(orm.id),
                )
            )
        return grouped

    async def count_by_template(self, recurring_task_id: UUID) -> int:
        """Count instances materialized from a template."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count())
                .select_from(TaskORM)
                .where(TaskORM.recurrence_parent_id == str(recurring_task_id))
            )
            return result.scalar_one()
