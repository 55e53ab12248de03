"""
SQLite implementation of the rollover collaborator.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import and_, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from workday.core.exceptions import InfrastructureError
from workday.core.logger import setup_logger
from workday.infrastructure.local.database import (
    DailyPlanORM,
    TaskORM,
    get_session_factory,
)
from workday.interfaces.daily_plan_repository import IDailyPlanRepository
from workday.interfaces.rollover_service import IRolloverService
from workday.models.enums import TaskStatus

logger = setup_logger(__name__)


class SqliteRolloverService(IRolloverService):
    """
    Moves planned tasks from one day's plan to another.

    Target positions continue after the current maximum and start/end times
    are cleared.
    A task whose template already has an instance in the target plan stays
    where it is.
    """

    def __init__(self, plan_repo: IDailyPlanRepository, session_factory=None):
        self.plan_repo = plan_repo
        self._session_factory = session_factory or get_session_factory()

    async def rollover(
        self, user_id: str, workspace_id: str, from_date: date, to_date: date
    ) -> int:
        source_plan = await self.plan_repo.get(user_id, workspace_id, from_date)
        if not source_plan:
            return 0

        try:
            async with self._session_factory() as session:
                pending = await session.execute(
                    select(TaskORM.id).where(
                        and_(
                            TaskORM.daily_plan_id == str(source_plan.id),
                            TaskORM.status == TaskStatus.PLANNED.value,
                        )
                    )
                )
                if not pending.first():
                    return 0
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"Failed to read plan for {from_date}") from exc

        target_plan, _ = await self.plan_repo.get_or_create(
            user_id, workspace_id, to_date, source_plan.visibility
        )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    # Same plan lock as instance inserts, taken before reading positions
                    await session.execute(
                        select(DailyPlanORM.id)
                        .where(DailyPlanORM.id == str(target_plan.id))
                        .with_for_update()
                    )
                    existing_parents = set(
                        (
                            await session.execute(
                                select(TaskORM.recurrence_parent_id).where(
                                    and_(
                                        TaskORM.daily_plan_id == str(target_plan.id),
                                        TaskORM.recurrence_parent_id.is_not(None),
                                    )
                                )
                            )
                        ).scalars().all()
                    )
                    rows = await session.execute(
                        select(TaskORM.id, TaskORM.recurrence_parent_id)
                        .where(
                            and_(
                                TaskORM.daily_plan_id == str(source_plan.id),
                                TaskORM.status == TaskStatus.PLANNED.value,
                            )
                        )
                        .order_by(TaskORM.position.asc(), TaskORM.created_at.asc())
                    )
                    movable = [
                        task_id
                        for task_id, parent_id in rows.all()
                        if parent_id is None or parent_id not in existing_parents
                    ]

                    max_position = (
                        await session.execute(
                            select(func.max(TaskORM.position)).where(
                                TaskORM.daily_plan_id == str(target_plan.id)
                            )
                        )
                    ).scalar()
                    position = (max_position or 0) + 1
                    now = datetime.utcnow()
                    for task_id in movable:
                        await session.execute(
                            update(TaskORM)
                            .where(TaskORM.id == task_id)
                            .values(
                                daily_plan_id=str(target_plan.id),
                                position=position,
                                start_time=None,
                                end_time=None,
                                updated_at=now,
                            )
                        )
                        position += 1
        except SQLAlchemyError as exc:
            raise InfrastructureError(
                f"Failed to roll tasks over from {from_date} to {to_date}"
            ) from exc

        if movable:
            logger.info(
                f"Rolled over {len(movable)} task(s) for {user_id}/{workspace_id} "
                f"from {from_date} to {to_date}"
            )
        return len(movable)
