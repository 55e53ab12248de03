"""
SQLite implementation of recurring task repository.
"""

from __future__ import annotations

from datetime import datetime, time
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError

from workday.core.exceptions import InfrastructureError, NotFoundError
from workday.infrastructure.local.database import RecurringTaskORM, get_session_factory
from workday.interfaces.recurring_task_repository import IRecurringTaskRepository
from workday.models.enums import Priority, RecurrenceRule
from workday.models.recurring_task import (
    RecurringTask,
    RecurringTaskCreate,
    RecurringTaskUpdate,
)

# Fields that may be cleared by sending an explicit null
_NULLABLE_FIELDS = {"estimated_minutes", "notes", "time_of_day", "repeat_until"}


def parse_time(value: str | None) -> time | None:
    if not value:
        return None
    return datetime.strptime(value, "%H:%M").time()


def format_time(value: time | None) -> str | None:
    if not value:
        return None
    return value.strftime("%H:%M")


class SqliteRecurringTaskRepository(IRecurringTaskRepository):
    """SQLite implementation of recurring task repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: RecurringTaskORM) -> RecurringTask:
        """Convert ORM object to Pydantic model."""
        return RecurringTask(
            id=UUID(orm.id),
            user_id=orm.user_id,
            workspace_id=orm.workspace_id,
            title=orm.title,
            category=orm.category,
            estimated_minutes=orm.estimated_minutes,
            notes=orm.notes,
            priority=Priority(orm.priority or "none"),
            # Unrecognized stored rules degrade to CUSTOM, which never fires
            rule=RecurrenceRule.parse(orm.rule) or RecurrenceRule.CUSTOM,
            start_date=orm.start_date,
            time_of_day=parse_time(orm.time_of_day),
            repeat_until=orm.repeat_until,
            is_active=bool(orm.is_active),
            parent_template_id=UUID(orm.parent_template_id) if orm.parent_template_id else None,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    def _scoped(self, user_id: str, workspace_id: str, recurring_task_id: UUID):
        return select(RecurringTaskORM).where(
            and_(
                RecurringTaskORM.id == str(recurring_task_id),
                RecurringTaskORM.user_id == user_id,
                RecurringTaskORM.workspace_id == workspace_id,
            )
        )

    async def create(
        self, user_id: str, workspace_id: str, data: RecurringTaskCreate
    ) -> RecurringTask:
        """Create a new recurring task template."""
        now = datetime.utcnow()
        async with self._session_factory() as session:
            orm = RecurringTaskORM(
                id=str(uuid4()),
                user_id=user_id,
                workspace_id=workspace_id,
                title=data.title,
                category=data.category,
                estimated_minutes=data.estimated_minutes,
                notes=data.notes,
                priority=data.priority.value,
                rule=data.rule.value,
                start_date=data.start_date,
                time_of_day=format_time(data.time_of_day),
                repeat_until=data.repeat_until,
                is_active=data.is_active,
                parent_template_id=None,
                created_at=now,
                updated_at=now,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(
        self, user_id: str, workspace_id: str, recurring_task_id: UUID
    ) -> Optional[RecurringTask]:
        """Get a recurring task template by ID."""
        async with self._session_factory() as session:
            result = await session.execute(
                self._scoped(user_id, workspace_id, recurring_task_id)
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list(
        self,
        user_id: str,
        workspace_id: str,
        include_inactive: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[RecurringTask]:
        """List recurring task templates."""
        async with self._session_factory() as session:
            conditions = [
                RecurringTaskORM.user_id == user_id,
                RecurringTaskORM.workspace_id == workspace_id,
            ]
            if not include_inactive:
                conditions.append(RecurringTaskORM.is_active.is_(True))

            query = select(RecurringTaskORM).where(and_(*conditions))
            query = query.order_by(RecurringTaskORM.created_at.desc()).limit(limit).offset(offset)
            result = await session.execute(query)
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_active(self, user_id: str, workspace_id: str) -> list[RecurringTask]:
        """List active root templates, oldest first."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(RecurringTaskORM)
                    .where(
                        and_(
                            RecurringTaskORM.user_id == user_id,
                            RecurringTaskORM.workspace_id == workspace_id,
                            RecurringTaskORM.is_active.is_(True),
                            RecurringTaskORM.parent_template_id.is_(None),
                        )
                    )
                    .order_by(RecurringTaskORM.created_at.asc(), RecurringTaskORM.id.asc())
                )
                return [self._orm_to_model(orm) for orm in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise InfrastructureError("Failed to load recurring task templates") from exc

    async def update(
        self,
        user_id: str,
        workspace_id: str,
        recurring_task_id: UUID,
        update: RecurringTaskUpdate,
    ) -> RecurringTask:
        """Update a recurring task template."""
        async with self._session_factory() as session:
            result = await session.execute(
                self._scoped(user_id, workspace_id, recurring_task_id)
            )
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"RecurringTask {recurring_task_id} not found")

            update_data = update.model_dump(exclude_unset=True)
            for field, value in update_data.items():
                if value is None and field not in _NULLABLE_FIELDS:
                    continue
                if field in ("rule", "priority"):
                    value = value.value if hasattr(value, "value") else value
                elif field == "time_of_day":
                    value = format_time(value)
                setattr(orm, field, value)

            orm.updated_at = datetime.utcnow()
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def deactivate(
        self, user_id: str, workspace_id: str, recurring_task_id: UUID
    ) -> bool:
        """Deactivate a recurring task template."""
        async with self._session_factory() as session:
            result = await session.execute(
                self._scoped(user_id, workspace_id, recurring_task_id)
            )
            orm = result.scalar_one_or_none()
            if not orm:
                return False

            orm.is_active = False
            orm.updated_at = datetime.utcnow()
            await session.commit()
            return True
