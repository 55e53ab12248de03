"""
SQLite implementation of daily plan repository.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from workday.core.exceptions import InfrastructureError, NotFoundError
from workday.core.logger import setup_logger
from workday.infrastructure.local.database import DailyPlanORM, get_session_factory
from workday.interfaces.daily_plan_repository import IDailyPlanRepository
from workday.models.daily_plan import DailyPlan
from workday.models.enums import PlanVisibility

logger = setup_logger(__name__)


class SqliteDailyPlanRepository(IDailyPlanRepository):
    """SQLite implementation of daily plan repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: DailyPlanORM) -> DailyPlan:
        """Convert ORM object to Pydantic model."""
        return DailyPlan(
            id=UUID(orm.id),
            user_id=orm.user_id,
            workspace_id=orm.workspace_id,
            date=orm.date,
            visibility=PlanVisibility(orm.visibility),
            submitted=bool(orm.submitted),
            reviewed=bool(orm.reviewed),
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def get_or_create(
        self,
        user_id: str,
        workspace_id: str,
        plan_date: date,
        default_visibility: PlanVisibility,
    ) -> tuple[DailyPlan, bool]:
        """Ensure the plan exists; the unique key settles concurrent inserts."""
        existing = await self.get(user_id, workspace_id, plan_date)
        if existing:
            return existing, False

        now = datetime.utcnow()
        orm = DailyPlanORM(
            id=str(uuid4()),
            user_id=user_id,
            workspace_id=workspace_id,
            date=plan_date,
            visibility=default_visibility.value,
            submitted=False,
            reviewed=False,
            created_at=now,
            updated_at=now,
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(orm)
            return self._orm_to_model(orm), True
        except IntegrityError:
            # Another caller inserted the same (user, workspace, date) first
            logger.info(
                f"Daily plan for {user_id}/{workspace_id}/{plan_date} created concurrently, "
                "using existing row"
            )
        except SQLAlchemyError as exc:
            raise InfrastructureError(
                f"Failed to create daily plan for {plan_date}"
            ) from exc

        plan = await self.get(user_id, workspace_id, plan_date)
        if plan is None:
            raise InfrastructureError(
                f"Daily plan for {plan_date} vanished after a uniqueness conflict"
            )
        return plan, False

    async def get(
        self, user_id: str, workspace_id: str, plan_date: date
    ) -> Optional[DailyPlan]:
        """Get the plan for a date."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(DailyPlanORM).where(
                        and_(
                            DailyPlanORM.user_id == user_id,
                            DailyPlanORM.workspace_id == workspace_id,
                            DailyPlanORM.date == plan_date,
                        )
                    )
                )
                orm = result.scalar_one_or_none()
                return self._orm_to_model(orm) if orm else None
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"Failed to load daily plan for {plan_date}") from exc

    async def list_range(
        self, user_id: str, workspace_id: str, start: date, end: date
    ) -> list[DailyPlan]:
        """List plans inside [start, end]."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(DailyPlanORM)
                    .where(
                        and_(
                            DailyPlanORM.user_id == user_id,
                            DailyPlanORM.workspace_id == workspace_id,
                            DailyPlanORM.date >= start,
                            DailyPlanORM.date <= end,
                        )
                    )
                    .order_by(DailyPlanORM.date.asc())
                )
                return [self._orm_to_model(orm) for orm in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise InfrastructureError(
                f"Failed to load daily plans between {start} and {end}"
            ) from exc

    async def set_visibility(
        self,
        user_id: str,
        workspace_id: str,
        plan_id: UUID,
        visibility: PlanVisibility,
    ) -> DailyPlan:
        """Change the visibility of an existing plan."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(DailyPlanORM).where(
                        and_(
                            DailyPlanORM.id == str(plan_id),
                            DailyPlanORM.user_id == user_id,
                            DailyPlanORM.workspace_id == workspace_id,
                        )
                    )
                )
                orm = result.scalar_one_or_none()
                if not orm:
                    raise NotFoundError(f"DailyPlan {plan_id} not found")

                orm.visibility = visibility.value
                orm.updated_at = datetime.utcnow()
                await session.commit()
                await session.refresh(orm)
                return self._orm_to_model(orm)
        except SQLAlchemyError as exc:
            raise InfrastructureError(
                f"Failed to update visibility of daily plan {plan_id}"
            ) from exc
