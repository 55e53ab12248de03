"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status

from workday.core.config import Settings, get_settings
from workday.interfaces.auth_provider import IAuthProvider, User
from workday.interfaces.daily_plan_repository import IDailyPlanRepository
from workday.interfaces.recurring_task_repository import IRecurringTaskRepository
from workday.interfaces.rollover_service import IRolloverService
from workday.interfaces.task_repository import ITaskRepository
from workday.models.enums import WorkspaceType
from workday.models.workspace import WorkspaceContext
from workday.services.materialization_service import MaterializationService
from workday.services.recurring_task_service import RecurringTaskService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_recurring_task_repository() -> IRecurringTaskRepository:
    """Get recurring task repository instance."""
    settings = get_settings()
    if settings.is_gcp:
        raise NotImplementedError("Recurring task repository not implemented for GCP")
    else:
        from workday.infrastructure.local.recurring_task_repository import (
            SqliteRecurringTaskRepository,
        )
        return SqliteRecurringTaskRepository()


@lru_cache()
def get_daily_plan_repository() -> IDailyPlanRepository:
    """Get daily plan repository instance."""
    settings = get_settings()
    if settings.is_gcp:
        raise NotImplementedError("Daily plan repository not implemented for GCP")
    else:
        from workday.infrastructure.local.daily_plan_repository import (
            SqliteDailyPlanRepository,
        )
        return SqliteDailyPlanRepository()


@lru_cache()
def get_task_repository() -> ITaskRepository:
    """Get task repository instance."""
    settings = get_settings()
    if settings.is_gcp:
        raise NotImplementedError("Task repository not implemented for GCP")
    else:
        from workday.infrastructure.local.task_repository import SqliteTaskRepository
        return SqliteTaskRepository()


@lru_cache()
def get_rollover_service() -> Optional[IRolloverService]:
    """Get rollover service instance, or None when rollover is disabled."""
    settings = get_settings()
    if not settings.ROLLOVER_ENABLED:
        return None
    if settings.is_gcp:
        raise NotImplementedError("Rollover service not implemented for GCP")
    else:
        from workday.infrastructure.local.rollover_service import SqliteRolloverService
        return SqliteRolloverService(get_daily_plan_repository())


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    from workday.infrastructure.local.mock_auth import MockAuthProvider
    return MockAuthProvider(enabled=True)


# ===========================================
# Service Dependencies
# ===========================================


def get_materialization_service(
    recurring_repo: IRecurringTaskRepository = Depends(get_recurring_task_repository),
    plan_repo: IDailyPlanRepository = Depends(get_daily_plan_repository),
    task_repo: ITaskRepository = Depends(get_task_repository),
    rollover: Optional[IRolloverService] = Depends(get_rollover_service),
    settings: Settings = Depends(get_settings),
) -> MaterializationService:
    """Build the materialization service from the configured repositories."""
    return MaterializationService(
        recurring_repo=recurring_repo,
        plan_repo=plan_repo,
        task_repo=task_repo,
        rollover=rollover,
        max_range_days=settings.MAX_RANGE_DAYS,
    )


def get_recurring_task_service(
    recurring_repo: IRecurringTaskRepository = Depends(get_recurring_task_repository),
    task_repo: ITaskRepository = Depends(get_task_repository),
) -> RecurringTaskService:
    """Build the recurring task service from the configured repositories."""
    return RecurringTaskService(recurring_repo=recurring_repo, task_repo=task_repo)


# ===========================================
# Request Context
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> User:
    """
    Get current authenticated user.

    With authentication disabled, returns the development user.
    """
    if not auth_provider.is_enabled():
        return User(id="dev_user", email="dev@example.com", display_name="Developer")

    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
        )

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    try:
        return await auth_provider.verify_token(token)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )


async def get_current_workspace(
    x_workspace_id: Annotated[Optional[str], Header()] = None,
    x_workspace_type: Annotated[Optional[str], Header()] = None,
) -> WorkspaceContext:
    """
    Resolve the active workspace from request headers.

    Membership checks happen upstream; a request without a workspace is rejected.
    """
    if not x_workspace_id or not x_workspace_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Workspace-Id header required",
        )

    workspace_type = WorkspaceType.TEAM
    if x_workspace_type:
        try:
            workspace_type = WorkspaceType(x_workspace_type.strip().lower())
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown workspace type: {x_workspace_type}",
            )

    return WorkspaceContext(id=x_workspace_id.strip(), type=workspace_type)


# Type aliases for cleaner dependency injection
RecurringTaskRepo = Annotated[IRecurringTaskRepository, Depends(get_recurring_task_repository)]
DailyPlanRepo = Annotated[IDailyPlanRepository, Depends(get_daily_plan_repository)]
MaterializationSvc = Annotated[MaterializationService, Depends(get_materialization_service)]
RecurringTaskSvc = Annotated[RecurringTaskService, Depends(get_recurring_task_service)]
AppSettings = Annotated[Settings, Depends(get_settings)]
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentWorkspace = Annotated[WorkspaceContext, Depends(get_current_workspace)]
