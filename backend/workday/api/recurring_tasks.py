"""
Recurring task template API endpoints.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from workday.api.deps import (
    CurrentUser,
    CurrentWorkspace,
    MaterializationSvc,
    RecurringTaskRepo,
    RecurringTaskSvc,
)
from workday.core.exceptions import (
    BusinessLogicError,
    InvalidDateRangeError,
    NotFoundError,
    ValidationError,
)
from workday.models.recurring_task import (
    OccurrencePreview,
    RecurringTask,
    RecurringTaskCreate,
    RecurringTaskUpdate,
)
from workday.services import recurrence_rules

router = APIRouter()


@router.post("", response_model=RecurringTask, status_code=status.HTTP_201_CREATED)
async def create_recurring_task(
    payload: RecurringTaskCreate,
    user: CurrentUser,
    workspace: CurrentWorkspace,
    repo: RecurringTaskRepo,
) -> RecurringTask:
    """Create a new recurring task template."""
    return await repo.create(user.id, workspace.id, payload)


@router.get("", response_model=list[RecurringTask])
async def list_recurring_tasks(
    user: CurrentUser,
    workspace: CurrentWorkspace,
    repo: RecurringTaskRepo,
    include_inactive: bool = Query(False, description="Include inactive templates"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> list[RecurringTask]:
    """List recurring task templates."""
    return await repo.list(
        user.id,
        workspace.id,
        include_inactive=include_inactive,
        limit=limit,
        offset=offset,
    )


@router.get("/{recurring_task_id}", response_model=RecurringTask)
async def get_recurring_task(
    recurring_task_id: UUID,
    user: CurrentUser,
    workspace: CurrentWorkspace,
    repo: RecurringTaskRepo,
) -> RecurringTask:
    """Get a recurring task template by ID."""
    result = await repo.get(user.id, workspace.id, recurring_task_id)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"RecurringTask {recurring_task_id} not found",
        )
    return result


@router.patch("/{recurring_task_id}", response_model=RecurringTask)
async def update_recurring_task(
    recurring_task_id: UUID,
    update: RecurringTaskUpdate,
    user: CurrentUser,
    workspace: CurrentWorkspace,
    service: RecurringTaskSvc,
) -> RecurringTask:
    """
    Update a recurring task template.

    Instances already materialized are snapshots and keep their values.
    The rule and anchor date are frozen once any instance exists.
    """
    try:
        return await service.update(user.id, workspace.id, recurring_task_id, update)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except BusinessLogicError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.delete("/{recurring_task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recurring_task(
    recurring_task_id: UUID,
    user: CurrentUser,
    workspace: CurrentWorkspace,
    repo: RecurringTaskRepo,
):
    """Deactivate a recurring task template. Existing tasks are kept."""
    deactivated = await repo.deactivate(user.id, workspace.id, recurring_task_id)
    if not deactivated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"RecurringTask {recurring_task_id} not found",
        )


@router.get("/{recurring_task_id}/occurrences", response_model=OccurrencePreview)
async def preview_occurrences(
    recurring_task_id: UUID,
    user: CurrentUser,
    workspace: CurrentWorkspace,
    repo: RecurringTaskRepo,
    service: MaterializationSvc,
    start: date = Query(..., description="First date (inclusive)"),
    end: date = Query(..., description="Last date (inclusive)"),
) -> OccurrencePreview:
    """List the dates a template occurs on in [start, end] without writing anything."""
    try:
        service.validate_range(start, end)
    except InvalidDateRangeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    template = await repo.get(user.id, workspace.id, recurring_task_id)
    if not template:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"RecurringTask {recurring_task_id} not found",
        )

    return OccurrencePreview(
        recurring_task_id=template.id,
        start=start,
        end=end,
        dates=recurrence_rules.occurrences_between(
            template.rule,
            template.start_date,
            start,
            end,
            repeat_until=template.repeat_until,
        ),
    )
