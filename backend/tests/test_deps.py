"""
Tests for request context dependencies.
"""

import pytest
from fastapi import HTTPException

from workday.api.deps import get_current_user, get_current_workspace
from workday.infrastructure.local.mock_auth import MockAuthProvider
from workday.models.enums import PlanVisibility, WorkspaceType


@pytest.mark.asyncio
async def test_workspace_defaults_to_team():
    workspace = await get_current_workspace(x_workspace_id=" ws-1 ", x_workspace_type=None)

    assert workspace.id == "ws-1"
    assert workspace.type == WorkspaceType.TEAM
    assert workspace.default_visibility(PlanVisibility.TEAM) == PlanVisibility.TEAM


@pytest.mark.asyncio
async def test_personal_workspace_defaults_to_private():
    workspace = await get_current_workspace(x_workspace_id="ws-1", x_workspace_type="Personal")

    assert workspace.type == WorkspaceType.PERSONAL
    assert workspace.default_visibility(PlanVisibility.TEAM) == PlanVisibility.PRIVATE


@pytest.mark.asyncio
async def test_missing_workspace_is_rejected():
    with pytest.raises(HTTPException) as exc_info:
        await get_current_workspace(x_workspace_id=None, x_workspace_type=None)

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_bearer_token_is_user_id():
    user = await get_current_user(
        authorization="Bearer test_user", auth_provider=MockAuthProvider(enabled=True)
    )

    assert user.id == "test_user"
    assert user.email == "test@example.com"


@pytest.mark.asyncio
async def test_unknown_token_gets_derived_user():
    user = await get_current_user(
        authorization="Bearer alice", auth_provider=MockAuthProvider(enabled=True)
    )

    assert user.id == "alice"
    assert user.email == "alice@example.com"


@pytest.mark.asyncio
async def test_malformed_header_is_rejected():
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(
            authorization="Token abc", auth_provider=MockAuthProvider(enabled=True)
        )

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_disabled_auth_returns_dev_user():
    user = await get_current_user(authorization=None, auth_provider=MockAuthProvider())

    assert user.id == "dev_user"
