"""
Workspace context model.

Workspace membership is resolved upstream; the backend only needs the
workspace's identity and kind.
"""

from pydantic import BaseModel

from workday.models.enums import PlanVisibility, WorkspaceType


class WorkspaceContext(BaseModel):
    """Active workspace for a request."""

    id: str
    type: WorkspaceType = WorkspaceType.TEAM

    def default_visibility(self, fallback: PlanVisibility) -> PlanVisibility:
        """Plans created in a personal workspace are private."""
        if self.type == WorkspaceType.PERSONAL:
            return PlanVisibility.PRIVATE
        return fallback
