"""Dashboard route."""
from typing import Optional
import uuid

from fastapi import APIRouter, Depends

from artefact.core.deps import get_authorization_gate, get_current_user, get_workspace_service
from artefact.models import User
from artefact.schemas import category_payload, url_payload, user_summary, workspace_summary
from artefact.services.authorization import AuthorizationGate, Permission
from artefact.services.workspace_service import WorkspaceService


router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("")
def get_dashboard(
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    gate: AuthorizationGate = Depends(get_authorization_gate),
    workspaces: WorkspaceService = Depends(get_workspace_service),
):
    """Everything the dashboard page renders in one call."""
    member = gate.require(current_user.id, Permission.VIEW_CONTENT, workspace_id)
    workspace = member.workspace
    return {
        "user": user_summary(current_user),
        "currentWorkspace": workspace_summary(workspace),
        "workspaces": [workspace_summary(ws, role) for ws, role in workspaces.list_for_user(current_user.id)],
        "currentUserRole": member.role.value,
        "urls": [url_payload(u) for u in workspace.urls],
        "categories": [category_payload(c) for c in workspace.categories],
    }
