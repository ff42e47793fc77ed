"""Workspace settings routes."""
from typing import Optional
import logging
import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from artefact.core import errors
from artefact.core.deps import get_authorization_gate, get_current_user
from artefact.db.sessions import get_db, unit_of_work
from artefact.models import User
from artefact.schemas import workspace_summary
from artefact.services.authorization import AuthorizationGate, Permission


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspace", tags=["Workspace"])


class WorkspaceUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None


@router.get("")
def get_workspace(
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    gate: AuthorizationGate = Depends(get_authorization_gate),
):
    member = gate.require(current_user.id, Permission.VIEW_CONTENT, workspace_id)
    return {
        "workspace": workspace_summary(member.workspace),
        "currentUserRole": member.role.value,
    }


@router.patch("")
def update_workspace(
    request: WorkspaceUpdateRequest,
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
):
    """Rename or describe the workspace. Owner only."""
    member = gate.require(current_user.id, Permission.MANAGE_WORKSPACE, workspace_id)
    workspace = member.workspace

    if request.name is not None and not request.name.strip():
        raise errors.ValidationError("Workspace name cannot be empty")

    with unit_of_work(db):
        if request.name is not None:
            workspace.name = request.name.strip()
        if request.description is not None:
            workspace.description = request.description

    logger.info("Workspace %s updated by %s", workspace.id, current_user.id)
    return {"workspace": workspace_summary(workspace)}
