"""Team membership routes."""
from typing import Optional
import logging
import uuid

import anyio
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from artefact.core import errors
from artefact.core.deps import (
    get_authorization_gate,
    get_current_user,
    get_email_service,
    get_workspace_service,
)
from artefact.db.sessions import get_db, unit_of_work
from artefact.models import User, WorkspaceMember
from artefact.schemas import member_payload, user_summary, workspace_summary
from artefact.services.authorization import AuthorizationGate, Permission
from artefact.services.email_service import EmailService
from artefact.services.workspace_service import WorkspaceService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/team", tags=["Team"])


class InviteRequest(BaseModel):
    email: EmailStr
    role: str
    message: Optional[str] = None


class RoleUpdateRequest(BaseModel):
    role: str


def _get_member(db: Session, member_id: uuid.UUID, workspace_id) -> WorkspaceMember:
    member = db.query(WorkspaceMember).filter(
        WorkspaceMember.id == member_id,
        WorkspaceMember.workspace_id == workspace_id,
    ).first()
    if member is None:
        raise errors.NotFound("Member not found")
    return member


@router.get("")
def get_team(
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
    workspaces: WorkspaceService = Depends(get_workspace_service),
):
    """Members of the current workspace, oldest first."""
    member = gate.require(current_user.id, Permission.VIEW_CONTENT, workspace_id)
    members = (
        db.query(WorkspaceMember)
        .filter(WorkspaceMember.workspace_id == member.workspace_id)
        .order_by(WorkspaceMember.joined_at.asc())
        .all()
    )
    return {
        "user": user_summary(current_user),
        "currentWorkspace": workspace_summary(member.workspace),
        "workspaces": [workspace_summary(ws, role) for ws, role in workspaces.list_for_user(current_user.id)],
        "members": [member_payload(m) for m in members],
        "currentUserRole": member.role.value,
    }


@router.post("/invite")
def invite_member(
    request: InviteRequest,
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
    mail: EmailService = Depends(get_email_service),
):
    """
    Add someone to the workspace and e-mail them an invitation.

    Unknown addresses get a placeholder account that is claimed on signup.
    A failed invitation e-mail is logged; the membership is kept.
    """
    inviter = gate.require(current_user.id, Permission.MANAGE_MEMBERS, workspace_id)
    role = gate.assignable_role(request.role)
    workspace = inviter.workspace

    already_member = (
        db.query(WorkspaceMember)
        .join(User, WorkspaceMember.user_id == User.id)
        .filter(WorkspaceMember.workspace_id == workspace.id, User.email == request.email)
        .first()
    )
    if already_member is not None:
        raise errors.Conflict("User is already a member of this workspace")

    try:
        with unit_of_work(db):
            invited = db.query(User).filter(User.email == request.email).first()
            if invited is None:
                invited = User(email=request.email, password_hash="")
                db.add(invited)
                db.flush()
            db.add(WorkspaceMember(user_id=invited.id, workspace_id=workspace.id, role=role))
    except IntegrityError:
        raise errors.Conflict("User is already a member")

    inviter_name = current_user.name or current_user.email
    logger.info("User %s invited %s to workspace %s as %s", current_user.id, request.email, workspace.id, role.value)

    try:
        anyio.from_thread.run(
            mail.send_team_invite_email, request.email, workspace.name, inviter_name, role, request.message,
        )
    except Exception:
        logger.exception("Invitation email to %s failed", request.email)

    return {
        "message": "Invitation sent successfully",
        "details": {
            "email": request.email,
            "workspace": workspace.name,
            "role": role.value,
            "inviter": inviter_name,
        },
    }


@router.put("/members/{member_id}")
def update_member_role(
    member_id: uuid.UUID,
    request: RoleUpdateRequest,
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
):
    caller = gate.require(current_user.id, Permission.MANAGE_MEMBERS, workspace_id)
    member = _get_member(db, member_id, caller.workspace_id)
    gate.ensure_not_owner(member, "Cannot change owner role")
    role = gate.assignable_role(request.role)

    with unit_of_work(db):
        previous = member.role
        member.role = role

    logger.info("Member %s role changed %s -> %s by %s", member.id, previous.value, role.value, current_user.id)
    return member_payload(member)


@router.delete("/members/{member_id}")
def remove_member(
    member_id: uuid.UUID,
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
):
    caller = gate.require(current_user.id, Permission.MANAGE_MEMBERS, workspace_id)
    member = _get_member(db, member_id, caller.workspace_id)
    gate.ensure_not_owner(member, "Cannot remove workspace owner")

    with unit_of_work(db):
        db.delete(member)

    logger.info("Member %s removed from workspace %s by %s", member_id, caller.workspace_id, current_user.id)
    return {"message": "Member removed successfully"}
