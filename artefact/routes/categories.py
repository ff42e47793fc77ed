"""Category routes."""
from typing import Optional
import logging
import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from artefact.core import errors
from artefact.core.deps import get_authorization_gate, get_current_user, get_workspace_service
from artefact.db.sessions import get_db, unit_of_work
from artefact.models import Category, Url, User
from artefact.schemas import category_payload, user_summary, workspace_summary
from artefact.services.authorization import AuthorizationGate, Permission
from artefact.services.workspace_service import WorkspaceService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["Categories"])


class CategoryRequest(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


def _clean(request: CategoryRequest):
    name = (request.name or "").strip()
    color = (request.color or "").strip()
    if not name or not color:
        raise errors.ValidationError("Name and color are required")
    return name, color, (request.icon or None)


def _name_taken(db: Session, workspace_id, name: str, exclude_id=None) -> bool:
    query = db.query(Category).filter(
        Category.workspace_id == workspace_id,
        func.lower(Category.name) == name.lower(),
    )
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return db.query(query.exists()).scalar()


def _get_category(db: Session, category_id: uuid.UUID, workspace_id) -> Category:
    category = db.query(Category).filter(
        Category.id == category_id,
        Category.workspace_id == workspace_id,
    ).first()
    if category is None:
        raise errors.NotFound("Category not found")
    return category


@router.get("")
def list_categories(
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
    workspaces: WorkspaceService = Depends(get_workspace_service),
):
    """List the categories of the current workspace with their URL counts."""
    member = gate.require(current_user.id, Permission.VIEW_CONTENT, workspace_id)
    workspace = member.workspace

    return {
        "user": user_summary(current_user),
        "currentWorkspace": workspace_summary(workspace),
        "workspaces": [workspace_summary(ws, role) for ws, role in workspaces.list_for_user(current_user.id)],
        "categories": [category_payload(c, with_counts=True) for c in workspace.categories],
        "currentUserRole": member.role.value,
    }


@router.post("")
def create_category(
    request: CategoryRequest,
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
):
    name, color, icon = _clean(request)
    member = gate.require(current_user.id, Permission.EDIT_CONTENT, workspace_id)

    if _name_taken(db, member.workspace_id, name):
        raise errors.Conflict("Category with this name already exists")

    with unit_of_work(db):
        category = Category(name=name, color=color, icon=icon, workspace_id=member.workspace_id)
        db.add(category)

    logger.info("Category %s created in workspace %s", category.id, member.workspace_id)
    return category_payload(category, with_counts=True)


@router.put("/{category_id}")
def update_category(
    category_id: uuid.UUID,
    request: CategoryRequest,
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
):
    name, color, icon = _clean(request)
    member = gate.require(current_user.id, Permission.EDIT_CONTENT, workspace_id)
    category = _get_category(db, category_id, member.workspace_id)

    if _name_taken(db, member.workspace_id, name, exclude_id=category.id):
        raise errors.Conflict("Category with this name already exists")

    with unit_of_work(db):
        category.name = name
        category.color = color
        category.icon = icon

    return category_payload(category, with_counts=True)


@router.delete("/{category_id}")
def delete_category(
    category_id: uuid.UUID,
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
):
    """Delete a category; its URLs stay in the workspace, uncategorized."""
    member = gate.require(current_user.id, Permission.EDIT_CONTENT, workspace_id)
    category = _get_category(db, category_id, member.workspace_id)

    with unit_of_work(db):
        uncategorized = (
            db.query(Url)
            .filter(Url.category_id == category.id)
            .update({Url.category_id: None}, synchronize_session="fetch")
        )
        db.delete(category)

    logger.info("Category %s deleted, %d URLs uncategorized", category_id, uncategorized)
    return {
        "message": "Category deleted successfully",
        "uncategorizedUrls": uncategorized,
    }
