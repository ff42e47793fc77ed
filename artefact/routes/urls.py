"""Saved URL routes."""
from typing import Optional
import logging
import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from artefact.core import errors
from artefact.core.deps import get_authorization_gate, get_current_user
from artefact.db.sessions import get_db, unit_of_work
from artefact.models import Category, Url, User
from artefact.schemas import url_payload
from artefact.services.authorization import AuthorizationGate, Permission
from artefact.utils.urls import is_valid_url, normalize_url


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/urls", tags=["URLs"])


class CreateUrlRequest(BaseModel):
    url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[uuid.UUID] = Field(default=None, alias="categoryId")


class UpdateUrlRequest(BaseModel):
    url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[uuid.UUID] = Field(default=None, alias="categoryId")


def _checked_url(raw: str) -> str:
    url = normalize_url(raw)
    if not is_valid_url(url):
        raise errors.ValidationError("Invalid URL format")
    return url


def _checked_category(db: Session, category_id: Optional[uuid.UUID], workspace_id) -> Optional[uuid.UUID]:
    if category_id is None:
        return None
    exists = db.query(Category.id).filter(
        Category.id == category_id,
        Category.workspace_id == workspace_id,
    ).first()
    if exists is None:
        raise errors.ValidationError("Category does not belong to this workspace")
    return category_id


def _get_url(db: Session, url_id: uuid.UUID, workspace_id) -> Url:
    url = db.query(Url).filter(Url.id == url_id, Url.workspace_id == workspace_id).first()
    if url is None:
        raise errors.NotFound("URL not found or access denied")
    return url


@router.get("")
def list_urls(
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    gate: AuthorizationGate = Depends(get_authorization_gate),
):
    """List the workspace's URLs, newest first."""
    member = gate.require(current_user.id, Permission.VIEW_CONTENT, workspace_id)
    return [url_payload(u) for u in member.workspace.urls]


@router.post("")
def create_url(
    request: CreateUrlRequest,
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
):
    if not request.url or not request.url.strip():
        raise errors.ValidationError("URL is required")
    link = _checked_url(request.url)

    member = gate.require(current_user.id, Permission.EDIT_CONTENT, workspace_id)
    category_id = _checked_category(db, request.category_id, member.workspace_id)

    with unit_of_work(db):
        url = Url(
            url=link,
            # Metadata extraction is not available, so fall back to what the client sent
            title=(request.title or "").strip() or "Untitled",
            description=request.description or "",
            category_id=category_id,
            workspace_id=member.workspace_id,
            user_id=current_user.id,
        )
        db.add(url)

    logger.info("URL %s saved to workspace %s", url.id, member.workspace_id)
    return url_payload(url)


@router.put("/{url_id}")
def update_url(
    url_id: uuid.UUID,
    request: UpdateUrlRequest,
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
):
    """Update the given fields; an explicit ``categoryId: null`` uncategorizes."""
    member = gate.require(current_user.id, Permission.EDIT_CONTENT, workspace_id)
    url = _get_url(db, url_id, member.workspace_id)

    with unit_of_work(db):
        if request.url:
            url.url = _checked_url(request.url)
        if request.title:
            url.title = request.title.strip() or url.title
        if request.description is not None:
            url.description = request.description
        if "category_id" in request.model_fields_set:
            url.category_id = _checked_category(db, request.category_id, member.workspace_id)

    return url_payload(url)


@router.delete("/{url_id}")
def delete_url(
    url_id: uuid.UUID,
    workspace_id: Optional[uuid.UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_authorization_gate),
):
    member = gate.require(current_user.id, Permission.EDIT_CONTENT, workspace_id)
    url = _get_url(db, url_id, member.workspace_id)

    with unit_of_work(db):
        db.delete(url)

    return {"message": "URL deleted successfully"}
