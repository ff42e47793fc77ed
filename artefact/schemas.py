"""
Response payloads shared by several routers.

Keys are camelCase to match what the web client consumes.
"""
from typing import Any, Dict, Optional

from artefact.models import Category, Role, Url, User, Workspace, WorkspaceMember


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def user_summary(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {"id": str(user.id), "name": user.name, "email": user.email}


def workspace_summary(workspace: Workspace, role: Optional[Role] = None) -> Dict[str, Any]:
    payload = {
        "id": str(workspace.id),
        "name": workspace.name,
        "description": workspace.description,
    }
    if role is not None:
        payload["role"] = role.value
    return payload


def category_payload(category: Category, with_counts: bool = False) -> Dict[str, Any]:
    payload = {
        "id": str(category.id),
        "name": category.name,
        "color": category.color,
        "icon": category.icon,
    }
    if with_counts:
        payload["urlCount"] = len(category.urls)
        payload["createdAt"] = _iso(category.created_at)
    return payload


def url_payload(url: Url) -> Dict[str, Any]:
    return {
        "id": str(url.id),
        "url": url.url,
        "title": url.title,
        "description": url.description,
        "favicon": url.favicon,
        "screenshot": url.screenshot,
        "categoryId": str(url.category_id) if url.category_id else None,
        "category": category_payload(url.category) if url.category else None,
        "addedBy": user_summary(url.added_by),
        "workspaceId": str(url.workspace_id),
        "createdAt": _iso(url.created_at),
    }


def member_payload(member: WorkspaceMember) -> Dict[str, Any]:
    return {
        "id": str(member.id),
        "role": member.role.value,
        "joinedAt": _iso(member.joined_at),
        "workspaceId": str(member.workspace_id),
        "user": user_summary(member.user),
    }
