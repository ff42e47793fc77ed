"""Database models."""
from artefact.models.user import User
from artefact.models.session import AuthSession
from artefact.models.workspace import Role, Workspace, WorkspaceMember
from artefact.models.category import Category
from artefact.models.url import Url

__all__ = [
    "User",
    "AuthSession",
    "Role",
    "Workspace",
    "WorkspaceMember",
    "Category",
    "Url",
]
