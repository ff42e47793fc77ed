"""Workspace provisioning and lookups."""
from typing import List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from artefact.models import Category, Role, User, Workspace, WorkspaceMember

logger = logging.getLogger(__name__)


# (name, color, icon) created in every new personal workspace
STARTER_CATEGORIES = [
    ("Development", "#6366f1", "💻"),
    ("Design", "#ec4899", "🎨"),
    ("Marketing", "#06b6d4", "📈"),
    ("Research", "#10b981", "🔍"),
    ("Tools", "#f59e0b", "🛠️"),
]


class WorkspaceService:
    def __init__(self, db: Session):
        self.db = db

    def owned_workspace(self, user_id) -> Optional[Workspace]:
        member = (
            self.db.query(WorkspaceMember)
            .filter(WorkspaceMember.user_id == user_id, WorkspaceMember.role == Role.OWNER)
            .order_by(WorkspaceMember.joined_at.asc())
            .first()
        )
        return member.workspace if member else None

    def create_default_workspace(self, user: User) -> Workspace:
        """Create the user's personal workspace with OWNER membership.

        Returns the existing one if the user already owns a workspace, so a
        retried signup flow never produces a second.
        """
        existing = self.owned_workspace(user.id)
        if existing is not None:
            return existing

        workspace = Workspace(
            name=f"{user.name or 'User'}'s Workspace",
            description="Your personal workspace",
        )
        workspace.members.append(WorkspaceMember(user_id=user.id, role=Role.OWNER))
        for name, color, icon in STARTER_CATEGORIES:
            workspace.categories.append(Category(name=name, color=color, icon=icon))

        self.db.add(workspace)
        self.db.flush()
        logger.info("Default workspace %s created for user %s", workspace.id, user.id)
        return workspace

    def list_for_user(self, user_id) -> List[Tuple[Workspace, Role]]:
        members = (
            self.db.query(WorkspaceMember)
            .filter(WorkspaceMember.user_id == user_id)
            .order_by(WorkspaceMember.joined_at.asc())
            .all()
        )
        return [(m.workspace, m.role) for m in members]
