"""Saved URL model."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from artefact.db.base import Base


class Url(Base):
    __tablename__ = "urls"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    url = Column(Text, nullable=False)
    title = Column(String(300), nullable=False)
    description = Column(Text)
    favicon = Column(Text)
    screenshot = Column(Text)
    # Deleting a category leaves its URLs uncategorized
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"), index=True)
    workspace_id = Column(Uuid(as_uuid=True), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    workspace = relationship("Workspace", back_populates="urls")
    category = relationship("Category", back_populates="urls")
    added_by = relationship("User")
