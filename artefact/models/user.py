"""User model."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
from artefact.db.base import Base


class User(Base):
    """User account.

    ``verification_code`` and ``code_expires`` are set and cleared together;
    both are null once the e-mail address is verified.
    """

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # Empty for accounts created by a team invitation until they sign up
    password_hash = Column(String, nullable=False, default="")
    name = Column(String(100))
    email_verified = Column(DateTime)
    verification_code = Column(String(6))
    code_expires = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    memberships = relationship("WorkspaceMember", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_verified(self) -> bool:
        return self.email_verified is not None

    @property
    def is_placeholder(self) -> bool:
        """Invited but never signed up."""
        return not self.password_hash and self.email_verified is None
