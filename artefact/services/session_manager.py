"""Session manager.

Issues opaque session tokens and resolves them back to users. Expiry is
fixed at creation and enforced lazily: an expired row is deleted the first
time it is looked up, there is no background sweep.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional
import enum
import logging

from sqlalchemy.orm import Session

from artefact.core.security import generate_session_token
from artefact.models import AuthSession

logger = logging.getLogger(__name__)


class SessionStatus(enum.Enum):
    VALID = "valid"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class SessionLookup:
    """Tagged result of a token lookup; ``session`` is set only when valid."""

    status: SessionStatus
    session: Optional[AuthSession] = None

    @property
    def is_valid(self) -> bool:
        return self.status is SessionStatus.VALID


class SessionManager:
    """Create, validate and delete login sessions.

    Usage:
        sessions = SessionManager(db, ttl=timedelta(days=7))
        token = sessions.create(user.id)
        session = sessions.validate(token)  # None when unknown or expired

    ``create`` and ``delete`` only flush; the caller owns the commit. The
    lazy delete in ``lookup`` commits on its own because it happens on a
    read path.
    """

    def __init__(
        self,
        db: Session,
        ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.db = db
        self.ttl = ttl
        self.clock = clock

    def create(self, user_id) -> str:
        token = generate_session_token()
        self.db.add(AuthSession(
            session_token=token,
            user_id=user_id,
            expires_at=self.clock() + self.ttl,
        ))
        self.db.flush()
        logger.info("Session created for user %s", user_id)
        return token

    def lookup(self, token: Optional[str]) -> SessionLookup:
        if not token:
            return SessionLookup(SessionStatus.NOT_FOUND)

        session = self.db.query(AuthSession).filter(AuthSession.session_token == token).first()
        if session is None:
            return SessionLookup(SessionStatus.NOT_FOUND)

        if session.expires_at < self.clock():
            user_id = session.user_id
            self.db.delete(session)
            self.db.commit()
            logger.info("Expired session removed for user %s", user_id)
            return SessionLookup(SessionStatus.EXPIRED)

        return SessionLookup(SessionStatus.VALID, session)

    def validate(self, token: Optional[str]) -> Optional[AuthSession]:
        """Return the live session for ``token``, or None."""
        return self.lookup(token).session

    def delete(self, token: Optional[str]) -> bool:
        """Remove the session row if it exists. Safe to call repeatedly."""
        if not token:
            return False
        removed = (
            self.db.query(AuthSession)
            .filter(AuthSession.session_token == token)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return removed > 0
