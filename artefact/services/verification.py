"""Email verification codes.

A code is a 6-character uppercase alphanumeric string stored on the user
together with its expiry. Issuing a new code overwrites the old one.
"""
from datetime import datetime, timedelta
from typing import Callable
import enum
import logging

from sqlalchemy.orm import Session

from artefact.core.security import generate_verification_code, normalize_verification_code
from artefact.models import User

logger = logging.getLogger(__name__)


class VerificationOutcome(enum.Enum):
    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCH = "mismatch"

    @property
    def ok(self) -> bool:
        return self is VerificationOutcome.VERIFIED

    @property
    def message(self) -> str:
        return _OUTCOME_MESSAGES[self]


_OUTCOME_MESSAGES = {
    VerificationOutcome.VERIFIED: "Email verified successfully",
    VerificationOutcome.NOT_FOUND: "Invalid verification request",
    VerificationOutcome.EXPIRED: "Verification code has expired",
    VerificationOutcome.MISMATCH: "Invalid verification code",
}


class VerificationManager:
    """Issue and check e-mail verification codes.

    Usage:
        verifier = VerificationManager(db, ttl=timedelta(hours=24))
        code = verifier.issue(user)
        outcome = verifier.check(user.email, "a1b2c3")

    Like the session manager, this only flushes; commit belongs to the caller.
    """

    def __init__(
        self,
        db: Session,
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.db = db
        self.ttl = ttl
        self.clock = clock

    def issue(self, user: User) -> str:
        code = generate_verification_code()
        user.verification_code = code
        user.code_expires = self.clock() + self.ttl
        self.db.flush()
        logger.info("Verification code issued for user %s", user.id)
        return code

    def check(self, email: str, submitted_code: str) -> VerificationOutcome:
        code = normalize_verification_code(submitted_code)
        user = self.db.query(User).filter(User.email == email).first()

        if user is None or not user.verification_code or not user.code_expires:
            return VerificationOutcome.NOT_FOUND

        # An expired code stays in place so the caller can report it as expired
        if user.code_expires <= self.clock():
            logger.warning("Expired verification code submitted for user %s", user.id)
            return VerificationOutcome.EXPIRED

        if user.verification_code != code:
            logger.warning("Verification code mismatch for user %s", user.id)
            return VerificationOutcome.MISMATCH

        # Conditional on the code still being there: of two concurrent
        # submissions only one clears it.
        cleared = (
            self.db.query(User)
            .filter(User.id == user.id, User.verification_code == code)
            .update(
                {
                    User.email_verified: self.clock(),
                    User.verification_code: None,
                    User.code_expires: None,
                },
                synchronize_session="fetch",
            )
        )
        if cleared != 1:
            return VerificationOutcome.NOT_FOUND

        logger.info("Email verified for user %s", user.id)
        return VerificationOutcome.VERIFIED
