"""Security utilities for password hashing and opaque token generation."""
import re
import secrets
import string

from passlib.context import CryptContext


VERIFICATION_CODE_LENGTH = 6
VERIFICATION_CODE_ALPHABET = string.ascii_uppercase + string.digits
VERIFICATION_CODE_PATTERN = re.compile(r"^[A-Z0-9]{6}$")

# 32 random bytes -> 43 URL-safe characters
SESSION_TOKEN_BYTES = 32


class PasswordHasher:
    """Salted bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Hash a password."""
        return self._context.hash(_truncate_for_bcrypt(password))

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a plain password against a hashed password.

        Empty or malformed hashes (invited accounts that never set a
        password) never verify.
        """
        if not hashed_password:
            return False
        try:
            return self._context.verify(_truncate_for_bcrypt(plain_password), hashed_password)
        except ValueError:
            return False


def _truncate_for_bcrypt(password: str) -> str:
    """Truncate password to bcrypt's 72-byte limit.

    Bcrypt rejects inputs longer than 72 bytes. We truncate on the UTF-8
    encoded bytes and decode with 'ignore' to avoid splitting multi-byte
    sequences.
    """
    b = password.encode("utf-8")[:72]
    return b.decode("utf-8", "ignore")


def generate_session_token() -> str:
    """Return a long, URL-safe, unguessable session token."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


def generate_verification_code() -> str:
    """Return a short human-typeable code, e.g. ``A1B2C3``."""
    return "".join(
        secrets.choice(VERIFICATION_CODE_ALPHABET)
        for _ in range(VERIFICATION_CODE_LENGTH)
    )


def normalize_verification_code(code: str) -> str:
    return str(code).strip().upper()


def is_well_formed_code(code: str) -> bool:
    """Check a normalized code against the 6-character alphanumeric format."""
    return bool(VERIFICATION_CODE_PATTERN.match(code))
