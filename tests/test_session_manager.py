from datetime import datetime, timedelta

import pytest

from artefact.models import AuthSession, User
from artefact.services.session_manager import SessionManager, SessionStatus


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, delta):
        self.now += delta


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 1, 12, 0, 0))


@pytest.fixture
def user(db):
    user = User(email="ann@x.com", name="Ann", password_hash="x", email_verified=datetime.utcnow())
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def sessions(db, clock):
    return SessionManager(db, ttl=timedelta(days=7), clock=clock)


def test_create_persists_token_with_seven_day_expiry(db, sessions, user, clock):
    token = sessions.create(user.id)
    db.commit()

    row = db.query(AuthSession).filter(AuthSession.session_token == token).one()
    assert row.user_id == user.id
    assert row.expires_at == clock.now + timedelta(days=7)


def test_validate_returns_session_with_user(db, sessions, user):
    token = sessions.create(user.id)
    db.commit()

    session = sessions.validate(token)
    assert session is not None
    assert session.user.id == user.id
    assert session.user.email == "ann@x.com"


def test_unknown_and_missing_tokens_are_not_found(sessions):
    assert sessions.lookup("nope").status is SessionStatus.NOT_FOUND
    assert sessions.lookup("").status is SessionStatus.NOT_FOUND
    assert sessions.lookup(None).status is SessionStatus.NOT_FOUND
    assert sessions.validate("nope") is None


def test_expired_session_is_deleted_on_lookup(db, sessions, user, clock):
    token = sessions.create(user.id)
    db.commit()

    clock.advance(timedelta(days=7, seconds=1))
    first = sessions.lookup(token)
    assert first.status is SessionStatus.EXPIRED
    assert first.session is None
    assert db.query(AuthSession).count() == 0

    # The row is gone, so the second miss is a plain not-found
    assert sessions.lookup(token).status is SessionStatus.NOT_FOUND


def test_session_is_still_valid_at_its_exact_expiry(db, sessions, user, clock):
    token = sessions.create(user.id)
    db.commit()

    clock.advance(timedelta(days=7))
    assert sessions.lookup(token).is_valid


def test_validation_does_not_extend_expiry(db, sessions, user, clock):
    token = sessions.create(user.id)
    db.commit()
    original = sessions.validate(token).expires_at

    clock.advance(timedelta(days=3))
    assert sessions.validate(token).expires_at == original
    assert db.query(AuthSession).count() == 1


def test_delete_is_idempotent(db, sessions, user):
    token = sessions.create(user.id)
    db.commit()

    assert sessions.delete(token) is True
    db.commit()
    assert sessions.delete(token) is False
    assert sessions.delete(None) is False
    assert sessions.validate(token) is None
