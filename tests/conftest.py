from datetime import datetime, timedelta
from types import SimpleNamespace
import uuid

import pytest
from fastapi.testclient import TestClient

from artefact.core.config import Settings
from artefact.core.security import PasswordHasher
from artefact.db.sessions import Database
from artefact.main import create_app
from artefact.models import AuthSession, Role, User, WorkspaceMember
from artefact.services.workspace_service import WorkspaceService


DEFAULT_PASSWORD = "longpass1"


class RecordingEmailService:
    """Stands in for the SMTP-backed EmailService and keeps what was sent."""

    def __init__(self):
        self.sent = []
        self.fail = False
        self.connected = False

    def connect(self):
        self.connected = True

    def close(self):
        self.connected = False

    async def send_verification_email(self, email, code):
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append({"kind": "verification", "to": email, "code": code})

    async def send_team_invite_email(self, email, workspace_name, inviter_name, role, message=None):
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append({
            "kind": "invite",
            "to": email,
            "workspace": workspace_name,
            "inviter": inviter_name,
            "role": role,
            "message": message,
        })

    def last_code(self, email):
        for item in reversed(self.sent):
            if item["kind"] == "verification" and item["to"] == email:
                return item["code"]
        return None


class Factory:
    """Writes fixtures straight to the database, bypassing the API."""

    def __init__(self, database: Database, hasher: PasswordHasher):
        self.database = database
        self.hasher = hasher

    def user(self, email, name="Tester", password=DEFAULT_PASSWORD, verified=True):
        with self.database.session_scope() as db:
            user = User(
                email=email,
                name=name,
                password_hash=self.hasher.hash(password) if password else "",
                email_verified=datetime.utcnow() if verified else None,
            )
            db.add(user)
            db.commit()
            return user.id

    def personal_workspace(self, user_id):
        with self.database.session_scope() as db:
            user = db.get(User, user_id)
            workspace = WorkspaceService(db).create_default_workspace(user)
            db.commit()
            return workspace.id

    def member(self, workspace_id, user_id, role: Role):
        with self.database.session_scope() as db:
            member = WorkspaceMember(workspace_id=workspace_id, user_id=user_id, role=role)
            db.add(member)
            db.commit()
            return member.id

    def session(self, user_id, expires_in=timedelta(days=7), token=None):
        token = token or f"test-token-{user_id}"
        with self.database.session_scope() as db:
            db.add(AuthSession(session_token=token, user_id=user_id, expires_at=datetime.utcnow() + expires_in))
            db.commit()
        return token


def auth(token):
    return {"Cookie": f"session={token}"}


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        BCRYPT_ROUNDS=4,
        LOG_LEVEL="WARNING",
        MAIL_SUPPRESS_SEND=True,
        SIGNUP_EMAIL_FAILURE_POLICY="fail",
    )


@pytest.fixture
def mailer():
    return RecordingEmailService()


@pytest.fixture
def database(settings):
    return Database(settings.DATABASE_URL)


@pytest.fixture
def app(settings, database, mailer):
    return create_app(settings=settings, database=database, email_service=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def factory(client, database, app):
    # depends on client so the lifespan has connected the database
    return Factory(database, app.state.password_hasher)


@pytest.fixture
def db():
    """A standalone connected database session for service-level tests."""
    database = Database("sqlite://")
    database.connect()
    session = database.session()
    try:
        yield session
    finally:
        session.close()
        database.close()


@pytest.fixture
def signed_up(client, mailer):
    """Sign up and verify through the API; returns (user json, session token)."""

    def _signed_up(email="ann@x.com", name="Ann", password=DEFAULT_PASSWORD):
        resp = client.post("/auth/signup", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 200, resp.text
        resp = client.post("/auth/verify", json={"email": email, "code": mailer.last_code(email)})
        assert resp.status_code == 200, resp.text
        token = resp.cookies.get("session")
        client.cookies.clear()
        return resp.json()["user"], token

    return _signed_up


@pytest.fixture
def team(client, factory, signed_up):
    """An owner's workspace with one member of every other role, plus an outsider.

    Returns a namespace with ``workspace_id``, ``tokens`` keyed by role (and
    ``"outsider"``) and ``user_ids`` keyed the same way.
    """
    owner, owner_token = signed_up("owner@x.com", name="Owner")
    workspace_id = client.get("/workspace", headers=auth(owner_token)).json()["workspace"]["id"]

    tokens = {Role.OWNER: owner_token}
    user_ids = {Role.OWNER: owner["id"]}
    for role in (Role.ADMIN, Role.EDITOR, Role.VIEWER):
        user_id = factory.user(f"{role.value.lower()}@x.com", name=role.value.title())
        factory.member(uuid.UUID(workspace_id), user_id, role)
        tokens[role] = factory.session(user_id)
        user_ids[role] = str(user_id)

    outsider_id = factory.user("outsider@x.com", name="Outsider")
    factory.personal_workspace(outsider_id)
    tokens["outsider"] = factory.session(outsider_id)
    user_ids["outsider"] = str(outsider_id)

    return SimpleNamespace(workspace_id=workspace_id, tokens=tokens, user_ids=user_ids)
