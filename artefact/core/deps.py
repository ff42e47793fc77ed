"""
FastAPI dependencies.

Service objects live on ``app.state`` (built by ``create_app``); these
functions hand them, or per-request managers bound to the request's
database session, to the route handlers.
"""
from datetime import timedelta

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from artefact.core import errors
from artefact.core.config import Settings
from artefact.core.security import PasswordHasher
from artefact.db.sessions import get_db
from artefact.models import AuthSession, User
from artefact.services.authorization import AuthorizationGate
from artefact.services.email_service import EmailService
from artefact.services.session_manager import SessionManager
from artefact.services.verification import VerificationManager
from artefact.services.workspace_service import WorkspaceService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_session_manager(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SessionManager:
    return SessionManager(db, ttl=timedelta(days=settings.SESSION_TTL_DAYS))


def get_verification_manager(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> VerificationManager:
    return VerificationManager(db, ttl=timedelta(hours=settings.VERIFICATION_CODE_TTL_HOURS))


def get_authorization_gate(db: Session = Depends(get_db)) -> AuthorizationGate:
    return AuthorizationGate(db)


def get_workspace_service(db: Session = Depends(get_db)) -> WorkspaceService:
    return WorkspaceService(db)


def get_current_session(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_settings),
) -> AuthSession:
    """Resolve the session cookie; expired and unknown tokens both give 401."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise errors.Unauthenticated("Unauthorized")

    session = sessions.validate(token)
    if session is None:
        raise errors.Unauthenticated("Invalid session")
    return session


def get_current_user(session: AuthSession = Depends(get_current_session)) -> User:
    """
    Dependency to get the verified user behind the session cookie.

    Usage:
        @router.get("/protected")
        def protected_route(current_user: User = Depends(get_current_user)):
            return {"user_id": current_user.id}
    """
    user = session.user
    if user is None or not user.is_verified:
        raise errors.Unauthenticated("User not found or not verified")
    return user
