"""Authentication routes."""
import logging

import anyio
from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, EmailStr
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from artefact.core import errors
from artefact.core.config import Settings
from artefact.core.deps import (
    get_current_user,
    get_email_service,
    get_password_hasher,
    get_session_manager,
    get_settings,
    get_verification_manager,
    get_workspace_service,
)
from artefact.core.security import PasswordHasher, is_well_formed_code, normalize_verification_code
from artefact.db.sessions import get_db, unit_of_work
from artefact.models import User
from artefact.schemas import user_summary
from artefact.services.email_service import EmailService
from artefact.services.session_manager import SessionManager
from artefact.services.verification import VerificationManager
from artefact.services.workspace_service import WorkspaceService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

DASHBOARD_PATH = "/dashboard"


# Request schemas
class SignupRequest(BaseModel):
    name: str
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class VerifyRequest(BaseModel):
    email: EmailStr
    code: str


class ResendVerificationRequest(BaseModel):
    email: EmailStr


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.session_max_age,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="lax",
    )


def _undo_signup(db: Session, user: User, claimed: bool) -> None:
    """Revert a committed signup whose verification e-mail never went out."""
    with unit_of_work(db):
        if claimed:
            # Back to an unclaimed invitation
            user.name = None
            user.password_hash = ""
            user.verification_code = None
            user.code_expires = None
        else:
            db.delete(user)


@router.post("/signup")
def signup(
    request: SignupRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    hasher: PasswordHasher = Depends(get_password_hasher),
    verifier: VerificationManager = Depends(get_verification_manager),
    mail: EmailService = Depends(get_email_service),
):
    """
    Register a new account.

    - Stores the user with a hashed password and a pending verification code
    - E-mails the code; the account stays inactive until verified

    The user is committed before the e-mail goes out so no write lock is
    held during the SMTP round trip. Under the ``fail`` policy a failed
    send reverts the signup.
    """
    name = request.name.strip()
    if not name or not request.password:
        raise errors.ValidationError("Missing required fields")
    if len(request.password) < settings.MIN_PASSWORD_LENGTH:
        raise errors.ValidationError(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters long"
        )

    password_hash = hasher.hash(request.password)

    try:
        with unit_of_work(db):
            user = db.query(User).filter(User.email == request.email).first()
            if user is not None and not user.is_placeholder:
                raise errors.Conflict("Email already exists")
            # An invited placeholder account is claimed by signing up
            claimed = user is not None
            if user is None:
                user = User(email=request.email)
                db.add(user)
            user.name = name
            user.password_hash = password_hash
            db.flush()
            code = verifier.issue(user)
            user_id, email = user.id, user.email
    except IntegrityError:
        raise errors.Conflict("Email already exists")

    payload = {
        "message": "User created successfully. Please check your email for verification.",
        "userId": str(user_id),
    }
    try:
        anyio.from_thread.run(mail.send_verification_email, email, code)
    except Exception as exc:
        if settings.SIGNUP_EMAIL_FAILURE_POLICY != "warn":
            logger.exception("Verification email to %s failed; signup aborted", email)
            _undo_signup(db, user, claimed)
            raise errors.Internal("Failed to send verification email") from exc
        logger.warning("Verification email to %s failed: %s", email, exc)
        payload["warning"] = "Account created but the verification email could not be sent. Request a new code."

    logger.info("User %s signed up", user_id)
    return payload


@router.post("/verify")
def verify_email(
    request: VerifyRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    verifier: VerificationManager = Depends(get_verification_manager),
    sessions: SessionManager = Depends(get_session_manager),
    workspaces: WorkspaceService = Depends(get_workspace_service),
):
    """
    Confirm an e-mail address with its code.

    Verification, the personal workspace and the first session are written
    in one transaction.
    """
    code = normalize_verification_code(request.code)
    if not code:
        raise errors.ValidationError("Missing email or verification code")
    if not is_well_formed_code(code):
        raise errors.ValidationError("Invalid verification code format")

    with unit_of_work(db):
        outcome = verifier.check(request.email, code)
        if not outcome.ok:
            raise errors.ValidationError(outcome.message)

        user = db.query(User).filter(User.email == request.email).first()
        if user is None:
            raise errors.NotFound("User not found")

        workspaces.create_default_workspace(user)
        token = sessions.create(user.id)

    set_session_cookie(response, token, settings)
    return {
        "message": "Email verified successfully",
        "user": user_summary(user),
        "redirectTo": DASHBOARD_PATH,
    }


@router.post("/resend-verification")
def resend_verification(
    request: ResendVerificationRequest,
    db: Session = Depends(get_db),
    verifier: VerificationManager = Depends(get_verification_manager),
    mail: EmailService = Depends(get_email_service),
):
    """Issue a fresh code; any earlier code stops working."""
    user = db.query(User).filter(User.email == request.email).first()
    if user is None or user.is_placeholder:
        raise errors.NotFound("User not found")
    if user.is_verified:
        raise errors.ValidationError("Email already verified")

    email = user.email
    with unit_of_work(db):
        code = verifier.issue(user)

    try:
        anyio.from_thread.run(mail.send_verification_email, email, code)
    except Exception as exc:
        logger.exception("Verification email to %s failed", email)
        raise errors.Internal("Failed to send verification email") from exc

    return {"message": "Verification code sent successfully"}


@router.post("/login")
def login(
    request: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    hasher: PasswordHasher = Depends(get_password_hasher),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Login with email and password.

    - Validates credentials
    - Sets the session cookie
    """
    user = db.query(User).filter(User.email == request.email).first()
    if user is None or not hasher.verify(request.password, user.password_hash):
        raise errors.Unauthenticated("Incorrect email or password")
    if not user.is_verified:
        raise errors.Forbidden("Email not verified")

    with unit_of_work(db):
        token = sessions.create(user.id)

    set_session_cookie(response, token, settings)
    logger.info("User %s logged in", user.id)
    return {
        "message": "Logged in successfully",
        "user": user_summary(user),
        "redirectTo": DASHBOARD_PATH,
    }


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    sessions: SessionManager = Depends(get_session_manager),
):
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        with unit_of_work(db):
            if sessions.delete(token):
                logger.info("Session ended by logout")

    clear_session_cookie(response, settings)
    return {"message": "Logged out successfully"}


@router.get("/me")
def get_me(current_user: User = Depends(get_current_user)):
    """
    Get current authenticated user information.

    Protected endpoint - requires a valid session cookie.
    """
    return {"user": user_summary(current_user)}
