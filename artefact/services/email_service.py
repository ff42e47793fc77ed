"""Outgoing e-mail over SMTP via fastapi-mail."""
from typing import Optional
from urllib.parse import urlencode
import logging

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from artefact.core.config import Settings
from artefact.models import Role
from artefact.services import email_templates

logger = logging.getLogger(__name__)


class EmailService:
    """Sends verification and invitation e-mails.

    Usage:
        mail = EmailService(settings)
        mail.connect()
        await mail.send_verification_email("ann@x.com", "A1B2C3")
        mail.close()
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._mailer: Optional[FastMail] = None

    def connect(self) -> None:
        config = ConnectionConfig(
            MAIL_USERNAME=self.settings.MAIL_USERNAME,
            MAIL_PASSWORD=self.settings.MAIL_PASSWORD,
            MAIL_FROM=self.settings.MAIL_FROM,
            MAIL_FROM_NAME=self.settings.MAIL_FROM_NAME,
            MAIL_PORT=self.settings.MAIL_PORT,
            MAIL_SERVER=self.settings.MAIL_SERVER,
            MAIL_STARTTLS=self.settings.MAIL_STARTTLS,
            MAIL_SSL_TLS=self.settings.MAIL_SSL_TLS,
            USE_CREDENTIALS=bool(self.settings.MAIL_USERNAME),
            VALIDATE_CERTS=self.settings.MAIL_VALIDATE_CERTS,
            TIMEOUT=self.settings.MAIL_TIMEOUT,
            SUPPRESS_SEND=1 if self.settings.MAIL_SUPPRESS_SEND else 0,
        )
        self._mailer = FastMail(config)
        logger.info(
            "Mail transport configured for %s:%s (suppressed=%s)",
            self.settings.MAIL_SERVER, self.settings.MAIL_PORT, self.settings.MAIL_SUPPRESS_SEND,
        )

    def close(self) -> None:
        self._mailer = None

    @property
    def mailer(self) -> FastMail:
        if self._mailer is None:
            raise RuntimeError("EmailService is not connected; call connect() first.")
        return self._mailer

    async def _send(self, recipient: str, subject: str, html: str) -> None:
        message = MessageSchema(
            subject=subject,
            recipients=[recipient],
            body=html,
            subtype=MessageType.html,
        )
        await self.mailer.send_message(message)

    async def send_verification_email(self, email: str, code: str) -> None:
        html = email_templates.verification_email(code, self.settings.VERIFICATION_CODE_TTL_HOURS)
        await self._send(email, "Verify Your Email - ARTEFACT", html)
        logger.info("Verification email sent to %s", email)

    async def send_team_invite_email(
        self,
        email: str,
        workspace_name: str,
        inviter_name: str,
        role: Role,
        message: Optional[str] = None,
    ) -> None:
        signup_url = f"{self.settings.FRONTEND_URL.rstrip('/')}/?{urlencode({'invite': email})}"
        html = email_templates.team_invite_email(workspace_name, inviter_name, role, signup_url, message)
        await self._send(email, f"You're invited to join {workspace_name} on ARTEFACT", html)
        logger.info("Invitation to %s sent to %s", workspace_name, email)
