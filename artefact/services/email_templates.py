"""HTML bodies for outgoing e-mails."""
from html import escape

from artefact.models import Role


_LAYOUT = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
</head>
<body style="font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; color: #374151; background: #f9fafb; padding: 20px;">
  <div style="max-width: 600px; margin: 0 auto; background: #ffffff; border-radius: 16px; padding: 40px;">
    <h1 style="color: #6366f1; font-size: 28px; margin: 0 0 24px;">ARTEFACT</h1>
    {content}
    <p style="color: #9ca3af; font-size: 12px; margin-top: 32px;">
      You received this e-mail because of activity on your ARTEFACT account.
    </p>
  </div>
</body>
</html>
"""

_ROLE_DESCRIPTIONS = {
    Role.ADMIN: "manage members and all content in the workspace",
    Role.EDITOR: "add, edit and organize URLs and categories",
    Role.VIEWER: "browse the URLs and categories in the workspace",
}


def verification_email(code: str, ttl_hours: int) -> str:
    content = f"""
    <h2 style="font-size: 24px; color: #1f2937;">Verify your email</h2>
    <p>Enter this code to finish creating your account:</p>
    <div style="background: #f3f4f6; border-radius: 12px; padding: 24px; text-align: center; margin: 32px 0;">
      <span style="font-size: 32px; font-weight: bold; letter-spacing: 8px; font-family: monospace; color: #6366f1;">{escape(code)}</span>
    </div>
    <p>The code expires in {ttl_hours} hours. If you did not sign up, ignore this e-mail.</p>
    """
    return _LAYOUT.format(title="Verify Your Email - ARTEFACT", content=content)


def team_invite_email(
    workspace_name: str,
    inviter_name: str,
    role: Role,
    signup_url: str,
    message: str | None = None,
) -> str:
    personal_note = ""
    if message:
        personal_note = (
            '<blockquote style="border-left: 4px solid #6366f1; margin: 24px 0; padding: 8px 16px; color: #4b5563;">'
            f"{escape(message)}</blockquote>"
        )
    content = f"""
    <h2 style="font-size: 24px; color: #1f2937;">You're invited to {escape(workspace_name)}</h2>
    <p><strong>{escape(inviter_name)}</strong> invited you to join as <strong>{role.value.title()}</strong>,
    so you can {_ROLE_DESCRIPTIONS.get(role, "collaborate in the workspace")}.</p>
    {personal_note}
    <p style="margin: 32px 0;">
      <a href="{escape(signup_url, quote=True)}" style="background: #6366f1; color: #ffffff; padding: 12px 24px; border-radius: 8px; text-decoration: none; font-weight: 600;">Accept invitation</a>
    </p>
    """
    return _LAYOUT.format(title=f"Invitation to {escape(workspace_name)} - ARTEFACT", content=content)
