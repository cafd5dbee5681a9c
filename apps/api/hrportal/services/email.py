"""
Outbound email.

``EmailSender`` is the collaborator the auth flows depend on. ``SmtpEmailSender``
delivers over SMTP when credentials are configured and otherwise only logs
the message (local development). Delivery failures are logged and reported
as ``False``; they never raise to the caller.
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional, Protocol

from hrportal.core.config import settings

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send(self, to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
        ...


class SmtpEmailSender:

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: Optional[bool] = None,
        sender: Optional[str] = None,
    ):
        self.host = host or settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = username or settings.smtp_user
        self.password = password or settings.smtp_password
        self.use_tls = settings.smtp_use_tls if use_tls is None else use_tls
        self.sender = sender or settings.smtp_from

    def send(self, to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
        if not (self.host and self.username and self.password):
            logger.info("SMTP not configured; email to %s not sent (subject: %s)", to, subject)
            return True

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        if text:
            msg.attach(MIMEText(text, "plain"))
        msg.attach(MIMEText(html, "html"))

        try:
            context = ssl.create_default_context()
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port, context=context) as server:
                    server.login(self.username, self.password)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(self.host, self.port) as server:
                    if self.use_tls:
                        server.starttls(context=context)
                    server.login(self.username, self.password)
                    server.send_message(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", to)
            return False

        logger.info("Email sent to %s (subject: %s)", to, subject)
        return True


def password_reset_email(reset_url: str) -> dict:
    """Subject and bodies for the password reset message."""
    subject = "Reset your HR Portal password"
    safe_url = escape(reset_url, quote=True)
    html = f"""\
<!DOCTYPE html>
<html>
  <body style="font-family: Segoe UI, Tahoma, sans-serif; background-color: #f8fafc; padding: 32px;">
    <h2 style="color: #1e293b;">Reset your password</h2>
    <p style="color: #475569;">We received a request to reset your password. Use the link below to choose a new one:</p>
    <p><a href="{safe_url}" style="background: #4169E1; color: white; padding: 12px 24px; border-radius: 8px; text-decoration: none;">Reset password</a></p>
    <p style="color: #64748b; font-size: 14px;">This link expires in 1 hour. If you did not request a reset, you can ignore this email.</p>
  </body>
</html>
"""
    text = (
        "We received a request to reset your password.\n\n"
        f"Reset it here: {reset_url}\n\n"
        "This link expires in 1 hour. If you did not request a reset, you can ignore this email.\n"
    )
    return {"subject": subject, "html": html, "text": text}
