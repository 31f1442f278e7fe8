"""
Outbound account messages.

Message builders return plain OutboundMessage values; notifiers deliver
them. Codes are sent in plaintext in the body on purpose: the user types
them back into the app.
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional

import aiosmtplib

from shared.config import Settings

from .models import OutboundMessage

logger = logging.getLogger(__name__)

CODE_STYLE = (
    "color: #3B82F6; font-size: 2rem; text-align: center; padding: 1rem; "
    "background: #F3F4F6; border-radius: 0.5rem;"
)


# =============================================================================
# Message builders
# =============================================================================


def verification_message(
    to_address: str, name: str, code: str, minutes: int, resend: bool = False
) -> OutboundMessage:
    heading = "Email Verification" if resend else "Welcome to OnlySwap!"
    intro = (
        "Here's your new verification code:"
        if resend
        else "Please verify your email address by entering this code:"
    )
    html = (
        f"<h2>{heading}</h2>"
        f"<p>Hi {escape(name)},</p>"
        f"<p>{intro}</p>"
        f'<h1 style="{CODE_STYLE}">{code}</h1>'
        f"<p>This code will expire in {minutes} minutes.</p>"
        "<p>If you didn't create this account, please ignore this email.</p>"
    )
    return OutboundMessage(
        to_address=to_address,
        subject="Verify Your Email Address",
        plain_text=f"Your verification code is: {code}",
        html=html,
    )


def password_reset_message(to_address: str, name: str, code: str, minutes: int) -> OutboundMessage:
    html = (
        "<h2>Password Reset Request</h2>"
        f"<p>Hi {escape(name)},</p>"
        "<p>You requested a password reset. Use this code to reset your password:</p>"
        f'<h1 style="{CODE_STYLE}">{code}</h1>'
        f"<p>This code will expire in {minutes} minutes.</p>"
        "<p>If you didn't request this, please ignore this email.</p>"
    )
    return OutboundMessage(
        to_address=to_address,
        subject="Password Reset Code",
        plain_text=f"Your password reset code is: {code}",
        html=html,
    )


def status_change_message(
    to_address: str,
    name: str,
    subject: str,
    summary: str,
    reason: Optional[str] = None,
    contact: Optional[str] = None,
) -> OutboundMessage:
    """Notice sent when an admin changes an account's standing."""
    lines = [summary]
    if reason:
        lines.append(f"Reason: {reason}")
    if contact:
        lines.append(f"If you have questions, contact {contact}.")
    html = f"<h2>{escape(subject)}</h2><p>Hi {escape(name)},</p>" + "".join(
        f"<p>{escape(line)}</p>" for line in lines
    )
    return OutboundMessage(
        to_address=to_address,
        subject=subject,
        plain_text="\n".join(lines),
        html=html,
    )


# =============================================================================
# Notifiers
# =============================================================================


class SmtpNotifier:
    """INotifier that delivers mail over SMTP."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_email: str,
        from_name: str,
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.from_name = from_name
        self.use_tls = use_tls

    async def send(self, to_address: str, subject: str, plain_text: str, html: str) -> None:
        message = MIMEMultipart("alternative")
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = to_address
        message["Subject"] = subject
        message.attach(MIMEText(plain_text, "plain"))
        message.attach(MIMEText(html, "html"))

        await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            username=self.username or None,
            password=self.password or None,
            start_tls=self.use_tls,
        )
        logger.info(f"[Email/SMTP] Sent '{subject}' to {to_address}")


class LoggingNotifier:
    """INotifier for development: writes messages to the log instead of sending."""

    async def send(self, to_address: str, subject: str, plain_text: str, html: str) -> None:
        logger.info(f"[Email/Log] To: {to_address} | Subject: {subject} | {plain_text}")


def build_notifier(settings: Settings) -> "SmtpNotifier | LoggingNotifier":
    """Pick SMTP when it is configured, otherwise log messages."""
    if settings.smtp_host:
        return SmtpNotifier(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            from_email=settings.email_from,
            from_name=settings.email_from_name,
            use_tls=settings.smtp_use_tls,
        )
    logger.warning("[Email] SMTP not configured, outbound mail will only be logged")
    return LoggingNotifier()
