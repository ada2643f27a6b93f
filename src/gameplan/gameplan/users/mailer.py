from __future__ import annotations

import smtplib
from email.message import EmailMessage
from typing import Optional, Protocol

from ..core.exceptions import BackendUnreachableError
from ..logging_config import get_logger

logger = get_logger(__name__)

RESET_SUBJECT = "Reset your GAMEPLAN password"


class ResetMailer(Protocol):
    def send_reset(self, email: str, token: str) -> None:
        raise NotImplementedError


def compose_reset_message(*, from_email: str, to_email: str, reset_url: str, token: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = from_email
    msg["To"] = to_email
    msg["Subject"] = RESET_SUBJECT
    msg.set_content(
        "We received a request to reset your password.\n\n"
        f"Open this link to choose a new one:\n{reset_url}?token={token}\n\n"
        "If you did not ask for this, you can ignore this email."
    )
    return msg


class SmtpResetMailer(ResetMailer):
    """Sends the reset link through an SMTP relay."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        from_email: str,
        reset_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
    ):
        self._host = host
        self._port = port
        self._from_email = from_email
        self._reset_url = reset_url
        self._username = username
        self._password = password
        self._use_tls = use_tls

    def send_reset(self, email: str, token: str) -> None:
        msg = compose_reset_message(from_email=self._from_email, to_email=email, reset_url=self._reset_url, token=token)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=10) as smtp:
                if self._use_tls:
                    smtp.starttls()
                if self._username:
                    smtp.login(self._username, self._password or "")
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Sending reset email failed: %s", e)
            raise BackendUnreachableError("The reset email could not be sent. Please try again later.") from e


class LogResetMailer(ResetMailer):
    """Development stand-in: the link goes to the log instead of an inbox."""

    def __init__(self, reset_url: str = "http://localhost:5000/reset-password"):
        self._reset_url = reset_url

    def send_reset(self, email: str, token: str) -> None:
        logger.info("Password reset link for %s: %s?token=%s", email, self._reset_url, token)
