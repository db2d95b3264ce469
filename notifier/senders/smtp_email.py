"""SMTP email sender.

Delivers rendered notification emails via an SMTP relay.  One attempt per
call: retries belong to the job runner, which re-invokes the whole
idempotent send with the same key.

Safety: recipient addresses are never logged.
"""
from __future__ import annotations

import logging
import smtplib
import uuid
from email.message import EmailMessage
from email.utils import make_msgid

from notifier.senders.base import SendOutcome
from notifier.templates.email import split_subject

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """Send rendered emails through one SMTP relay."""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int = 587,
        *,
        from_email: str = "noreply@notifications.local",
        timeout_s: float = 10.0,
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.from_email = from_email
        self.timeout_s = timeout_s

    def build_message(self, recipient: str, rendered: str) -> EmailMessage:
        subject, body = split_subject(rendered)
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = recipient
        msg["Message-ID"] = make_msgid(idstring=uuid.uuid4().hex)
        msg.set_content(body)
        return msg

    def send(self, recipient: str, body: str) -> SendOutcome:
        """Hand one message to the relay.  Never raises for SMTP errors."""
        msg = self.build_message(recipient, body)
        message_id = msg["Message-ID"]

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout_s) as server:
                refused = server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("SMTP delivery failed: %s", type(exc).__name__)
            return SendOutcome.failure(f"smtp error: {type(exc).__name__}")

        if refused:
            logger.warning("SMTP relay refused %d recipient(s)", len(refused))
            return SendOutcome.failure("smtp relay refused recipient")

        logger.info("Delivered email via SMTP relay %s:%d", self.smtp_host, self.smtp_port)
        return SendOutcome.success(message_id)
