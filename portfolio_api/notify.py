"""
Outbound notifications for new contact messages.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Protocol

from portfolio_api.db import ContactRecord

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify_contact(self, contact: ContactRecord) -> bool:
        ...


@dataclass
class InMemoryNotifier:
    """Records notifications instead of sending them (tests)."""

    sent: list[ContactRecord] = field(default_factory=list)
    fail: bool = False

    def notify_contact(self, contact: ContactRecord) -> bool:
        if self.fail:
            return False
        self.sent.append(contact)
        return True


class LoggingNotifier:
    """Used when no SMTP server is configured."""

    def notify_contact(self, contact: ContactRecord) -> bool:
        logger.info(
            "New contact message %s from %s <%s>: %s",
            contact.contact_id,
            contact.name,
            contact.email,
            contact.subject,
        )
        return True


def build_contact_email(contact: ContactRecord, sender: str, recipient: str) -> MIMEMultipart:
    msg = MIMEMultipart()
    msg["From"] = sender
    msg["To"] = recipient
    msg["Reply-To"] = contact.email
    msg["Subject"] = f"Portfolio Contact: {contact.subject}"
    body = (
        f"Name: {contact.name}\n"
        f"Email: {contact.email}\n"
        f"Subject: {contact.subject}\n\n"
        f"Message:\n{contact.message}\n"
    )
    msg.attach(MIMEText(body, "plain"))
    return msg


@dataclass
class SmtpNotifier:
    host: str
    port: int
    recipient: str
    username: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = None
    use_ssl: bool = True
    timeout: float = 10.0

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        server.starttls()
        return server

    def notify_contact(self, contact: ContactRecord) -> bool:
        sender = self.sender or self.username or self.recipient
        msg = build_contact_email(contact, sender, self.recipient)
        try:
            with self._connect() as server:
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(sender, [self.recipient], msg.as_string())
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send contact email for %s", contact.contact_id)
            return False
        return True
