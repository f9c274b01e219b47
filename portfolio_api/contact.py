"""
Contact inbox: public submissions and their admin-side management.
"""

from __future__ import annotations

import logging
import math
import uuid
from typing import Any, Mapping, Optional

from portfolio_api.db import ContactRecord, ContactStatus, DbClient
from portfolio_api.errors import NotFound, RateLimited, ValidationError
from portfolio_api.notify import Notifier
from portfolio_api.rate_limit import RateLimiter
from portfolio_api.schemas import ContactSubmission, validate_input

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many contact form submissions, please try again later."


class ContactInbox:
    def __init__(self, db: DbClient, limiter: RateLimiter, notifier: Notifier):
        self.db = db
        self.limiter = limiter
        self.notifier = notifier

    def submit(self, fields: Mapping[str, Any], source_ip: Optional[str]) -> ContactRecord:
        """
        Store a message from the public contact form.

        The rate limit is checked before the fields are validated. A failed
        notification is logged; the message still counts as submitted.
        """
        if not self.limiter.hit(source_ip or "unknown"):
            logger.info("Rate limited contact submission from %s", source_ip)
            raise RateLimited(RATE_LIMIT_MESSAGE)

        submission = validate_input(ContactSubmission, fields)
        contact = self.db.create_contact(
            ContactRecord(
                contact_id=uuid.uuid4().hex,
                name=submission.name,
                email=submission.email,
                subject=submission.subject,
                message=submission.message,
                ip_address=source_ip,
            )
        )

        if not self.notifier.notify_contact(contact):
            logger.warning("Failed to send contact email notification for %s", contact.contact_id)
        return contact

    def list(self, page: int = 1, page_size: int = 10) -> tuple[list[ContactRecord], dict]:
        page = max(page, 1)
        page_size = max(page_size, 1)
        contacts = self.db.list_contacts(offset=(page - 1) * page_size, limit=page_size)
        total = self.db.count_contacts()
        pagination = {
            "current": page,
            "pages": math.ceil(total / page_size),
            "total": total,
        }
        return contacts, pagination

    def set_status(self, contact_id: str, status: Any) -> ContactRecord:
        try:
            new_status = ContactStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in ContactStatus)
            raise ValidationError(
                errors=[{"field": "status", "message": f"Status must be one of: {allowed}"}]
            ) from None
        contact = self.db.update_contact_status(contact_id, new_status)
        if contact is None:
            raise NotFound("Contact message not found")
        return contact

    def delete(self, contact_id: str) -> None:
        if not self.db.delete_contact(contact_id):
            raise NotFound("Contact message not found")
