"""
Dev Email Adapter.

Logs emails instead of sending them. Used for local development and tests.

Key behaviors:
- Logs email details through the standard logger
- Keeps the most recent emails in memory for test assertions
- Can be told to fail, to exercise delivery-error paths
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from newsletter_service.core.ports.email import EmailResult, EmailSendError
from newsletter_service.domain.subscriber import SubscriberEmail

logger = logging.getLogger(__name__)

# Oldest records are dropped past this many.
MAX_SENT_EMAILS = 1000


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    html_body: str
    text_body: str
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """
    Dev email adapter that logs instead of sending.

    Implements EmailPort.
    """

    sent_emails: deque[SentEmail] = field(
        default_factory=lambda: deque(maxlen=MAX_SENT_EMAILS)
    )

    # Recipients for which send_email raises EmailSendError
    failing_recipients: set[str] = field(default_factory=set)
    fail_all: bool = False

    log_level: int = logging.INFO
    body_preview_length: int = 100

    def send_email(
        self,
        recipient: SubscriberEmail,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> EmailResult:
        if self.fail_all or str(recipient) in self.failing_recipients:
            raise EmailSendError(str(recipient), "dev adapter configured to fail")

        message_id = f"dev-{uuid4().hex[:12]}"
        self.sent_emails.append(
            SentEmail(
                id=message_id,
                recipient=str(recipient),
                subject=subject,
                html_body=html_body,
                text_body=text_body,
                logged_at=datetime.now(UTC),
            )
        )

        preview = text_body[: self.body_preview_length]
        if len(text_body) > self.body_preview_length:
            preview += "..."
        logger.log(
            self.log_level,
            "EMAIL (dev): To=%s, Subject=%s, Body=%s, MessageID=%s",
            recipient,
            subject,
            preview,
            message_id,
        )

        return EmailResult.success(str(recipient), message_id=message_id)

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
