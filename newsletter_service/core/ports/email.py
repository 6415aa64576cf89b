"""
Email transport interface.

Protocol-based interface for sending transactional emails. Used by the
subscription workflow (confirmation links) and the newsletter broadcast.

Key requirements:
- One recipient per send
- HTML and plain text bodies on every message
- Failures raise EmailSendError; callers decide whether to abort

Implementation strategies:
1. EmailClient: Postmark-style HTTP API (production)
2. DevEmailAdapter: logs and records messages (local runs, tests)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from newsletter_service.domain.subscriber import SubscriberEmail


@dataclass(frozen=True)
class EmailMessage:
    """A single outbound message, in the transport's wire shape."""

    sender: SubscriberEmail
    recipient: SubscriberEmail
    subject: str
    html_body: str
    text_body: str

    def __post_init__(self) -> None:
        if not self.subject:
            raise ValueError("Subject is required")
        if not self.html_body and not self.text_body:
            raise ValueError("At least one of html_body or text_body is required")

    def to_payload(self) -> dict[str, Any]:
        return {
            "From": str(self.sender),
            "To": str(self.recipient),
            "Subject": self.subject,
            "TextBody": self.text_body,
            "HtmlBody": self.html_body,
        }


@dataclass
class EmailResult:
    """Result of a successful send."""

    recipient: str
    message_id: str | None = None
    sent_at: datetime | None = None

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        return cls(
            recipient=recipient,
            message_id=message_id,
            sent_at=datetime.now(UTC),
        )


class EmailPort(Protocol):
    """
    Email sending interface.

    Implementations:
    - EmailClient: HTTP transport
    - DevEmailAdapter: in-memory log
    """

    def send_email(
        self,
        recipient: SubscriberEmail,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> EmailResult:
        """
        Send a transactional email.

        Args:
            recipient: Validated address of the recipient
            subject: Email subject line
            html_body: HTML body content
            text_body: Plain text body

        Returns:
            EmailResult for the accepted message

        Raises:
            EmailSendError: the transport rejected the message or timed out
        """
        ...


# --- Error Types ---


class EmailError(Exception):
    """Base exception for email-related errors."""

    pass


class EmailSendError(EmailError):
    """Failed to send email."""

    def __init__(self, recipient: str, error: str, status_code: int | None = None) -> None:
        self.recipient = recipient
        self.error = error
        self.status_code = status_code
        super().__init__(f"Failed to send email to {recipient}: {error}")
