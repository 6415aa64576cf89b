"""
Newsletters component models.

Broadcast of a newsletter issue to every confirmed subscriber.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class PublishInput:
    title: str
    html: str
    text: str


@dataclass(frozen=True)
class SkippedSubscriber:
    """A confirmed row whose stored email no longer validates."""

    subscriber_id: UUID
    reason: str


@dataclass(frozen=True)
class PublishOutput:
    delivered: int
    skipped: list[SkippedSubscriber] = field(default_factory=list)


# --- Error Types ---


class PublishError(Exception):
    """Base publish error."""

    pass


class SubscriberQueryError(PublishError):
    def __init__(self) -> None:
        super().__init__("Failed to retrieve confirmed subscribers.")


class NewsletterDeliveryError(PublishError):
    """A send failed; the broadcast was aborted part-way."""

    def __init__(self, recipient: str, delivered: int) -> None:
        self.recipient = recipient
        self.delivered = delivered
        super().__init__(f"Failed to send newsletter issue to {recipient}")
