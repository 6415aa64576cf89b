"""
Newsletters component ports.
"""

from __future__ import annotations

from typing import Protocol

from newsletter_service.core.entities import Subscriber, SubscriptionStatus
from newsletter_service.core.ports.email import EmailPort

NewsletterEmailSenderPort = EmailPort


class ConfirmedSubscriberSourcePort(Protocol):
    def list_by_status(self, status: SubscriptionStatus) -> list[Subscriber]:
        ...


__all__ = [
    "ConfirmedSubscriberSourcePort",
    "NewsletterEmailSenderPort",
]
