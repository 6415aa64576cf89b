"""
Newsletters component.

Broadcasts a newsletter issue to confirmed subscribers.
"""

from newsletter_service.components.newsletters.component import run_publish
from newsletter_service.components.newsletters.models import (
    NewsletterDeliveryError,
    PublishError,
    PublishInput,
    PublishOutput,
    SkippedSubscriber,
    SubscriberQueryError,
)
from newsletter_service.components.newsletters.ports import (
    ConfirmedSubscriberSourcePort,
    NewsletterEmailSenderPort,
)

__all__ = [
    "run_publish",
    "PublishInput",
    "PublishOutput",
    "SkippedSubscriber",
    "PublishError",
    "SubscriberQueryError",
    "NewsletterDeliveryError",
    "ConfirmedSubscriberSourcePort",
    "NewsletterEmailSenderPort",
]
