"""
Newsletters component.

Fans a newsletter issue out to confirmed subscribers.

Key behaviors:
- Only status=confirmed rows receive the issue
- Stored emails are re-validated; invalid rows are skipped with a warning
- The first failed send aborts the broadcast (no per-subscriber resume state)
"""

from __future__ import annotations

import logging

from newsletter_service.components.newsletters.models import (
    NewsletterDeliveryError,
    PublishInput,
    PublishOutput,
    SkippedSubscriber,
    SubscriberQueryError,
)
from newsletter_service.components.newsletters.ports import (
    ConfirmedSubscriberSourcePort,
    NewsletterEmailSenderPort,
)
from newsletter_service.core.entities import SubscriptionStatus
from newsletter_service.core.ports.db import StorageError
from newsletter_service.core.ports.email import EmailSendError
from newsletter_service.domain.subscriber import (
    SubscriberEmail,
    SubscriberValidationError,
)

logger = logging.getLogger(__name__)


def run_publish(
    inp: PublishInput,
    subscribers: ConfirmedSubscriberSourcePort,
    email_sender: NewsletterEmailSenderPort,
) -> PublishOutput:
    """
    Send the issue to every confirmed subscriber.

    Raises:
        SubscriberQueryError: confirmed subscribers could not be read
        NewsletterDeliveryError: a send failed; earlier sends are not undone
    """
    try:
        confirmed = subscribers.list_by_status(SubscriptionStatus.CONFIRMED)
    except StorageError as e:
        raise SubscriberQueryError() from e

    delivered = 0
    skipped: list[SkippedSubscriber] = []

    for subscriber in confirmed:
        try:
            email = SubscriberEmail.parse(subscriber.email)
        except SubscriberValidationError as e:
            logger.warning(
                "Skipping a confirmed subscriber. Their stored contact details are invalid. "
                "(subscriber_id=%s, reason=%s)",
                subscriber.id,
                e.reason,
            )
            skipped.append(SkippedSubscriber(subscriber_id=subscriber.id, reason=e.reason))
            continue

        try:
            email_sender.send_email(email, inp.title, inp.html, inp.text)
        except EmailSendError as e:
            raise NewsletterDeliveryError(str(email), delivered) from e
        delivered += 1

    return PublishOutput(delivered=delivered, skipped=skipped)
