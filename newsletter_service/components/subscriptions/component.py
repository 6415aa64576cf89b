"""
Subscriptions component.

Subscribe workflow and confirmation redemption.

Key behaviors:
- Raw input is parsed into SubscriberName / SubscriberEmail before storage
- Subscriber row and token row are written in one transaction
- Confirmation email is sent only after commit; a failed send leaves the
  subscriber stored as pending_confirmation
- Tokens: 25 alphanumeric characters from the `secrets` CSPRNG
- Confirmation is idempotent: redeeming a token twice succeeds both times

Duplicate sign-ups with the same email are not deduplicated, and tokens do
not expire.
"""

from __future__ import annotations

import secrets
import string
from datetime import UTC, datetime
from urllib.parse import urlencode
from uuid import uuid4

from newsletter_service.components.subscriptions.models import (
    ConfirmInput,
    ConfirmOutput,
    ConfirmStorageError,
    InsertSubscriberError,
    MalformedTokenError,
    SendConfirmationEmailError,
    StoreTokenError,
    SubscribeInput,
    SubscribeOutput,
    SubscribeValidationError,
    SubscriptionsConfig,
    TransactionCommitError,
    UnknownTokenError,
)
from newsletter_service.components.subscriptions.ports import (
    ConfirmationEmailSenderPort,
    UnitOfWorkFactory,
)
from newsletter_service.core.entities import (
    Subscriber,
    SubscriptionStatus,
    SubscriptionToken,
    can_transition,
)
from newsletter_service.core.ports.db import StorageError
from newsletter_service.core.ports.email import EmailSendError
from newsletter_service.domain.subscriber import (
    NewSubscriber,
    SubscriberValidationError,
)

TOKEN_LENGTH = 25
TOKEN_ALPHABET = string.ascii_letters + string.digits


# --- Pure Functions ---


def generate_subscription_token(length: int = TOKEN_LENGTH) -> str:
    """Generate a random case-sensitive alphanumeric token."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def is_well_formed_token(token: str | None) -> bool:
    return (
        token is not None
        and len(token) == TOKEN_LENGTH
        and all(c in TOKEN_ALPHABET for c in token)
    )


def build_confirmation_link(
    base_url: str,
    token: str,
    path: str = "/subscriptions/confirm",
) -> str:
    base = base_url.rstrip("/")
    return f"{base}{path}?{urlencode({'subscription_token': token})}"


def render_welcome_email(confirmation_link: str) -> tuple[str, str]:
    """Return (html_body, text_body) for the confirmation email."""
    html_body = (
        "Welcome to our newsletter!<br />"
        f'Click <a href="{confirmation_link}">here</a> to confirm your subscription.'
    )
    text_body = (
        "Welcome to our newsletter!\n"
        f"Visit {confirmation_link} to confirm your subscription."
    )
    return html_body, text_body


def create_subscriber(new_subscriber: NewSubscriber) -> Subscriber:
    return Subscriber(
        id=uuid4(),
        email=str(new_subscriber.email),
        name=str(new_subscriber.name),
        subscribed_at=datetime.now(UTC),
        status=SubscriptionStatus.PENDING_CONFIRMATION,
    )


# --- Run Handlers ---


def run_subscribe(
    inp: SubscribeInput,
    uow_factory: UnitOfWorkFactory,
    email_sender: ConfirmationEmailSenderPort,
    *,
    config: SubscriptionsConfig | None = None,
) -> SubscribeOutput:
    """
    Store a new pending subscriber and email them a confirmation link.

    Raises:
        SubscribeValidationError: raw email or name invalid (nothing stored)
        InsertSubscriberError: subscriber insert failed (rolled back)
        StoreTokenError: token insert failed (rolled back)
        TransactionCommitError: commit failed (nothing stored)
        SendConfirmationEmailError: stored, but the email was not sent
    """
    cfg = config or SubscriptionsConfig()

    try:
        new_subscriber = NewSubscriber.parse(inp.email, inp.name)
    except SubscriberValidationError as e:
        raise SubscribeValidationError(e.field, e.reason) from e

    subscriber = create_subscriber(new_subscriber)
    token = generate_subscription_token()

    with uow_factory() as uow:
        try:
            uow.subscribers.insert(subscriber)
        except StorageError as e:
            raise InsertSubscriberError() from e

        try:
            uow.subscription_tokens.insert(
                SubscriptionToken(token=token, subscriber_id=subscriber.id)
            )
        except StorageError as e:
            raise StoreTokenError() from e

        try:
            uow.commit()
        except StorageError as e:
            raise TransactionCommitError() from e

    confirmation_link = build_confirmation_link(cfg.base_url, token, cfg.confirmation_path)
    html_body, text_body = render_welcome_email(confirmation_link)

    try:
        email_sender.send_email(
            new_subscriber.email,
            cfg.welcome_subject,
            html_body,
            text_body,
        )
    except EmailSendError as e:
        raise SendConfirmationEmailError(subscriber.id) from e

    return SubscribeOutput(subscriber_id=subscriber.id, confirmation_link=confirmation_link)


def run_confirm(
    inp: ConfirmInput,
    uow_factory: UnitOfWorkFactory,
) -> ConfirmOutput:
    """
    Mark the subscriber behind a confirmation token as confirmed.

    Raises:
        MalformedTokenError: token is not 25 alphanumeric characters
        UnknownTokenError: no subscriber for this token
        ConfirmStorageError: lookup or update failed
    """
    if not is_well_formed_token(inp.token):
        raise MalformedTokenError()

    with uow_factory() as uow:
        try:
            subscriber_id = uow.subscription_tokens.get_subscriber_id(inp.token)
        except StorageError as e:
            raise ConfirmStorageError("retrieve subscriber id from token") from e

        if subscriber_id is None:
            raise UnknownTokenError()

        try:
            subscriber = uow.subscribers.get_by_id(subscriber_id)
        except StorageError as e:
            raise ConfirmStorageError("retrieve subscriber") from e

        if subscriber is None:
            raise UnknownTokenError()

        already_confirmed = subscriber.status == SubscriptionStatus.CONFIRMED
        if can_transition(subscriber.status, SubscriptionStatus.CONFIRMED):
            try:
                uow.subscribers.update_status(
                    subscriber_id, subscriber.status, SubscriptionStatus.CONFIRMED
                )
                uow.commit()
            except StorageError as e:
                raise ConfirmStorageError("mark subscriber as confirmed") from e

    return ConfirmOutput(subscriber_id=subscriber_id, already_confirmed=already_confirmed)
