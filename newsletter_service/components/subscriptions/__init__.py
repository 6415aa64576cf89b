"""
Subscriptions component.

Subscribe workflow (validate, store subscriber + token atomically, send
confirmation link) and confirmation redemption.
"""

from newsletter_service.components.subscriptions.component import (
    TOKEN_LENGTH,
    build_confirmation_link,
    create_subscriber,
    generate_subscription_token,
    is_well_formed_token,
    render_welcome_email,
    run_confirm,
    run_subscribe,
)
from newsletter_service.components.subscriptions.models import (
    ConfirmError,
    ConfirmInput,
    ConfirmOutput,
    ConfirmStorageError,
    InsertSubscriberError,
    MalformedTokenError,
    SendConfirmationEmailError,
    StoreTokenError,
    SubscribeError,
    SubscribeInput,
    SubscribeOutput,
    SubscribeValidationError,
    SubscriptionsConfig,
    TransactionCommitError,
    UnknownTokenError,
)

__all__ = [
    # Component
    "run_subscribe",
    "run_confirm",
    # Pure functions
    "generate_subscription_token",
    "is_well_formed_token",
    "build_confirmation_link",
    "render_welcome_email",
    "create_subscriber",
    # Constants
    "TOKEN_LENGTH",
    # Input/Output
    "SubscribeInput",
    "SubscribeOutput",
    "ConfirmInput",
    "ConfirmOutput",
    "SubscriptionsConfig",
    # Errors
    "SubscribeError",
    "SubscribeValidationError",
    "InsertSubscriberError",
    "StoreTokenError",
    "TransactionCommitError",
    "SendConfirmationEmailError",
    "ConfirmError",
    "MalformedTokenError",
    "UnknownTokenError",
    "ConfirmStorageError",
]
