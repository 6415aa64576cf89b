"""
Subscriptions component models.

Inputs, outputs, configuration and error types for the subscribe workflow
and confirmation redemption.

State machine: Subscriber (pending_confirmation → confirmed)
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

# --- Input Models ---


@dataclass(frozen=True)
class SubscribeInput:
    """Raw sign-up fields, as received from the form."""

    email: str
    name: str


@dataclass(frozen=True)
class ConfirmInput:
    """Raw confirmation token, as received from the query string."""

    token: str


# --- Output Models ---


@dataclass(frozen=True)
class SubscribeOutput:
    subscriber_id: UUID
    confirmation_link: str


@dataclass(frozen=True)
class ConfirmOutput:
    subscriber_id: UUID
    already_confirmed: bool = False  # Idempotent success


# --- Configuration ---


@dataclass(frozen=True)
class SubscriptionsConfig:
    base_url: str = "http://127.0.0.1:8000"
    confirmation_path: str = "/subscriptions/confirm"
    welcome_subject: str = "Welcome!"


# --- Error Types ---


class SubscribeError(Exception):
    """Base subscribe workflow error."""

    pass


class SubscribeValidationError(SubscribeError):
    """Raw email or name rejected; storage was not touched."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(reason)


class InsertSubscriberError(SubscribeError):
    def __init__(self) -> None:
        super().__init__("Failed to insert new subscriber in the database.")


class StoreTokenError(SubscribeError):
    def __init__(self) -> None:
        super().__init__("Failed to store the confirmation token for a new subscriber.")


class TransactionCommitError(SubscribeError):
    def __init__(self) -> None:
        super().__init__("Failed to commit SQL transaction to store a new subscriber.")


class SendConfirmationEmailError(SubscribeError):
    """Subscriber stored, but the confirmation email could not be sent."""

    def __init__(self, subscriber_id: UUID) -> None:
        self.subscriber_id = subscriber_id
        super().__init__("Failed to send a confirmation email.")


class ConfirmError(Exception):
    """Base confirmation error."""

    pass


class MalformedTokenError(ConfirmError):
    def __init__(self) -> None:
        super().__init__("Subscription token is malformed.")


class UnknownTokenError(ConfirmError):
    def __init__(self) -> None:
        super().__init__("There is no subscriber associated with the provided token.")


class ConfirmStorageError(ConfirmError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Failed to {operation}.")
