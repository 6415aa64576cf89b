"""
Database Adapter Interfaces.

Protocol-based interfaces for repository operations.
Implementations: SQLite.

Repositories raise StorageError (chained to the driver error) on any
database failure.
"""

from __future__ import annotations

from types import TracebackType
from typing import Protocol
from uuid import UUID

from newsletter_service.core.entities import (
    Subscriber,
    SubscriptionStatus,
    SubscriptionToken,
    User,
)


class StorageError(Exception):
    """A database operation failed."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Storage operation failed: {operation}")


# -----------------------------------------------------------------------------
# Subscriber Repository
# -----------------------------------------------------------------------------


class SubscriberRepoPort(Protocol):
    """
    Repository for subscribers.

    State machine: pending_confirmation -> confirmed
    """

    def insert(self, subscriber: Subscriber) -> Subscriber:
        """Insert a new subscriber row."""
        ...

    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        ...

    def update_status(
        self,
        subscriber_id: UUID,
        from_status: SubscriptionStatus,
        to_status: SubscriptionStatus,
    ) -> bool:
        """Move a subscriber from one status to another. False if it was not in from_status."""
        ...

    def list_by_status(self, status: SubscriptionStatus) -> list[Subscriber]:
        ...


# -----------------------------------------------------------------------------
# Subscription Token Repository
# -----------------------------------------------------------------------------


class SubscriptionTokenRepoPort(Protocol):
    def insert(self, token: SubscriptionToken) -> SubscriptionToken:
        ...

    def get_subscriber_id(self, token: str) -> UUID | None:
        """Resolve a token to its subscriber, or None if unknown."""
        ...


# -----------------------------------------------------------------------------
# User Repository
# -----------------------------------------------------------------------------


class UserRepoPort(Protocol):
    def get_by_username(self, username: str) -> User | None:
        ...

    def insert(self, user: User) -> User:
        ...


# -----------------------------------------------------------------------------
# Unit of Work
# -----------------------------------------------------------------------------


class UnitOfWorkPort(Protocol):
    """
    Transaction boundary.

    All repositories obtained from one unit of work share a connection.
    Leaving the context without commit() rolls back.
    """

    def __enter__(self) -> UnitOfWorkPort:
        ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...

    @property
    def subscribers(self) -> SubscriberRepoPort:
        ...

    @property
    def subscription_tokens(self) -> SubscriptionTokenRepoPort:
        ...

    @property
    def users(self) -> UserRepoPort:
        ...


class UnitOfWorkFactory(Protocol):
    def __call__(self) -> UnitOfWorkPort:
        ...
