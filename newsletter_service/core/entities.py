"""
Persistent entities for the newsletter service.

- Subscriber: a sign-up, pending until its confirmation token is redeemed
- SubscriptionToken: maps an opaque token to a subscriber
- User: a publisher allowed to broadcast newsletter issues
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class SubscriptionStatus(str, Enum):
    """
    Subscriber status.

    State transitions:
    - pending_confirmation → confirmed (via confirmation link)
    """

    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"


VALID_TRANSITIONS: dict[SubscriptionStatus, set[SubscriptionStatus]] = {
    SubscriptionStatus.PENDING_CONFIRMATION: {SubscriptionStatus.CONFIRMED},
    SubscriptionStatus.CONFIRMED: set(),  # Terminal state
}


def can_transition(from_status: SubscriptionStatus, to_status: SubscriptionStatus) -> bool:
    return to_status in VALID_TRANSITIONS.get(from_status, set())


@dataclass(frozen=True)
class Subscriber:
    id: UUID
    email: str
    name: str
    subscribed_at: datetime
    status: SubscriptionStatus = SubscriptionStatus.PENDING_CONFIRMATION


@dataclass(frozen=True)
class SubscriptionToken:
    token: str
    subscriber_id: UUID


@dataclass(frozen=True)
class User:
    user_id: UUID
    username: str
    password_hash: str
