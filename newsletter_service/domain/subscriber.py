"""
Subscriber value types.

Parse-don't-validate wrappers for raw subscriber input. Any instance of
SubscriberName or SubscriberEmail in circulation is well-formed: `parse` is
the only constructor that checks input, and the dataclasses are frozen.

Key behaviors:
- SubscriberName: non-blank, at most 256 graphemes, no forbidden characters
- SubscriberEmail: standard mailbox-address grammar (no DNS lookups)
- NewSubscriber: the only path from raw request fields to a subscriber
"""

from __future__ import annotations

from dataclasses import dataclass

import regex
from email_validator import EmailNotValidError, validate_email

MAX_NAME_GRAPHEMES = 256
FORBIDDEN_NAME_CHARACTERS = frozenset('/()"<>\\{}')

_GRAPHEME = regex.compile(r"\X")


class SubscriberValidationError(ValueError):
    """Raw subscriber input failed validation."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(reason)


def grapheme_count(value: str) -> int:
    """Count user-perceived characters (extended grapheme clusters)."""
    return len(_GRAPHEME.findall(value))


@dataclass(frozen=True)
class SubscriberName:
    value: str

    @classmethod
    def parse(cls, raw: str) -> SubscriberName:
        if not raw or not raw.strip():
            raise SubscriberValidationError("name", "Subscriber name must not be empty.")

        if grapheme_count(raw) > MAX_NAME_GRAPHEMES:
            raise SubscriberValidationError(
                "name",
                f"Subscriber name must be at most {MAX_NAME_GRAPHEMES} characters long.",
            )

        forbidden = sorted({c for c in raw if c in FORBIDDEN_NAME_CHARACTERS})
        if forbidden:
            raise SubscriberValidationError(
                "name",
                f"Subscriber name contains forbidden characters: {' '.join(forbidden)}",
            )

        return cls(raw)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SubscriberEmail:
    value: str

    @classmethod
    def parse(cls, raw: str) -> SubscriberEmail:
        if not raw or not raw.strip():
            raise SubscriberValidationError("email", "Subscriber email must not be empty.")

        try:
            validate_email(raw, check_deliverability=False)
        except EmailNotValidError as e:
            raise SubscriberValidationError(
                "email", f"{raw!r} is not a valid subscriber email: {e}"
            ) from e

        return cls(raw)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NewSubscriber:
    """A validated sign-up, ready to be stored."""

    email: SubscriberEmail
    name: SubscriberName

    @classmethod
    def parse(cls, raw_email: str, raw_name: str) -> NewSubscriber:
        name = SubscriberName.parse(raw_name)
        email = SubscriberEmail.parse(raw_email)
        return cls(email=email, name=name)
