"""
Subscriptions component ports.

The workflow needs a transaction boundary covering the subscriber and
token tables, and an email transport for the confirmation link.
"""

from __future__ import annotations

from newsletter_service.core.ports.db import UnitOfWorkFactory, UnitOfWorkPort
from newsletter_service.core.ports.email import EmailPort

ConfirmationEmailSenderPort = EmailPort

__all__ = [
    "ConfirmationEmailSenderPort",
    "UnitOfWorkFactory",
    "UnitOfWorkPort",
]
