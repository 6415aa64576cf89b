# newsletter-service — Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from newsletter_service.core.ports.email import (
    EmailError,
    EmailMessage,
    EmailPort,
    EmailResult,
    EmailSendError,
)

__all__ = [
    "EmailError",
    "EmailMessage",
    "EmailPort",
    "EmailResult",
    "EmailSendError",
]
