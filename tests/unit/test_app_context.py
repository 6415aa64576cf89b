"""
Unit tests for the application context built at startup.
"""

import dataclasses

import pytest

from newsletter_service.adapters.dev_email import DevEmailAdapter
from newsletter_service.adapters.email_client import EmailClient
from newsletter_service.api.deps import AppContext, build_context
from newsletter_service.config import Settings


def test_context_is_read_only(app_context: AppContext, dev_email: DevEmailAdapter) -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        app_context.email_sender = dev_email  # type: ignore[misc]


def test_builds_http_client_by_default(settings: Settings) -> None:
    context = build_context(settings)

    assert isinstance(context.email_sender, EmailClient)
    context.email_sender.close()


def test_log_only_uses_dev_adapter(settings: Settings) -> None:
    log_only = settings.model_copy(
        update={"email_client": settings.email_client.model_copy(update={"log_only": True})}
    )

    context = build_context(log_only)

    assert isinstance(context.email_sender, DevEmailAdapter)


def test_explicit_sender_wins(settings: Settings, dev_email: DevEmailAdapter) -> None:
    assert build_context(settings, email_sender=dev_email).email_sender is dev_email
