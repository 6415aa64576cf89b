"""
Unit tests for DevEmailAdapter.

Tests cover:
1. send_email records instead of sending
2. Configured failures raise EmailSendError
3. Test helper methods
"""

import logging
from collections import deque

import pytest

from newsletter_service.adapters.dev_email import MAX_SENT_EMAILS, DevEmailAdapter
from newsletter_service.core.ports.email import EmailSendError
from newsletter_service.domain.subscriber import SubscriberEmail

ALICE = SubscriberEmail.parse("alice@gmail.com")
BOB = SubscriberEmail.parse("bob@gmail.com")


class TestDevEmailAdapterSendEmail:
    def test_send_email_returns_dev_message_id(self) -> None:
        adapter = DevEmailAdapter()

        result = adapter.send_email(ALICE, "Test", "<p>Test</p>", "Test")

        assert result.recipient == "alice@gmail.com"
        assert result.message_id is not None
        assert result.message_id.startswith("dev-")

    def test_send_email_stores_email(self) -> None:
        adapter = DevEmailAdapter()

        adapter.send_email(ALICE, "Subject", "<p>Body</p>", "Body")

        assert adapter.email_count == 1
        stored = adapter.sent_emails[0]
        assert stored.recipient == "alice@gmail.com"
        assert stored.subject == "Subject"
        assert stored.html_body == "<p>Body</p>"
        assert stored.text_body == "Body"

    def test_send_email_logs_preview(self, caplog: pytest.LogCaptureFixture) -> None:
        adapter = DevEmailAdapter(body_preview_length=5)

        with caplog.at_level(logging.INFO):
            adapter.send_email(ALICE, "Subject", "<p>x</p>", "Hello, world")

        assert "Hello..." in caplog.text
        assert "alice@gmail.com" in caplog.text


class TestDevEmailAdapterFailures:
    def test_failing_recipient_raises(self) -> None:
        adapter = DevEmailAdapter(failing_recipients={"bob@gmail.com"})

        adapter.send_email(ALICE, "Subject", "<p>x</p>", "x")
        with pytest.raises(EmailSendError):
            adapter.send_email(BOB, "Subject", "<p>x</p>", "x")

        assert adapter.email_count == 1

    def test_fail_all_raises(self) -> None:
        adapter = DevEmailAdapter(fail_all=True)

        with pytest.raises(EmailSendError):
            adapter.send_email(ALICE, "Subject", "<p>x</p>", "x")

        assert adapter.email_count == 0


class TestDevEmailAdapterHelpers:
    def test_get_last_email(self) -> None:
        adapter = DevEmailAdapter()
        assert adapter.get_last_email() is None

        adapter.send_email(ALICE, "First", "<p>1</p>", "1")
        adapter.send_email(BOB, "Second", "<p>2</p>", "2")

        last = adapter.get_last_email()
        assert last is not None
        assert last.subject == "Second"

    def test_get_emails_to(self) -> None:
        adapter = DevEmailAdapter()
        adapter.send_email(ALICE, "One", "<p>1</p>", "1")
        adapter.send_email(BOB, "Two", "<p>2</p>", "2")
        adapter.send_email(ALICE, "Three", "<p>3</p>", "3")

        assert [e.subject for e in adapter.get_emails_to("alice@gmail.com")] == ["One", "Three"]

    def test_clear(self) -> None:
        adapter = DevEmailAdapter()
        adapter.send_email(ALICE, "One", "<p>1</p>", "1")

        adapter.clear()

        assert adapter.email_count == 0

    def test_history_is_bounded(self) -> None:
        assert DevEmailAdapter().sent_emails.maxlen == MAX_SENT_EMAILS

        adapter = DevEmailAdapter(sent_emails=deque(maxlen=2))
        for subject in ("One", "Two", "Three"):
            adapter.send_email(ALICE, subject, "<p>body</p>", "body")

        assert [e.subject for e in adapter.sent_emails] == ["Two", "Three"]
