"""
Unit tests for the HTTP email client.

The provider API is replaced by an httpx.MockTransport (see conftest), so
these tests check the exact request shape without any network access.
"""

from datetime import timedelta

import httpx
import pytest
from conftest import EMAIL_API_TOKEN, EMAIL_API_URL, SENDER_EMAIL, FakeEmailApi

from newsletter_service.adapters.email_client import SERVER_TOKEN_HEADER, EmailClient
from newsletter_service.core.ports.email import EmailMessage, EmailSendError
from newsletter_service.domain.subscriber import SubscriberEmail


def recipient() -> SubscriberEmail:
    return SubscriberEmail.parse("reader@gmail.com")


class TestEmailClientRequest:
    """The request sent to the provider."""

    def test_posts_to_email_endpoint(
        self, email_client: EmailClient, email_api: FakeEmailApi
    ) -> None:
        email_client.send_email(recipient(), "Subject", "<p>Hi</p>", "Hi")

        assert len(email_api.requests) == 1
        request = email_api.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{EMAIL_API_URL}/email"

    def test_sends_server_token_header(
        self, email_client: EmailClient, email_api: FakeEmailApi
    ) -> None:
        email_client.send_email(recipient(), "Subject", "<p>Hi</p>", "Hi")

        assert email_api.requests[0].headers[SERVER_TOKEN_HEADER] == EMAIL_API_TOKEN

    def test_body_has_expected_fields(
        self, email_client: EmailClient, email_api: FakeEmailApi
    ) -> None:
        email_client.send_email(recipient(), "Subject", "<p>Hi</p>", "Hi")

        assert email_api.payloads()[0] == {
            "From": SENDER_EMAIL,
            "To": "reader@gmail.com",
            "Subject": "Subject",
            "HtmlBody": "<p>Hi</p>",
            "TextBody": "Hi",
        }

    def test_trailing_slash_in_base_url_is_ignored(self, email_api: FakeEmailApi) -> None:
        client = EmailClient(
            base_url=f"{EMAIL_API_URL}/",
            sender=SubscriberEmail.parse(SENDER_EMAIL),
            authorization_token=EMAIL_API_TOKEN,
            transport=email_api.transport(),
        )
        client.send_email(recipient(), "Subject", "<p>Hi</p>", "Hi")
        client.close()

        assert str(email_api.requests[0].url) == f"{EMAIL_API_URL}/email"


class TestEmailClientResult:
    def test_success_returns_message_id(self, email_client: EmailClient) -> None:
        result = email_client.send_email(recipient(), "Subject", "<p>Hi</p>", "Hi")

        assert result.recipient == "reader@gmail.com"
        assert result.message_id == "msg-1"
        assert result.sent_at is not None

    def test_success_without_json_body(self) -> None:
        client = EmailClient(
            base_url=EMAIL_API_URL,
            sender=SubscriberEmail.parse(SENDER_EMAIL),
            authorization_token=EMAIL_API_TOKEN,
            transport=httpx.MockTransport(lambda request: httpx.Response(200)),
        )
        result = client.send_email(recipient(), "Subject", "<p>Hi</p>", "Hi")
        client.close()

        assert result.message_id is None

    @pytest.mark.parametrize("status_code", [400, 401, 422, 500, 503])
    def test_non_2xx_raises_send_error(
        self,
        email_client: EmailClient,
        email_api: FakeEmailApi,
        status_code: int,
    ) -> None:
        email_api.status_code = status_code

        with pytest.raises(EmailSendError) as exc_info:
            email_client.send_email(recipient(), "Subject", "<p>Hi</p>", "Hi")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.recipient == "reader@gmail.com"

    def test_timeout_raises_send_error(
        self, email_client: EmailClient, email_api: FakeEmailApi
    ) -> None:
        email_api.raise_timeout = True

        with pytest.raises(EmailSendError) as exc_info:
            email_client.send_email(recipient(), "Subject", "<p>Hi</p>", "Hi")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)

    def test_connection_error_raises_send_error(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = EmailClient(
            base_url=EMAIL_API_URL,
            sender=SubscriberEmail.parse(SENDER_EMAIL),
            authorization_token=EMAIL_API_TOKEN,
            timeout=timedelta(milliseconds=200),
            transport=httpx.MockTransport(refuse),
        )
        with pytest.raises(EmailSendError):
            client.send_email(recipient(), "Subject", "<p>Hi</p>", "Hi")
        client.close()


class TestEmailClientInvalidMessage:
    def test_empty_bodies_raise_send_error(
        self, email_client: EmailClient, email_api: FakeEmailApi
    ) -> None:
        with pytest.raises(EmailSendError, match="invalid message"):
            email_client.send_email(recipient(), "Subject", "", "")

        assert email_api.requests == []


class TestEmailMessage:
    def test_requires_subject(self) -> None:
        with pytest.raises(ValueError):
            EmailMessage(
                sender=SubscriberEmail.parse(SENDER_EMAIL),
                recipient=recipient(),
                subject="",
                html_body="<p>Hi</p>",
                text_body="Hi",
            )

    def test_requires_a_body(self) -> None:
        with pytest.raises(ValueError):
            EmailMessage(
                sender=SubscriberEmail.parse(SENDER_EMAIL),
                recipient=recipient(),
                subject="Subject",
                html_body="",
                text_body="",
            )
