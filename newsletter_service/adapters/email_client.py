"""
HTTP email transport (Postmark-style API).

Sends one message per request to `{base_url}/email` with a JSON body
`{From, To, Subject, TextBody, HtmlBody}` and the server token header.
Any non-2xx response or transport error (including timeouts) raises
EmailSendError.
"""

from __future__ import annotations

import logging
from datetime import timedelta

import httpx

from newsletter_service.core.ports.email import EmailMessage, EmailResult, EmailSendError
from newsletter_service.domain.subscriber import SubscriberEmail

logger = logging.getLogger(__name__)

SERVER_TOKEN_HEADER = "X-Postmark-Server-Token"


class EmailClient:
    """Implements EmailPort over a shared httpx.Client."""

    def __init__(
        self,
        base_url: str,
        sender: SubscriberEmail,
        authorization_token: str,
        timeout: timedelta = timedelta(seconds=10),
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.sender = sender
        self._authorization_token = authorization_token
        self._http = httpx.Client(
            timeout=timeout.total_seconds(),
            transport=transport,
        )

    def send_email(
        self,
        recipient: SubscriberEmail,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> EmailResult:
        try:
            message = EmailMessage(
                sender=self.sender,
                recipient=recipient,
                subject=subject,
                html_body=html_body,
                text_body=text_body,
            )
        except ValueError as e:
            raise EmailSendError(str(recipient), f"invalid message: {e}") from e
        url = f"{self.base_url}/email"

        try:
            response = self._http.post(
                url,
                json=message.to_payload(),
                headers={SERVER_TOKEN_HEADER: self._authorization_token},
            )
        except httpx.TimeoutException as e:
            raise EmailSendError(str(recipient), "request timed out") from e
        except httpx.HTTPError as e:
            raise EmailSendError(str(recipient), f"transport error: {e}") from e

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Email API rejected message to %s (status %s)",
                recipient,
                response.status_code,
            )
            raise EmailSendError(
                str(recipient),
                f"email API returned {response.status_code}",
                status_code=response.status_code,
            ) from e

        message_id = None
        if response.headers.get("content-type", "").startswith("application/json"):
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message_id = body.get("MessageID")

        logger.info("Email sent to %s (subject=%r)", recipient, subject)
        return EmailResult.success(str(recipient), message_id=message_id)

    def close(self) -> None:
        self._http.close()
