"""
Newsletter publishing endpoint.

POST /newsletters - Broadcast an issue to confirmed subscribers (Basic auth)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from newsletter_service.adapters.sqlite.repos import SQLiteSubscriberRepo
from newsletter_service.api.deps import (
    get_email_sender,
    get_subscriber_repo,
    require_publisher,
)
from newsletter_service.api.schemas import ErrorResponse, PublishNewsletterRequest
from newsletter_service.components.auth import AuthOutput
from newsletter_service.components.newsletters import (
    PublishError,
    PublishInput,
    run_publish,
)
from newsletter_service.core.ports.email import EmailPort
from newsletter_service.telemetry import error_chain

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/newsletters",
    response_class=Response,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication failed"},
        500: {"model": ErrorResponse, "description": "Delivery or storage failure"},
    },
    summary="Publish a newsletter issue",
)
def publish_newsletter(
    body: PublishNewsletterRequest,
    publisher: AuthOutput = Depends(require_publisher),
    subscriber_repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    email_sender: EmailPort = Depends(get_email_sender),
) -> Response:
    """
    Send the issue to every confirmed subscriber.

    The first failed send aborts the request with 500; a retry resends to
    everyone, including subscribers who already received the issue.
    """
    logger.info("Publishing newsletter issue %r (publisher=%s)", body.title, publisher.username)

    try:
        result = run_publish(
            PublishInput(title=body.title, html=body.content.html, text=body.content.text),
            subscriber_repo,
            email_sender,
        )
    except PublishError as e:
        logger.error("Failed to publish newsletter issue: %s", error_chain(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    logger.info(
        "Newsletter issue %r delivered to %d subscribers (%d skipped)",
        body.title,
        result.delivered,
        len(result.skipped),
    )
    return Response(status_code=status.HTTP_200_OK)
