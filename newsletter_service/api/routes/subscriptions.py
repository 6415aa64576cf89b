"""
Subscription endpoints.

Endpoints:
- POST /subscriptions - Sign up (form: email, name); sends confirmation link
- GET /subscriptions/confirm - Redeem a confirmation token
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Response, status

from newsletter_service.adapters.sqlite.repos import SQLiteUnitOfWork
from newsletter_service.api.deps import (
    get_email_sender,
    get_subscriptions_config,
    get_uow_factory,
)
from newsletter_service.api.schemas import ErrorResponse
from newsletter_service.components.subscriptions import (
    ConfirmError,
    ConfirmInput,
    MalformedTokenError,
    SendConfirmationEmailError,
    SubscribeError,
    SubscribeInput,
    SubscribeValidationError,
    SubscriptionsConfig,
    UnknownTokenError,
    run_confirm,
    run_subscribe,
)
from newsletter_service.core.ports.db import StorageError
from newsletter_service.core.ports.email import EmailPort
from newsletter_service.telemetry import error_chain

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/subscriptions",
    response_class=Response,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email or name"},
        500: {"model": ErrorResponse, "description": "Storage or email failure"},
    },
    summary="Subscribe to the newsletter",
)
def subscribe(
    email: Annotated[str, Form()],
    name: Annotated[str, Form()],
    uow_factory: Callable[[], SQLiteUnitOfWork] = Depends(get_uow_factory),
    email_sender: EmailPort = Depends(get_email_sender),
    config: SubscriptionsConfig = Depends(get_subscriptions_config),
) -> Response:
    """
    Store a pending subscriber and email a confirmation link.

    Duplicate sign-ups are not deduplicated; each creates a new pending row.
    """
    logger.info("Adding a new subscriber (email=%s, name=%s)", email, name)

    try:
        result = run_subscribe(
            SubscribeInput(email=email, name=name),
            uow_factory,
            email_sender,
            config=config,
        )
    except SubscribeValidationError as e:
        logger.info("Rejected subscription: %s", e.reason)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.reason) from e
    except SendConfirmationEmailError as e:
        logger.error(
            "Subscriber %s stored but confirmation email failed: %s",
            e.subscriber_id,
            error_chain(e),
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e
    except (SubscribeError, StorageError) as e:
        logger.error("Failed to store new subscriber: %s", error_chain(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    logger.info("New subscriber %s saved; confirmation email sent", result.subscriber_id)
    return Response(status_code=status.HTTP_200_OK)


@router.get(
    "/subscriptions/confirm",
    response_class=Response,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or malformed token"},
        401: {"model": ErrorResponse, "description": "Unknown token"},
        500: {"model": ErrorResponse, "description": "Storage failure"},
    },
    summary="Confirm a pending subscriber",
)
def confirm(
    subscription_token: Annotated[str, Query()],
    uow_factory: Callable[[], SQLiteUnitOfWork] = Depends(get_uow_factory),
) -> Response:
    """Idempotent: confirming an already confirmed subscriber returns 200."""
    try:
        result = run_confirm(ConfirmInput(token=subscription_token), uow_factory)
    except MalformedTokenError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except UnknownTokenError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e
    except (ConfirmError, StorageError) as e:
        logger.error("Failed to confirm subscriber: %s", error_chain(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    if result.already_confirmed:
        logger.info("Subscriber %s was already confirmed", result.subscriber_id)
    else:
        logger.info("Subscriber %s confirmed", result.subscriber_id)
    return Response(status_code=status.HTTP_200_OK)
