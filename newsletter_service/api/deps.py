import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial

from fastapi import Depends, HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from newsletter_service.adapters.auth.crypto import Argon2PasswordHasher
from newsletter_service.adapters.dev_email import DevEmailAdapter
from newsletter_service.adapters.email_client import EmailClient
from newsletter_service.adapters.sqlite.repos import (
    SQLiteSubscriberRepo,
    SQLiteUnitOfWork,
    SQLiteUserRepo,
)
from newsletter_service.components.auth import (
    AuthError,
    AuthOutput,
    ValidateCredentialsInput,
    parse_basic_authorization,
    run_validate_credentials,
)
from newsletter_service.components.subscriptions import SubscriptionsConfig
from newsletter_service.config import Settings
from newsletter_service.core.ports.db import StorageError
from newsletter_service.core.ports.email import EmailPort
from newsletter_service.telemetry import error_chain

logger = logging.getLogger(__name__)

PUBLISH_REALM = 'Basic realm="publish"'


# --- Application Context ---
@dataclass(frozen=True)
class AppContext:
    """Process-wide collaborators, built once at startup and shared read-only."""

    settings: Settings
    email_sender: EmailPort
    hasher: Argon2PasswordHasher = field(default_factory=Argon2PasswordHasher)

    @property
    def db_path(self) -> str:
        return self.settings.database.path

    @property
    def db_timeout(self) -> float:
        return self.settings.database.timeout_seconds

    def uow_factory(self) -> Callable[[], SQLiteUnitOfWork]:
        return partial(SQLiteUnitOfWork, self.db_path, self.db_timeout)

    def subscriber_repo(self) -> SQLiteSubscriberRepo:
        return SQLiteSubscriberRepo(self.db_path, timeout=self.db_timeout)

    def user_repo(self) -> SQLiteUserRepo:
        return SQLiteUserRepo(self.db_path, timeout=self.db_timeout)

    def subscriptions_config(self) -> SubscriptionsConfig:
        return SubscriptionsConfig(base_url=self.settings.application.base_url)


def build_context(settings: Settings, email_sender: EmailPort | None = None) -> AppContext:
    email_settings = settings.email_client
    if email_sender is None and email_settings.log_only:
        logger.warning("Email delivery disabled: messages are logged, not sent")
        email_sender = DevEmailAdapter()
    elif email_sender is None:
        email_sender = EmailClient(
            base_url=email_settings.base_url,
            sender=email_settings.sender(),
            authorization_token=email_settings.authorization_token.get_secret_value(),
            timeout=email_settings.timeout(),
        )
    return AppContext(settings=settings, email_sender=email_sender)


def get_context(request: Request) -> AppContext:
    context: AppContext = request.app.state.context
    return context


# --- Repos / Ports ---
def get_uow_factory(ctx: AppContext = Depends(get_context)) -> Callable[[], SQLiteUnitOfWork]:
    return ctx.uow_factory()


def get_subscriber_repo(ctx: AppContext = Depends(get_context)) -> SQLiteSubscriberRepo:
    return ctx.subscriber_repo()


def get_email_sender(ctx: AppContext = Depends(get_context)) -> EmailPort:
    return ctx.email_sender


def get_subscriptions_config(ctx: AppContext = Depends(get_context)) -> SubscriptionsConfig:
    return ctx.subscriptions_config()


# --- Auth ---
async def require_publisher(
    request: Request,
    ctx: AppContext = Depends(get_context),
) -> AuthOutput:
    """
    HTTP Basic authentication for the publish endpoint.

    Argon2 verification is CPU-bound, so it runs on the worker thread pool
    rather than on the event loop.
    """
    try:
        credentials = parse_basic_authorization(request.headers.get("Authorization"))
        result = await run_in_threadpool(
            run_validate_credentials,
            ValidateCredentialsInput(credentials=credentials),
            ctx.user_repo(),
            ctx.hasher,
        )
    except AuthError as e:
        logger.info("Publisher authentication failed: %s", error_chain(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed.",
            headers={"WWW-Authenticate": PUBLISH_REALM},
        ) from e
    except StorageError as e:
        logger.error("Failed to look up publisher credentials: %s", error_chain(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    logger.info("Publisher %s authenticated (user_id=%s)", result.username, result.user_id)
    return result
