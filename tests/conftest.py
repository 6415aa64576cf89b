import json
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import pytest
from argon2 import PasswordHasher
from fastapi.testclient import TestClient

from newsletter_service.adapters.auth.crypto import Argon2PasswordHasher
from newsletter_service.adapters.dev_email import DevEmailAdapter
from newsletter_service.adapters.email_client import EmailClient
from newsletter_service.adapters.sqlite.migrator import SQLiteMigrator
from newsletter_service.adapters.sqlite.repos import SQLiteUserRepo
from newsletter_service.api.deps import AppContext
from newsletter_service.api.main import create_app
from newsletter_service.components.auth import CreateUserInput, run_create_user
from newsletter_service.config import (
    ApplicationSettings,
    DatabaseSettings,
    EmailClientSettings,
    Settings,
)
from newsletter_service.domain.subscriber import SubscriberEmail

PROJECT_ROOT = Path(__file__).resolve().parent.parent
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"

EMAIL_API_URL = "http://email-api.test"
EMAIL_API_TOKEN = "my-secret-token"
SENDER_EMAIL = "newsletter@gmail.com"
APP_BASE_URL = "http://127.0.0.1:8000"

PUBLISHER_USERNAME = "publisher"
PUBLISHER_PASSWORD = "correct-horse-battery-staple"


@dataclass
class FakeEmailApi:
    """
    In-process stand-in for the email provider's HTTP API.

    Records every request it receives and answers with `status_code`.
    """

    status_code: int = 200
    raise_timeout: bool = False
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_timeout:
            raise httpx.ReadTimeout("timed out", request=request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"ErrorCode": 500, "Message": "boom"})
        return httpx.Response(self.status_code, json={"MessageID": f"msg-{len(self.requests)}"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]

    def recipients(self) -> list[str]:
        return [p["To"] for p in self.payloads()]


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """A fresh SQLite database with every migration applied."""
    path = str(tmp_path / "newsletter.db")
    SQLiteMigrator(path, str(MIGRATIONS_DIR)).run_migrations()
    return path


@pytest.fixture
def hasher() -> Argon2PasswordHasher:
    """Argon2 with minimal cost parameters, to keep the suite fast."""
    return Argon2PasswordHasher(PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))


@pytest.fixture
def dev_email() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def email_api() -> FakeEmailApi:
    return FakeEmailApi()


@pytest.fixture
def email_client(email_api: FakeEmailApi) -> Generator[EmailClient, None, None]:
    client = EmailClient(
        base_url=EMAIL_API_URL,
        sender=SubscriberEmail.parse(SENDER_EMAIL),
        authorization_token=EMAIL_API_TOKEN,
        transport=email_api.transport(),
    )
    yield client
    client.close()


@pytest.fixture
def settings(db_path: str) -> Settings:
    return Settings(
        application=ApplicationSettings(host="127.0.0.1", port=0, base_url=APP_BASE_URL),
        database=DatabaseSettings(path=db_path, migrations_dir=str(MIGRATIONS_DIR)),
        email_client=EmailClientSettings(
            base_url=EMAIL_API_URL,
            sender_email=SENDER_EMAIL,
            authorization_token=EMAIL_API_TOKEN,
        ),
        log_level="DEBUG",
    )


@pytest.fixture
def app_context(
    settings: Settings,
    email_client: EmailClient,
    hasher: Argon2PasswordHasher,
) -> AppContext:
    return AppContext(settings=settings, email_sender=email_client, hasher=hasher)


@pytest.fixture
def client(app_context: AppContext) -> Generator[TestClient, None, None]:
    """Test client for an app wired to a temp database and the fake email API."""
    with TestClient(create_app(context=app_context)) as c:
        yield c


@pytest.fixture
def publisher(db_path: str, hasher: Argon2PasswordHasher) -> tuple[str, str]:
    """Store a publisher account; returns its (username, password)."""
    run_create_user(
        CreateUserInput(username=PUBLISHER_USERNAME, password=PUBLISHER_PASSWORD),
        SQLiteUserRepo(db_path),
        hasher,
    )
    return PUBLISHER_USERNAME, PUBLISHER_PASSWORD
