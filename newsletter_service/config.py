"""
Layered configuration.

Sources, later ones win:
1. configuration/base.yaml
2. configuration/{APP_ENVIRONMENT}.yaml  (local | production; default local)
3. APP_* environment variables, `__` separating nested keys
   e.g. APP_APPLICATION__PORT=5001 sets application.port

The configuration directory is resolved against the working directory.
Layers are merged and validated by pydantic-settings; any problem raises
ConfigurationError with the underlying message.
"""

from __future__ import annotations

import os
from datetime import timedelta
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from newsletter_service.domain.subscriber import SubscriberEmail, SubscriberValidationError

CONFIGURATION_DIR = Path("configuration")
ENVIRONMENT_VAR = "APP_ENVIRONMENT"


class ConfigurationError(Exception):
    """Configuration files or environment overrides are invalid."""

    pass


class Environment(str, Enum):
    LOCAL = "local"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: str) -> Environment:
        try:
            return cls(value.lower())
        except ValueError:
            raise ConfigurationError(
                f"{value} is not a supported environment. Use either `local` or `production`."
            ) from None

    @classmethod
    def current(cls) -> Environment:
        return cls.parse(os.environ.get(ENVIRONMENT_VAR, cls.LOCAL.value))

    def config_file(self) -> Path:
        return CONFIGURATION_DIR / f"{self.value}.yaml"


class ApplicationSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(8000, ge=0, le=65535)
    base_url: str = "http://127.0.0.1:8000"


class DatabaseSettings(BaseModel):
    path: str = "./data/newsletter.db"
    timeout_seconds: float = Field(5.0, gt=0)
    migrations_dir: str = "migrations"


class EmailClientSettings(BaseModel):
    base_url: str
    sender_email: str
    authorization_token: SecretStr
    timeout_milliseconds: int = Field(10_000, gt=0)
    # Log messages through DevEmailAdapter instead of calling the API.
    log_only: bool = False

    def sender(self) -> SubscriberEmail:
        try:
            return SubscriberEmail.parse(self.sender_email)
        except SubscriberValidationError as e:
            raise ConfigurationError(f"Invalid sender email address: {e.reason}") from e

    def timeout(self) -> timedelta:
        return timedelta(milliseconds=self.timeout_milliseconds)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    application: ApplicationSettings = Field(default_factory=ApplicationSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    email_client: EmailClientSettings
    log_level: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=Environment.current().config_file()),
            YamlConfigSettingsSource(settings_cls, yaml_file=CONFIGURATION_DIR / "base.yaml"),
        )


# --- Loading ---


def load_settings() -> Settings:
    environment = Environment.current()

    for path in (CONFIGURATION_DIR / "base.yaml", environment.config_file()):
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found at: {path.resolve()}")

    try:
        return Settings()
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}") from e
