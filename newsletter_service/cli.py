import argparse
import getpass
import logging
import os
import sys

from newsletter_service.adapters.auth.crypto import Argon2PasswordHasher
from newsletter_service.adapters.sqlite.migrator import SQLiteMigrator
from newsletter_service.adapters.sqlite.repos import SQLiteUserRepo
from newsletter_service.components.auth import CreateUserInput, UserExistsError, run_create_user
from newsletter_service.config import ConfigurationError, Settings, load_settings
from newsletter_service.telemetry import configure_logging

logger = logging.getLogger("cli")


def migrate(settings: Settings) -> None:
    db_dir = os.path.dirname(settings.database.path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    SQLiteMigrator(settings.database.path, settings.database.migrations_dir).run_migrations()


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    migrate(settings)


def handle_add_user(settings: Settings, args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass(f"Password for {args.username}: ")
    repo = SQLiteUserRepo(settings.database.path, timeout=settings.database.timeout_seconds)
    try:
        user = run_create_user(
            CreateUserInput(username=args.username, password=password),
            repo,
            Argon2PasswordHasher(),
        )
    except UserExistsError as e:
        logger.error(str(e))
        sys.exit(1)
    print(f"Created publisher '{user.username}' ({user.user_id}).")


def handle_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    from newsletter_service.api.main import create_app

    migrate(settings)
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.application.host,
        port=settings.application.port,
        log_config=None,
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Newsletter service CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Apply migrations and run the HTTP server")
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    user_parser = subparsers.add_parser("add-user", help="Create a publisher account")
    user_parser.add_argument("username", help="Publisher username")
    user_parser.add_argument("--password", help="Password (prompted for if omitted)")

    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"CRITICAL: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_level)

    handlers = {
        "serve": handle_serve,
        "migrate": handle_migrate,
        "add-user": handle_add_user,
    }
    handlers[args.command](settings, args)


if __name__ == "__main__":
    main()
