"""
Publisher authentication.

HTTP Basic credential parsing and verification against stored Argon2
hashes. Unknown usernames are verified against a dummy hash so that the
unknown-user and wrong-password paths cost the same.
"""

import base64
import binascii
from uuid import uuid4

from newsletter_service.core.entities import User

from .models import (
    AuthError,
    AuthOutput,
    CreateUserInput,
    Credentials,
    UserExistsError,
    ValidateCredentialsInput,
)
from .ports import PasswordHasherPort, UserRepoPort

INVALID_CREDENTIALS = "Invalid username or password."


def parse_basic_authorization(header_value: str | None) -> Credentials:
    if not header_value:
        raise AuthError("The 'Authorization' header was missing.")

    scheme, _, encoded = header_value.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded:
        raise AuthError("The authorization scheme was not 'Basic'.")

    try:
        decoded_bytes = base64.b64decode(encoded.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise AuthError("Failed to base64-decode 'Basic' credentials.") from e

    try:
        decoded = decoded_bytes.decode("utf-8")
    except UnicodeDecodeError as e:
        raise AuthError("The decoded credential string is not valid UTF-8.") from e

    username, sep, password = decoded.partition(":")
    if not sep:
        raise AuthError("A password must be provided in 'Basic' auth.")
    if not username:
        raise AuthError("A username must be provided in 'Basic' auth.")

    return Credentials(username=username, password=password)


def run_validate_credentials(
    inp: ValidateCredentialsInput,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
) -> AuthOutput:
    """
    Verify credentials. Raises AuthError on unknown user or wrong password.

    CPU-bound (Argon2); call it from a worker thread in async code.
    """
    user = user_repo.get_by_username(inp.credentials.username)

    expected_hash = user.password_hash if user else hasher.dummy_hash()
    password_ok = hasher.verify_password(inp.credentials.password, expected_hash)

    if user is None or not password_ok:
        raise AuthError(INVALID_CREDENTIALS)

    return AuthOutput(user_id=user.user_id, username=user.username)


def run_create_user(
    inp: CreateUserInput,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
) -> User:
    if not inp.username or not inp.password:
        raise ValueError("Username and password are required")

    if user_repo.get_by_username(inp.username):
        raise UserExistsError(inp.username)

    user = User(
        user_id=uuid4(),
        username=inp.username,
        password_hash=hasher.hash_password(inp.password),
    )
    return user_repo.insert(user)
