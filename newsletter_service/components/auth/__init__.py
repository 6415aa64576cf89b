"""
Auth component - Publisher authentication.

Handles HTTP Basic credential parsing, password verification and
publisher account creation.
"""

from .component import (
    INVALID_CREDENTIALS,
    parse_basic_authorization,
    run_create_user,
    run_validate_credentials,
)
from .models import (
    AuthError,
    AuthOutput,
    CreateUserInput,
    Credentials,
    UserExistsError,
    ValidateCredentialsInput,
)
from .ports import PasswordHasherPort, UserRepoPort

__all__ = [
    # Entry points
    "parse_basic_authorization",
    "run_validate_credentials",
    "run_create_user",
    "INVALID_CREDENTIALS",
    # Models
    "AuthError",
    "AuthOutput",
    "CreateUserInput",
    "Credentials",
    "UserExistsError",
    "ValidateCredentialsInput",
    # Ports
    "PasswordHasherPort",
    "UserRepoPort",
]
