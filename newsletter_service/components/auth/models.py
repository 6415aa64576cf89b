from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class ValidateCredentialsInput:
    credentials: Credentials


@dataclass(frozen=True)
class CreateUserInput:
    username: str
    password: str


@dataclass(frozen=True)
class AuthOutput:
    user_id: UUID
    username: str


class AuthError(Exception):
    """Missing, malformed or incorrect credentials."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class UserExistsError(Exception):
    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"User {username!r} already exists")
