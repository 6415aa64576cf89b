from typing import Protocol

from newsletter_service.core.entities import User


class UserRepoPort(Protocol):
    def get_by_username(self, username: str) -> User | None: ...
    def insert(self, user: User) -> User: ...


class PasswordHasherPort(Protocol):
    def verify_password(self, password: str, hash_str: str) -> bool: ...
    def hash_password(self, password: str) -> str: ...
    def dummy_hash(self) -> str: ...
