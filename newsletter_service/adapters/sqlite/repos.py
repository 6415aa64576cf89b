"""
SQLite repositories and unit of work.

Implements the DB port interfaces using the standard sqlite3 driver.
Repositories either own a short-lived connection per call, or share the
connection of an enclosing SQLiteUnitOfWork (in which case the unit of
work decides when to commit).
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from types import TracebackType
from typing import Any
from uuid import UUID

from newsletter_service.core.entities import (
    Subscriber,
    SubscriptionStatus,
    SubscriptionToken,
    User,
    can_transition,
)
from newsletter_service.core.ports.db import StorageError

DEFAULT_TIMEOUT_SECONDS = 5.0

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def connect(db_path: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path, timeout=timeout, check_same_thread=False)
    conn.row_factory = dict_factory
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(
        self,
        db_path: str,
        connection: sqlite3.Connection | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.db_path = db_path
        self.timeout = timeout
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn
        return connect(self.db_path, self.timeout)

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def _execute_write(self, operation: str, sql: str, params: tuple[Any, ...]) -> int:
        """Run one write statement. Returns the number of rows changed."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StorageError(operation) from e
        try:
            rowcount = conn.execute(sql, params).rowcount
            if self._should_close():
                conn.commit()
            return rowcount
        except sqlite3.Error as e:
            raise StorageError(operation) from e
        finally:
            if self._should_close():
                conn.close()

    def _fetch_all(self, operation: str, sql: str, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StorageError(operation) from e
        try:
            rows: list[dict[str, Any]] = conn.execute(sql, params).fetchall()
            return rows
        except sqlite3.Error as e:
            raise StorageError(operation) from e
        finally:
            if self._should_close():
                conn.close()

    def _fetch_one(
        self, operation: str, sql: str, params: tuple[Any, ...]
    ) -> dict[str, Any] | None:
        rows = self._fetch_all(operation, sql, params)
        return rows[0] if rows else None


# -----------------------------------------------------------------------------
# Subscriber Repository
# -----------------------------------------------------------------------------


class SQLiteSubscriberRepo(SQLiteRepoBase):
    """Subscriber repository (subscriptions table)."""

    def insert(self, subscriber: Subscriber) -> Subscriber:
        self._execute_write(
            "insert subscriber",
            """
            INSERT INTO subscriptions (id, email, name, subscribed_at, status)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                str(subscriber.id),
                subscriber.email,
                subscriber.name,
                subscriber.subscribed_at.isoformat(),
                subscriber.status.value,
            ),
        )
        return subscriber

    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        row = self._fetch_one(
            "get subscriber",
            "SELECT * FROM subscriptions WHERE id = ?",
            (str(subscriber_id),),
        )
        return self._map_row(row) if row else None

    def update_status(
        self,
        subscriber_id: UUID,
        from_status: SubscriptionStatus,
        to_status: SubscriptionStatus,
    ) -> bool:
        if not can_transition(from_status, to_status):
            raise ValueError(f"Invalid status transition: {from_status.value} -> {to_status.value}")
        changed = self._execute_write(
            "update subscriber status",
            "UPDATE subscriptions SET status = ? WHERE id = ? AND status = ?",
            (to_status.value, str(subscriber_id), from_status.value),
        )
        return changed > 0

    def list_by_status(self, status: SubscriptionStatus) -> list[Subscriber]:
        rows = self._fetch_all(
            "list subscribers by status",
            "SELECT * FROM subscriptions WHERE status = ? ORDER BY subscribed_at",
            (status.value,),
        )
        return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> Subscriber:
        return Subscriber(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            subscribed_at=datetime.fromisoformat(row["subscribed_at"]),
            status=SubscriptionStatus(row["status"]),
        )


# -----------------------------------------------------------------------------
# Subscription Token Repository
# -----------------------------------------------------------------------------


class SQLiteSubscriptionTokenRepo(SQLiteRepoBase):
    """Confirmation token repository (subscription_tokens table)."""

    def insert(self, token: SubscriptionToken) -> SubscriptionToken:
        self._execute_write(
            "store subscription token",
            """
            INSERT INTO subscription_tokens (subscription_token, subscriber_id)
            VALUES (?, ?)
            """,
            (token.token, str(token.subscriber_id)),
        )
        return token

    def get_subscriber_id(self, token: str) -> UUID | None:
        row = self._fetch_one(
            "get subscriber id from token",
            "SELECT subscriber_id FROM subscription_tokens WHERE subscription_token = ?",
            (token,),
        )
        return UUID(row["subscriber_id"]) if row else None


# -----------------------------------------------------------------------------
# User Repository
# -----------------------------------------------------------------------------


class SQLiteUserRepo(SQLiteRepoBase):
    """Publisher accounts (users table)."""

    def get_by_username(self, username: str) -> User | None:
        row = self._fetch_one(
            "get user by username",
            "SELECT user_id, username, password_hash FROM users WHERE username = ?",
            (username,),
        )
        if not row:
            return None
        return User(
            user_id=UUID(row["user_id"]),
            username=row["username"],
            password_hash=row["password_hash"],
        )

    def insert(self, user: User) -> User:
        self._execute_write(
            "insert user",
            "INSERT INTO users (user_id, username, password_hash) VALUES (?, ?, ?)",
            (str(user.user_id), user.username, user.password_hash),
        )
        return user


# -----------------------------------------------------------------------------
# Unit of Work
# -----------------------------------------------------------------------------


class SQLiteUnitOfWork:
    """
    SQLite Unit of Work implementation.

    Provides transaction management and access to all repositories.
    Uses a shared connection for all operations within a transaction.
    """

    def __init__(self, db_path: str, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.db_path = db_path
        self.timeout = timeout
        self._conn: sqlite3.Connection | None = None

        # Lazy-initialized repositories
        self._subscribers: SQLiteSubscriberRepo | None = None
        self._subscription_tokens: SQLiteSubscriptionTokenRepo | None = None
        self._users: SQLiteUserRepo | None = None

    def __enter__(self) -> SQLiteUnitOfWork:
        try:
            self._conn = connect(self.db_path, self.timeout)
        except sqlite3.Error as e:
            raise StorageError("open transaction") from e
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        # Anything not committed is discarded.
        if self._conn:
            try:
                self._conn.rollback()
            finally:
                self._conn.close()
                self._conn = None
                self._subscribers = None
                self._subscription_tokens = None
                self._users = None

    def commit(self) -> None:
        if self._conn:
            try:
                self._conn.commit()
            except sqlite3.Error as e:
                raise StorageError("commit transaction") from e

    def rollback(self) -> None:
        if self._conn:
            self._conn.rollback()

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Unit of work used outside of a 'with' block")
        return self._conn

    @property
    def subscribers(self) -> SQLiteSubscriberRepo:
        if self._subscribers is None:
            self._subscribers = SQLiteSubscriberRepo(self.db_path, self._require_conn())
        return self._subscribers

    @property
    def subscription_tokens(self) -> SQLiteSubscriptionTokenRepo:
        if self._subscription_tokens is None:
            self._subscription_tokens = SQLiteSubscriptionTokenRepo(
                self.db_path, self._require_conn()
            )
        return self._subscription_tokens

    @property
    def users(self) -> SQLiteUserRepo:
        if self._users is None:
            self._users = SQLiteUserRepo(self.db_path, self._require_conn())
        return self._users
