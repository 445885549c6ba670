"""
SQLite Subscriber Store.

Implements SubscriberStorePort and UnitOfWorkPort using SQLite.
Designed to be Postgres-compatible (uses standard SQL patterns).

Tables (see migrations/):
- subscriptions(id, email UNIQUE, name, subscribed_at, status)
- subscription_tokens(subscription_token PK, subscriber_id FK)

Constraint violations are translated into the domain error taxonomy;
every other sqlite3.Error surfaces as StoreError.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from mailinglist.core.entities import (
    ConfirmationToken,
    Subscriber,
    SubscriberStatus,
    can_transition,
)
from mailinglist.core.errors import DuplicateEmail, StoreError, UnknownSubscriber

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def connect(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = dict_factory
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def confirmable_statuses() -> tuple[str, ...]:
    """Stored status values that may move to confirmed."""
    return tuple(
        s.value for s in SubscriberStatus if can_transition(s, SubscriberStatus.CONFIRMED)
    )


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn
        try:
            return connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open database {self.db_path}: {e}") from e

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None


# -----------------------------------------------------------------------------
# Subscriber Store
# -----------------------------------------------------------------------------


class SQLiteSubscriberStore(SQLiteRepoBase):
    """SQLite implementation of SubscriberStorePort."""

    def __init__(
        self,
        db_path: str,
        connection: sqlite3.Connection | None = None,
        batch_size: int = 500,
    ):
        super().__init__(db_path, connection)
        self.batch_size = batch_size

    def insert_pending_subscriber(self, email: str, name: str, now: datetime) -> UUID:
        subscriber_id = uuid4()
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO subscriptions (id, email, name, subscribed_at, status)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    str(subscriber_id),
                    email,
                    name,
                    now.isoformat(),
                    SubscriberStatus.PENDING_CONFIRMATION.value,
                ),
            )
            if self._should_close():
                conn.commit()
            return subscriber_id
        except sqlite3.IntegrityError as e:
            if "subscriptions.email" in str(e):
                raise DuplicateEmail(email) from e
            raise StoreError(f"Failed to insert subscriber: {e}") from e
        except sqlite3.Error as e:
            raise StoreError(f"Failed to insert subscriber: {e}") from e
        finally:
            if self._should_close():
                conn.close()

    def insert_token(self, token: str, subscriber_id: UUID) -> None:
        conn = self._get_conn()
        try:
            exists = conn.execute(
                "SELECT 1 FROM subscriptions WHERE id = ?", (str(subscriber_id),)
            ).fetchone()
            if exists is None:
                raise UnknownSubscriber(subscriber_id)

            conn.execute(
                """
                INSERT INTO subscription_tokens (subscription_token, subscriber_id)
                VALUES (?, ?)
                """,
                (token, str(subscriber_id)),
            )
            if self._should_close():
                conn.commit()
        except sqlite3.IntegrityError as e:
            # Subscriber deleted between the check and the insert
            if "FOREIGN KEY" in str(e):
                raise UnknownSubscriber(subscriber_id) from e
            raise StoreError(f"Failed to insert token: {e}") from e
        except sqlite3.Error as e:
            raise StoreError(f"Failed to insert token: {e}") from e
        finally:
            if self._should_close():
                conn.close()

    def find_subscriber_by_token(self, token: str) -> UUID | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT subscriber_id FROM subscription_tokens WHERE subscription_token = ?",
                (token,),
            ).fetchone()
            return UUID(row["subscriber_id"]) if row else None
        except sqlite3.Error as e:
            raise StoreError(f"Failed to look up token: {e}") from e
        finally:
            if self._should_close():
                conn.close()

    def mark_confirmed(self, subscriber_id: UUID) -> bool:
        sources = confirmable_statuses()
        placeholders = ", ".join("?" for _ in sources)
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                "UPDATE subscriptions SET status = ? "
                f"WHERE id = ? AND status IN ({placeholders})",
                (SubscriberStatus.CONFIRMED.value, str(subscriber_id), *sources),
            )
            if self._should_close():
                conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise StoreError(f"Failed to confirm subscriber: {e}") from e
        finally:
            if self._should_close():
                conn.close()

    def iter_confirmed_emails(self) -> Iterator[str]:
        """
        Yield confirmed emails in pages of batch_size, ordered by id.

        Each page is a separate, fully fetched query; no read lock is
        held while the caller works through a page.
        """
        conn = self._get_conn()
        last_id = ""
        try:
            while True:
                rows = conn.execute(
                    "SELECT id, email FROM subscriptions "
                    "WHERE status = ? AND id > ? ORDER BY id LIMIT ?",
                    (SubscriberStatus.CONFIRMED.value, last_id, self.batch_size),
                ).fetchall()
                if not rows:
                    break
                last_id = rows[-1]["id"]
                for row in rows:
                    yield row["email"]
                if len(rows) < self.batch_size:
                    break
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read confirmed subscribers: {e}") from e
        finally:
            if self._should_close():
                conn.close()

    def get_subscriber(self, subscriber_id: UUID) -> Subscriber | None:
        return self._fetch_one("SELECT * FROM subscriptions WHERE id = ?", str(subscriber_id))

    def get_subscriber_by_email(self, email: str) -> Subscriber | None:
        return self._fetch_one("SELECT * FROM subscriptions WHERE email = ?", email)

    def list_tokens(self, subscriber_id: UUID) -> list[ConfirmationToken]:
        """Tokens issued for a subscriber (operator resend/debug use)."""
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT subscription_token FROM subscription_tokens WHERE subscriber_id = ?",
                (str(subscriber_id),),
            ).fetchall()
            return [
                ConfirmationToken(token=r["subscription_token"], subscriber_id=subscriber_id)
                for r in rows
            ]
        except sqlite3.Error as e:
            raise StoreError(f"Failed to list tokens: {e}") from e
        finally:
            if self._should_close():
                conn.close()

    def _fetch_one(self, sql: str, param: str) -> Subscriber | None:
        conn = self._get_conn()
        try:
            row = conn.execute(sql, (param,)).fetchone()
            return self._map_row(row) if row else None
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read subscriber: {e}") from e
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> Subscriber:
        return Subscriber(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            subscribed_at=datetime.fromisoformat(row["subscribed_at"]),
            status=SubscriberStatus(row["status"]),
        )


# -----------------------------------------------------------------------------
# Unit of Work
# -----------------------------------------------------------------------------


class SQLiteUnitOfWork:
    """
    SQLite Unit of Work implementation.

    Provides transaction management and access to the subscriber store.
    Uses a shared connection for all operations within a transaction.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._subscribers: SQLiteSubscriberStore | None = None

    def __enter__(self) -> SQLiteUnitOfWork:
        try:
            self._conn = connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open database {self.db_path}: {e}") from e
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        # Uncommitted work is discarded, with or without an exception
        self.rollback()
        if self._conn:
            self._conn.close()
            self._conn = None
        self._subscribers = None

    def commit(self) -> None:
        if self._conn:
            try:
                self._conn.commit()
            except sqlite3.Error as e:
                raise StoreError(f"Commit failed: {e}") from e

    def rollback(self) -> None:
        if self._conn:
            self._conn.rollback()

    @property
    def subscribers(self) -> SQLiteSubscriberStore:
        if self._conn is None:
            raise StoreError("Unit of work used outside of a 'with' block")
        if self._subscribers is None:
            self._subscribers = SQLiteSubscriberStore(self.db_path, self._conn)
        return self._subscribers


def sqlite_unit_of_work_factory(db_path: str) -> Callable[[], SQLiteUnitOfWork]:
    """Bind a database path into a zero-argument unit of work factory."""

    def factory() -> SQLiteUnitOfWork:
        return SQLiteUnitOfWork(db_path)

    return factory
