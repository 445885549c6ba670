"""
Subscriber Store interface.

Abstracts durable state for subscribers and confirmation tokens.

Key requirements:
- Email uniqueness enforced by the store, surfaced as DuplicateEmail
- Subscriber + token creation commit or roll back together (unit of work)
- mark_confirmed is a single idempotent update
- Confirmed addresses are streamed, never loaded as a whole table
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from mailinglist.core.entities import Subscriber


class SubscriberStorePort(Protocol):
    """Subscriber and confirmation token persistence."""

    def insert_pending_subscriber(self, email: str, name: str, now: datetime) -> UUID:
        """
        Insert a subscriber in pending_confirmation status.

        Raises:
            DuplicateEmail: email already present
            StoreError: any other persistence failure
        """
        ...

    def insert_token(self, token: str, subscriber_id: UUID) -> None:
        """
        Store a confirmation token for a subscriber.

        Raises:
            UnknownSubscriber: subscriber_id does not exist
        """
        ...

    def find_subscriber_by_token(self, token: str) -> UUID | None:
        """Get the subscriber ID a token was issued for."""
        ...

    def mark_confirmed(self, subscriber_id: UUID) -> bool:
        """
        Confirm a subscriber.

        Returns:
            True if the status changed, False if it was already confirmed
        """
        ...

    def iter_confirmed_emails(self) -> Iterator[str]:
        """Lazily yield the email of every confirmed subscriber. Order is unspecified."""
        ...

    def get_subscriber(self, subscriber_id: UUID) -> Subscriber | None:
        """Get subscriber by ID."""
        ...

    def get_subscriber_by_email(self, email: str) -> Subscriber | None:
        """Get subscriber by exact email address."""
        ...


class UnitOfWorkPort(Protocol):
    """
    Transaction boundary around the store.

    Usage:
        with uow_factory() as uow:
            sid = uow.subscribers.insert_pending_subscriber(...)
            uow.subscribers.insert_token(token, sid)
            uow.commit()

    Leaving the block without commit() (or with an exception) rolls back.
    """

    @property
    def subscribers(self) -> SubscriberStorePort: ...

    def __enter__(self) -> UnitOfWorkPort: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


UnitOfWorkFactory = Callable[[], UnitOfWorkPort]
