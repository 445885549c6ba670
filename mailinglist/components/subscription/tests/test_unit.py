"""
Subscription component unit tests.

Covers:
- Valid intake stores a pending subscriber and token, then sends the link
- Name and email validation (nothing written on rejection)
- Duplicate email rejected without a second email
- Gateway failure leaves the pending subscriber and token in place
- Token failure rolls the subscriber back
"""

from __future__ import annotations

import random
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import pytest

from mailinglist.adapters.clock import FixedClock
from mailinglist.adapters.dev_email import DevEmailAdapter
from mailinglist.components.subscription import (
    SubscribeInput,
    SubscriptionConfig,
    SubscriptionService,
    build_confirmation_url,
    render_confirmation_email,
    run_subscribe,
)
from mailinglist.components.tokens import TokenGenerator
from mailinglist.core.entities import Subscriber, SubscriberStatus
from mailinglist.core.errors import (
    DeliveryError,
    DuplicateEmail,
    InvalidInput,
    TokenGenerationError,
    UnknownSubscriber,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

# --- Mock Store ---


class MockSubscriberStore:
    """In-memory subscriber store for testing."""

    def __init__(self) -> None:
        self.subscribers: dict[UUID, Subscriber] = {}
        self.tokens: dict[str, UUID] = {}

    def insert_pending_subscriber(self, email: str, name: str, now: datetime) -> UUID:
        if any(s.email == email for s in self.subscribers.values()):
            raise DuplicateEmail(email)
        sid = uuid4()
        self.subscribers[sid] = Subscriber(
            id=sid,
            email=email,
            name=name,
            subscribed_at=now,
            status=SubscriberStatus.PENDING_CONFIRMATION,
        )
        return sid

    def insert_token(self, token: str, subscriber_id: UUID) -> None:
        if subscriber_id not in self.subscribers:
            raise UnknownSubscriber(subscriber_id)
        self.tokens[token] = subscriber_id

    def find_subscriber_by_token(self, token: str) -> UUID | None:
        return self.tokens.get(token)

    def get_subscriber_by_email(self, email: str) -> Subscriber | None:
        return next((s for s in self.subscribers.values() if s.email == email), None)

    def tokens_for(self, subscriber_id: UUID) -> list[str]:
        return [t for t, sid in self.tokens.items() if sid == subscriber_id]


class MockUnitOfWork:
    """Snapshot-based unit of work: uncommitted changes are restored on exit."""

    def __init__(self, store: MockSubscriberStore) -> None:
        self._store = store
        self._committed = False
        self._snapshot: tuple[dict[UUID, Subscriber], dict[str, UUID]] = ({}, {})

    @property
    def subscribers(self) -> MockSubscriberStore:
        return self._store

    def __enter__(self) -> MockUnitOfWork:
        self._snapshot = (dict(self._store.subscribers), dict(self._store.tokens))
        self._committed = False
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if not self._committed:
            self.rollback()

    def commit(self) -> None:
        self._committed = True

    def rollback(self) -> None:
        self._store.subscribers, self._store.tokens = (
            dict(self._snapshot[0]),
            dict(self._snapshot[1]),
        )


class FailingTokenGenerator:
    def generate(self) -> str:
        raise TokenGenerationError("Randomness source failed: no entropy")


# --- Fixtures ---


@pytest.fixture
def store() -> MockSubscriberStore:
    return MockSubscriberStore()


@pytest.fixture
def email_sender() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def config() -> SubscriptionConfig:
    return SubscriptionConfig(base_url="https://news.example.com/")


def subscribe(
    store: MockSubscriberStore,
    email_sender: DevEmailAdapter,
    config: SubscriptionConfig,
    email: str = "ursula_le_guin@gmail.com",
    name: str = "le guin",
    token_generator: Any = None,
):
    return run_subscribe(
        SubscribeInput(email=email, name=name),
        uow_factory=lambda: MockUnitOfWork(store),
        email_sender=email_sender,
        token_generator=token_generator or TokenGenerator(random_source=random.Random(7)),
        clock=FixedClock(NOW),
        config=config,
    )


# --- Pure Functions ---


class TestConfirmationLink:
    def test_build_confirmation_url(self) -> None:
        url = build_confirmation_url("https://news.example.com/", "abc123")
        assert url == "https://news.example.com/subscriptions/confirm?token=abc123"

    def test_build_confirmation_url_custom_path(self) -> None:
        url = build_confirmation_url("http://localhost:8000", "t", "/confirm")
        assert url == "http://localhost:8000/confirm?token=t"

    def test_render_confirmation_email_contains_link(self) -> None:
        url = "https://news.example.com/subscriptions/confirm?token=abc"
        body_html, body_text = render_confirmation_email(url)

        assert f'href="{url}"' in body_html
        assert url in body_text
        assert "Welcome to our newsletter!" in body_text


# --- Run Handler ---


class TestSubscribeValid:
    def test_creates_pending_subscriber(
        self, store: MockSubscriberStore, email_sender: DevEmailAdapter, config: SubscriptionConfig
    ) -> None:
        result = subscribe(store, email_sender, config)

        assert result.status == SubscriberStatus.PENDING_CONFIRMATION
        saved = store.get_subscriber_by_email("ursula_le_guin@gmail.com")
        assert saved is not None
        assert saved.id == result.subscriber_id
        assert saved.name == "le guin"
        assert saved.status == SubscriberStatus.PENDING_CONFIRMATION
        assert saved.subscribed_at == NOW

    def test_stores_token_for_subscriber(
        self, store: MockSubscriberStore, email_sender: DevEmailAdapter, config: SubscriptionConfig
    ) -> None:
        result = subscribe(store, email_sender, config)

        tokens = store.tokens_for(result.subscriber_id)
        assert len(tokens) == 1
        assert len(tokens[0]) == 25

    def test_sends_exactly_one_confirmation_email(
        self, store: MockSubscriberStore, email_sender: DevEmailAdapter, config: SubscriptionConfig
    ) -> None:
        result = subscribe(store, email_sender, config)

        assert email_sender.email_count == 1
        email = email_sender.get_last_email()
        assert email is not None
        assert email.recipient == "ursula_le_guin@gmail.com"
        assert email.subject == "Welcome!"

        token = store.tokens_for(result.subscriber_id)[0]
        expected = f"https://news.example.com/subscriptions/confirm?token={token}"
        assert result.confirmation_url == expected
        assert expected in email.body_text
        assert expected in email.body_html

    def test_email_is_trimmed(
        self, store: MockSubscriberStore, email_sender: DevEmailAdapter, config: SubscriptionConfig
    ) -> None:
        result = subscribe(store, email_sender, config, email="  user@example.com ")

        assert result.email == "user@example.com"
        assert store.get_subscriber_by_email("user@example.com") is not None

    def test_name_length_counts_graphemes(
        self, store: MockSubscriberStore, email_sender: DevEmailAdapter, config: SubscriptionConfig
    ) -> None:
        # 256 user-perceived characters, 512 code points
        name = "e\u0301" * 256

        subscribe(store, email_sender, config, name=name)

        assert store.get_subscriber_by_email("ursula_le_guin@gmail.com") is not None


class TestSubscribeInvalid:
    @pytest.mark.parametrize(
        "name",
        [
            "",
            "   ",
            "a" * 257,
            "e\u0301" * 257,
        ]
        + [f"bad{c}name" for c in '/()"<>\\{}'],
    )
    def test_invalid_name_rejected(
        self,
        store: MockSubscriberStore,
        email_sender: DevEmailAdapter,
        config: SubscriptionConfig,
        name: str,
    ) -> None:
        with pytest.raises(InvalidInput) as exc_info:
            subscribe(store, email_sender, config, name=name)

        assert exc_info.value.field == "name"
        assert store.subscribers == {}
        assert store.tokens == {}
        assert email_sender.email_count == 0

    @pytest.mark.parametrize(
        "email",
        [
            "",
            "   ",
            "ursulaDomain.com",
            "@domain.com",
            "user@",
            "user@localhost",
            "a" * 250 + "@example.com",
        ],
    )
    def test_invalid_email_rejected(
        self,
        store: MockSubscriberStore,
        email_sender: DevEmailAdapter,
        config: SubscriptionConfig,
        email: str,
    ) -> None:
        with pytest.raises(InvalidInput) as exc_info:
            subscribe(store, email_sender, config, email=email)

        assert exc_info.value.field == "email"
        assert store.subscribers == {}
        assert email_sender.email_count == 0


class TestSubscribeDuplicate:
    def test_duplicate_email_rejected(
        self, store: MockSubscriberStore, email_sender: DevEmailAdapter, config: SubscriptionConfig
    ) -> None:
        subscribe(store, email_sender, config)

        with pytest.raises(DuplicateEmail):
            subscribe(store, email_sender, config, name="someone else")

        assert len(store.subscribers) == 1
        assert len(store.tokens) == 1
        assert email_sender.email_count == 1


class TestSubscribeFailures:
    def test_gateway_failure_keeps_pending_subscriber(
        self, store: MockSubscriberStore, config: SubscriptionConfig
    ) -> None:
        sender = DevEmailAdapter(failing_recipients={"ursula_le_guin@gmail.com"})

        with pytest.raises(DeliveryError):
            subscribe(store, sender, config)

        saved = store.get_subscriber_by_email("ursula_le_guin@gmail.com")
        assert saved is not None
        assert saved.status == SubscriberStatus.PENDING_CONFIRMATION
        assert len(store.tokens_for(saved.id)) == 1

    def test_token_failure_rolls_back_subscriber(
        self, store: MockSubscriberStore, email_sender: DevEmailAdapter, config: SubscriptionConfig
    ) -> None:
        with pytest.raises(TokenGenerationError):
            subscribe(store, email_sender, config, token_generator=FailingTokenGenerator())

        assert store.subscribers == {}
        assert store.tokens == {}
        assert email_sender.email_count == 0


class TestSubscriptionService:
    def test_subscribe_delegates_to_handler(
        self, store: MockSubscriberStore, email_sender: DevEmailAdapter, config: SubscriptionConfig
    ) -> None:
        service = SubscriptionService(
            uow_factory=lambda: MockUnitOfWork(store),
            email_sender=email_sender,
            token_generator=TokenGenerator(),
            clock=FixedClock(NOW),
            config=config,
        )

        result = service.subscribe(email="reader@example.com", name="Reader")

        assert result.email == "reader@example.com"
        assert email_sender.get_emails_to("reader@example.com")
