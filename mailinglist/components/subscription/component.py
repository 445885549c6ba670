"""
Subscription component.

New-subscription intake for the double opt-in flow.

Key behaviors:
- Validate name (grapheme-aware length) and email syntax
- Insert pending subscriber and confirmation token in one unit of work
- Send the confirmation email after the commit

Failure semantics:
- InvalidInput: nothing is written
- DuplicateEmail: nothing is written, no email sent
- DeliveryError: subscriber and token stay committed (pending, retry-safe)
"""

from __future__ import annotations

import html
import logging

from mailinglist.components.subscription.models import (
    SubscribeInput,
    SubscribeOutput,
    SubscriptionConfig,
)
from mailinglist.components.subscription.ports import TokenGeneratorPort
from mailinglist.core.errors import DeliveryError
from mailinglist.core.ports.clock import ClockPort
from mailinglist.core.ports.email import EmailPort
from mailinglist.core.ports.store import UnitOfWorkFactory
from mailinglist.core.validation import parse_email, parse_name

logger = logging.getLogger(__name__)


# --- Pure Functions ---


def build_confirmation_url(
    base_url: str,
    token: str,
    path: str = "/subscriptions/confirm",
) -> str:
    """
    Build the confirmation URL for email.

    Args:
        base_url: Site base URL
        token: Confirmation token
        path: URL path for confirmation endpoint

    Returns:
        Full confirmation URL
    """
    base = base_url.rstrip("/")
    return f"{base}{path}?token={token}"


def render_confirmation_email(confirmation_url: str) -> tuple[str, str]:
    """Return (html_body, text_body) for the confirmation email."""
    body_html = (
        "Welcome to our newsletter!<br />"
        f'Click <a href="{html.escape(confirmation_url)}">here</a> '
        "to confirm your subscription."
    )
    body_text = (
        "Welcome to our newsletter!\n"
        f"Visit {confirmation_url} to confirm your subscription."
    )
    return body_html, body_text


# --- Run Handler ---


def run_subscribe(
    inp: SubscribeInput,
    *,
    uow_factory: UnitOfWorkFactory,
    email_sender: EmailPort,
    token_generator: TokenGeneratorPort,
    clock: ClockPort,
    config: SubscriptionConfig | None = None,
) -> SubscribeOutput:
    """
    Handle a subscription request.

    Raises:
        InvalidInput: name or email failed validation
        DuplicateEmail: email already on the list
        DeliveryError: confirmation email could not be sent
        StoreError: persistence failed
    """
    cfg = config or SubscriptionConfig()

    name = parse_name(inp.name, cfg.max_name_graphemes)
    email = parse_email(inp.email, cfg.max_email_length)

    with uow_factory() as uow:
        subscriber_id = uow.subscribers.insert_pending_subscriber(email, name, clock.now_utc())
        token = token_generator.generate()
        uow.subscribers.insert_token(token, subscriber_id)
        uow.commit()

    logger.info("New pending subscriber %s", subscriber_id)

    url = build_confirmation_url(cfg.base_url, token, cfg.confirmation_path)
    body_html, body_text = render_confirmation_email(url)
    try:
        email_sender.send_email(email, cfg.confirmation_subject, body_html, body_text)
    except DeliveryError:
        logger.error(
            "Failed to send confirmation email to subscriber %s; left pending", subscriber_id
        )
        raise

    logger.info("Confirmation email sent to subscriber %s", subscriber_id)
    return SubscribeOutput(
        subscriber_id=subscriber_id,
        email=email,
        confirmation_url=url,
    )


class SubscriptionService:
    """Subscription service bound to its collaborators."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        email_sender: EmailPort,
        token_generator: TokenGeneratorPort,
        clock: ClockPort,
        config: SubscriptionConfig | None = None,
    ) -> None:
        self.uow_factory = uow_factory
        self.email_sender = email_sender
        self.token_generator = token_generator
        self.clock = clock
        self.config = config or SubscriptionConfig()

    def subscribe(self, email: str, name: str) -> SubscribeOutput:
        return run_subscribe(
            SubscribeInput(email=email, name=name),
            uow_factory=self.uow_factory,
            email_sender=self.email_sender,
            token_generator=self.token_generator,
            clock=self.clock,
            config=self.config,
        )
