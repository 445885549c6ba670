"""
Confirmation component.

Second half of double opt-in: a token from the confirmation email
moves its subscriber from pending_confirmation to confirmed.

Key behaviors:
- Unknown or empty token -> InvalidToken, nothing mutated
- Confirmation is a single idempotent UPDATE; repeats are no-ops
- Tokens are read, not deleted, and do not expire
- No email is sent on confirmation
"""

from __future__ import annotations

import logging

from mailinglist.components.confirmation.models import ConfirmInput, ConfirmOutput
from mailinglist.core.errors import InvalidToken
from mailinglist.core.ports.store import SubscriberStorePort

logger = logging.getLogger(__name__)


def run_confirm(inp: ConfirmInput, *, store: SubscriberStorePort) -> ConfirmOutput:
    """
    Handle a confirmation request.

    Raises:
        InvalidToken: token missing or not issued by us
        StoreError: persistence failed
    """
    token = inp.token.strip() if inp.token else ""
    if not token:
        raise InvalidToken("Confirmation token is required")

    subscriber_id = store.find_subscriber_by_token(token)
    if subscriber_id is None:
        raise InvalidToken("Invalid confirmation link")

    changed = store.mark_confirmed(subscriber_id)
    if changed:
        logger.info("Subscriber %s confirmed", subscriber_id)
    else:
        logger.info("Subscriber %s was already confirmed", subscriber_id)

    return ConfirmOutput(subscriber_id=subscriber_id, already_confirmed=not changed)


class ConfirmationService:
    """Confirmation service bound to its store."""

    def __init__(self, store: SubscriberStorePort) -> None:
        self.store = store

    def confirm(self, token: str) -> ConfirmOutput:
        return run_confirm(ConfirmInput(token=token), store=self.store)
