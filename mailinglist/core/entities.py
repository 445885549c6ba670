"""
Domain entities for the mailing list.

- Subscriber: a person on the list, pending until the address is confirmed
- ConfirmationToken: unguessable credential proving control of an address
- NewsletterIssue: one piece of content delivered to every confirmed subscriber

State machine (Subscriber): pending_confirmation -> confirmed (terminal)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class SubscriberStatus(Enum):
    """
    Subscriber status.

    State transitions:
    - pending_confirmation -> confirmed (via confirmation link)

    There is no way back; confirming twice leaves the status unchanged.
    """

    PENDING_CONFIRMATION = "pending_confirmation"
    CONFIRMED = "confirmed"


VALID_TRANSITIONS: dict[SubscriberStatus, set[SubscriberStatus]] = {
    SubscriberStatus.PENDING_CONFIRMATION: {SubscriberStatus.CONFIRMED},
    SubscriberStatus.CONFIRMED: set(),  # Terminal state
}


def can_transition(from_status: SubscriberStatus, to_status: SubscriberStatus) -> bool:
    """Check if a status transition is allowed."""
    return to_status in VALID_TRANSITIONS.get(from_status, set())


@dataclass(frozen=True)
class Subscriber:
    """Read-only copy of a stored subscriber row."""

    id: UUID
    email: str
    name: str
    subscribed_at: datetime
    status: SubscriberStatus = SubscriberStatus.PENDING_CONFIRMATION


@dataclass(frozen=True)
class ConfirmationToken:
    """Confirmation token row. Several may point at one subscriber."""

    token: str
    subscriber_id: UUID


@dataclass(frozen=True)
class NewsletterIssue:
    """A newsletter issue with HTML and plain text bodies."""

    title: str
    html_content: str
    text_content: str

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("Issue title is required")
        if not self.html_content.strip() and not self.text_content.strip():
            raise ValueError("At least one of html_content or text_content is required")
