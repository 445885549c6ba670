"""
Email Gateway interface.

Protocol-based interface for sending a single email.
Used by the subscription service (confirmation emails) and the
delivery pipeline (newsletter issues).

Key requirements:
- Send one email with HTML and plain text body
- Stateless send operation, safe to call from worker threads
- Failures raise DeliveryError; transient gateway outages are expected

Implementation strategies:
1. DevEmailAdapter: Logs emails and keeps them in memory (dev/test)
2. PostmarkEmailAdapter: Sends through a Postmark-style HTTP API

All strategies implement the same EmailPort interface.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    SKIPPED = "skipped"  # Dev adapter or dry-run


@dataclass(frozen=True)
class EmailMessage:
    """
    Email message to be sent.

    Supports both HTML and plain text body for maximum compatibility.
    """

    sender: str
    recipient: str
    subject: str
    body_html: str
    body_text: str

    def __post_init__(self) -> None:
        """Validate email message."""
        if not self.recipient:
            raise ValueError("Recipient email is required")
        if not self.subject:
            raise ValueError("Subject is required")
        if not self.body_html and not self.body_text:
            raise ValueError("At least one of body_html or body_text is required")


@dataclass
class EmailResult:
    """Result of a successful email send."""

    status: EmailStatus
    recipient: str
    message_id: str | None = None  # Provider's message ID
    sent_at: datetime | None = None

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        """Create a successful send result."""
        return cls(
            status=EmailStatus.SENT,
            recipient=recipient,
            message_id=message_id,
            sent_at=datetime.now(UTC),
        )

    @classmethod
    def skipped(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        """Create a skipped result (dev adapter)."""
        return cls(
            status=EmailStatus.SKIPPED,
            recipient=recipient,
            message_id=message_id,
        )


class EmailPort(Protocol):
    """
    Email sending interface.

    Implementations:
    - DevEmailAdapter: Logs to console (dev/test)
    - PostmarkEmailAdapter: Sends via HTTP API
    """

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str,
    ) -> EmailResult:
        """
        Send one email.

        Args:
            recipient: Email address of recipient
            subject: Email subject line
            body_html: HTML body content
            body_text: Plain text body

        Returns:
            EmailResult with send outcome

        Raises:
            DeliveryError: the gateway rejected the message, timed out
                or could not be reached
        """
        ...
