"""
Error taxonomy shared by the components and the HTTP layer.

Client errors: InvalidInput, DuplicateEmail, InvalidToken
Server errors: DeliveryError, StoreError, UnknownSubscriber, TokenGenerationError
"""

from __future__ import annotations

from uuid import UUID


class MailingListError(Exception):
    """Base mailing list error."""

    pass


class InvalidInput(MailingListError):
    """A request field failed validation."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class DuplicateEmail(MailingListError):
    """The email address is already on the list."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email '{email}' is already subscribed")


class UnknownSubscriber(MailingListError):
    """A referenced subscriber does not exist."""

    def __init__(self, subscriber_id: UUID) -> None:
        self.subscriber_id = subscriber_id
        super().__init__(f"Subscriber {subscriber_id} not found")


class InvalidToken(MailingListError):
    """The confirmation token is missing or unknown."""

    def __init__(self, reason: str = "Token not found") -> None:
        self.reason = reason
        super().__init__(f"Token error: {reason}")


class DeliveryError(MailingListError):
    """The email gateway could not send a message."""

    def __init__(self, recipient: str, reason: str) -> None:
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"Failed to send email to {recipient}: {reason}")


class StoreError(MailingListError):
    """Persistence failed."""

    pass


class TokenGenerationError(MailingListError):
    """The randomness source could not produce a token. Not retriable."""

    pass
