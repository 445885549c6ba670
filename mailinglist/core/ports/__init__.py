# Ports (Protocol interfaces) for the mailing list core.
# Abstract interfaces for adapters; no implementations here

from mailinglist.core.ports.clock import ClockPort
from mailinglist.core.ports.email import (
    EmailMessage,
    EmailPort,
    EmailResult,
    EmailStatus,
)
from mailinglist.core.ports.store import (
    SubscriberStorePort,
    UnitOfWorkFactory,
    UnitOfWorkPort,
)

__all__ = [
    "ClockPort",
    # Email
    "EmailMessage",
    "EmailPort",
    "EmailResult",
    "EmailStatus",
    # Store
    "SubscriberStorePort",
    "UnitOfWorkFactory",
    "UnitOfWorkPort",
]
