"""
Newsletter Delivery Pipeline component.

Fans one newsletter issue out to every confirmed subscriber.

Key behaviors:
- Confirmed addresses are streamed from the store, never loaded at once
- Sends run on a bounded thread pool; at most in_flight_limit are queued
- One failed send is recorded and never stops the others
- Stored addresses that no longer parse are recorded as failures, not sent
- No retries within a run; the report lists failures for out-of-band retry
- A set cancel_event stops new sends; finished sends stay sent

Invariants:
- Only confirmed subscribers are sent to
- report.succeeded + report.failed == report.attempted
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from mailinglist.components.delivery.models import (
    INVALID_STORED_ADDRESS,
    DeliveryConfig,
    DeliveryReport,
)
from mailinglist.core.entities import NewsletterIssue
from mailinglist.core.errors import DeliveryError
from mailinglist.core.ports.clock import ClockPort
from mailinglist.core.ports.email import EmailPort
from mailinglist.core.ports.store import SubscriberStorePort
from mailinglist.core.validation import is_valid_email

logger = logging.getLogger(__name__)


def _send_issue(
    email_sender: EmailPort,
    recipient: str,
    issue: NewsletterIssue,
    cancel_event: threading.Event | None,
) -> bool:
    """Send to one recipient. Returns False when skipped because of cancellation."""
    if cancel_event is not None and cancel_event.is_set():
        return False
    email_sender.send_email(recipient, issue.title, issue.html_content, issue.text_content)
    return True


def _collect(future: Future[bool], recipient: str, report: DeliveryReport) -> None:
    try:
        sent = future.result()
    except DeliveryError as e:
        logger.warning("Newsletter delivery to %s failed: %s", recipient, e.reason)
        report.record_failure(recipient, e.reason)
        return
    except Exception as e:
        logger.warning("Newsletter delivery to %s failed unexpectedly: %r", recipient, e)
        report.record_failure(recipient, f"{type(e).__name__}: {e}")
        return

    if sent:
        report.record_success(recipient)
    else:
        report.cancelled = True


def run_deliver(
    issue: NewsletterIssue,
    *,
    store: SubscriberStorePort,
    email_sender: EmailPort,
    clock: ClockPort,
    config: DeliveryConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> DeliveryReport:
    """
    Deliver an issue to all confirmed subscribers.

    Raises:
        StoreError: the confirmed-subscriber list could not be read.
            Sends already running are finished before it propagates.
    """
    cfg = config or DeliveryConfig()
    report = DeliveryReport(started_at=clock.now_utc())
    in_flight: dict[Future[bool], str] = {}

    logger.info("Delivering issue '%s' with %d workers", issue.title, cfg.max_workers)

    recipients = store.iter_confirmed_emails()
    try:
        with ThreadPoolExecutor(
            max_workers=cfg.max_workers, thread_name_prefix="delivery"
        ) as executor:
            for recipient in recipients:
                if cancel_event is not None and cancel_event.is_set():
                    report.cancelled = True
                    break

                if not is_valid_email(recipient):
                    logger.warning(
                        "Skipping a confirmed subscriber. Their stored address is invalid: %r",
                        recipient,
                    )
                    report.record_failure(recipient, INVALID_STORED_ADDRESS)
                    continue

                if len(in_flight) >= cfg.in_flight_limit:
                    done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                    for future in done:
                        _collect(future, in_flight.pop(future), report)

                future = executor.submit(_send_issue, email_sender, recipient, issue, cancel_event)
                in_flight[future] = recipient

            done, _ = wait(in_flight)
            for future in done:
                _collect(future, in_flight.pop(future), report)
    finally:
        close = getattr(recipients, "close", None)
        if close is not None:
            close()

    report.finished_at = clock.now_utc()

    logger.info(
        "Delivered issue '%s': %d attempted, %d succeeded, %d failed%s",
        issue.title,
        report.attempted,
        report.succeeded,
        report.failed,
        " (cancelled)" if report.cancelled else "",
    )
    return report


class DeliveryPipeline:
    """Delivery pipeline bound to its collaborators."""

    def __init__(
        self,
        store: SubscriberStorePort,
        email_sender: EmailPort,
        clock: ClockPort,
        config: DeliveryConfig | None = None,
    ) -> None:
        self.store = store
        self.email_sender = email_sender
        self.clock = clock
        self.config = config or DeliveryConfig()

    def deliver(
        self,
        issue: NewsletterIssue,
        cancel_event: threading.Event | None = None,
    ) -> DeliveryReport:
        return run_deliver(
            issue,
            store=self.store,
            email_sender=self.email_sender,
            clock=self.clock,
            config=self.config,
            cancel_event=cancel_event,
        )
