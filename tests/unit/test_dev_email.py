"""
Unit tests for DevEmailAdapter.

Tests cover:
1. send_email stores and logs instead of sending
2. Status is SKIPPED (not SENT)
3. Simulated failures for configured recipients
4. Test helper methods
"""

import logging

import pytest

from mailinglist.adapters.dev_email import DevEmailAdapter
from mailinglist.core.errors import DeliveryError
from mailinglist.core.ports.email import EmailStatus


class TestDevEmailAdapterSendEmail:
    def test_send_email_returns_skipped_status(self) -> None:
        adapter = DevEmailAdapter()

        result = adapter.send_email(
            recipient="user@example.com",
            subject="Test Subject",
            body_html="<p>Test body</p>",
            body_text="Test body",
        )

        assert result.status == EmailStatus.SKIPPED
        assert result.recipient == "user@example.com"

    def test_send_email_includes_message_id(self) -> None:
        adapter = DevEmailAdapter()

        result = adapter.send_email("user@example.com", "Test", "<p>Test</p>", "Test")

        assert result.message_id is not None
        assert result.message_id.startswith("dev-")

    def test_send_email_stores_message(self) -> None:
        adapter = DevEmailAdapter()

        adapter.send_email("user@example.com", "Hello", "<p>Hi</p>", "Hi")

        email = adapter.get_last_email()
        assert email is not None
        assert email.recipient == "user@example.com"
        assert email.subject == "Hello"
        assert email.body_html == "<p>Hi</p>"
        assert email.body_text == "Hi"

    def test_send_email_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        adapter = DevEmailAdapter()

        with caplog.at_level(logging.INFO, logger="mailinglist.adapters.dev_email"):
            adapter.send_email("user@example.com", "Logged", "<p>Body</p>", "Body")

        assert "EMAIL (dev): To=user@example.com" in caplog.text
        assert "Subject=Logged" in caplog.text

    def test_long_body_preview_truncated(self, caplog: pytest.LogCaptureFixture) -> None:
        adapter = DevEmailAdapter(body_preview_length=10)

        with caplog.at_level(logging.INFO, logger="mailinglist.adapters.dev_email"):
            adapter.send_email("user@example.com", "Long", "x" * 50, "x")

        assert "Body=xxxxxxxxxx..." in caplog.text


class TestDevEmailAdapterFailures:
    def test_failing_recipient_raises(self) -> None:
        adapter = DevEmailAdapter(failing_recipients={"bad@example.com"})

        with pytest.raises(DeliveryError) as exc_info:
            adapter.send_email("bad@example.com", "Subject", "<p>x</p>", "x")

        assert exc_info.value.recipient == "bad@example.com"
        assert adapter.email_count == 0

    def test_other_recipients_unaffected(self) -> None:
        adapter = DevEmailAdapter(failing_recipients={"bad@example.com"})

        adapter.send_email("good@example.com", "Subject", "<p>x</p>", "x")

        assert adapter.email_count == 1


class TestDevEmailAdapterHelpers:
    def test_get_emails_to(self) -> None:
        adapter = DevEmailAdapter()
        adapter.send_email("a@example.com", "One", "<p>1</p>", "1")
        adapter.send_email("b@example.com", "Two", "<p>2</p>", "2")
        adapter.send_email("a@example.com", "Three", "<p>3</p>", "3")

        assert [e.subject for e in adapter.get_emails_to("a@example.com")] == ["One", "Three"]

    def test_clear(self) -> None:
        adapter = DevEmailAdapter()
        adapter.send_email("a@example.com", "One", "<p>1</p>", "1")

        adapter.clear()

        assert adapter.email_count == 0
        assert adapter.get_last_email() is None
