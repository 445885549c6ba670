import re
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from pathlib import Path
from urllib.parse import urlsplit

import pytest
from fastapi.testclient import TestClient

from mailinglist.adapters.clock import FixedClock
from mailinglist.adapters.dev_email import DevEmailAdapter
from mailinglist.adapters.sqlite.migrator import SQLiteMigrator
from mailinglist.adapters.sqlite.store import SQLiteSubscriberStore
from mailinglist.api.deps import get_clock, get_email_gateway, get_settings
from mailinglist.api.main import app
from mailinglist.app_shell.config import (
    ApplicationSettings,
    DatabaseSettings,
    EmailClientSettings,
    Settings,
)
from mailinglist.app_shell.context import ServiceContext

PROJECT_ROOT = Path(__file__).resolve().parent.parent
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def db_path(tmp_path) -> str:
    """Temporary SQLite database with every migration applied."""
    path = str(tmp_path / "mailinglist.db")
    SQLiteMigrator(path, str(MIGRATIONS_DIR)).run_migrations()
    return path


@pytest.fixture
def store(db_path: str) -> SQLiteSubscriberStore:
    return SQLiteSubscriberStore(db_path)


@pytest.fixture
def email_adapter() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def settings(db_path: str) -> Settings:
    return Settings(
        application=ApplicationSettings(base_url="http://test.local"),
        database=DatabaseSettings(path=db_path, migrations_dir=str(MIGRATIONS_DIR)),
        email_client=EmailClientSettings(sender_email="newsletter@example.com"),
    )


@pytest.fixture
def test_ctx(
    settings: Settings, email_adapter: DevEmailAdapter, clock: FixedClock
) -> ServiceContext:
    """
    Full ServiceContext backed by a temporary SQLite DB and the dev email adapter.
    """
    return ServiceContext.create(settings, email_gateway=email_adapter, clock=clock)


@pytest.fixture
def client(
    settings: Settings, email_adapter: DevEmailAdapter, clock: FixedClock
) -> Generator[TestClient, None, None]:
    """Create test client with dependency overrides."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_email_gateway] = lambda: email_adapter
    app.dependency_overrides[get_clock] = lambda: clock

    yield TestClient(app)

    app.dependency_overrides.clear()


LINK_RE = re.compile(r"https?://[^\s\"<]+")


@pytest.fixture
def confirmation_path(email_adapter: DevEmailAdapter) -> Callable[[], str]:
    """Path and query of the link in the most recent confirmation email."""

    def _path() -> str:
        email = email_adapter.get_last_email()
        assert email is not None
        match = LINK_RE.search(email.body_text)
        assert match is not None
        parts = urlsplit(match.group(0))
        return f"{parts.path}?{parts.query}"

    return _path
