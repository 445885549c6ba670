import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from mailinglist import __version__
from mailinglist.api.deps import get_settings
from mailinglist.app_shell.config import ConfigurationError
from mailinglist.app_shell.logging_setup import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    # Load settings on startup (fail-fast)
    try:
        settings = get_settings()
    except ConfigurationError as e:
        print(f"CRITICAL: Settings load failed: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.application.log_level)
    logger.info(
        "Starting in %s environment, database at %s",
        settings.environment.value,
        settings.database.path,
    )

    yield


app = FastAPI(
    title="Mailing List API",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from mailinglist.api.routes import health, newsletters, subscriptions  # noqa: E402

app.include_router(health.router, prefix="", tags=["Health"])
app.include_router(subscriptions.router, prefix="/subscriptions", tags=["Subscriptions"])
app.include_router(newsletters.router, prefix="/newsletters", tags=["Newsletters"])
