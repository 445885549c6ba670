from functools import lru_cache

from fastapi import Depends

from mailinglist.adapters.clock import SystemClock
from mailinglist.adapters.sqlite.store import SQLiteSubscriberStore, sqlite_unit_of_work_factory
from mailinglist.app_shell.config import Settings, load_settings
from mailinglist.app_shell.context import build_email_gateway
from mailinglist.components.confirmation import ConfirmationService
from mailinglist.components.delivery import DeliveryConfig, DeliveryPipeline
from mailinglist.components.subscription import SubscriptionConfig, SubscriptionService
from mailinglist.components.tokens import TokenGenerator
from mailinglist.core.ports.clock import ClockPort
from mailinglist.core.ports.email import EmailPort
from mailinglist.core.ports.store import UnitOfWorkFactory


# --- Settings ---
@lru_cache
def get_settings() -> Settings:
    return load_settings()


# --- Store ---
def get_store(settings: Settings = Depends(get_settings)) -> SQLiteSubscriberStore:
    return SQLiteSubscriberStore(settings.database.path)


def get_unit_of_work_factory(settings: Settings = Depends(get_settings)) -> UnitOfWorkFactory:
    return sqlite_unit_of_work_factory(settings.database.path)


# --- Adapters ---
# One gateway per process so the HTTP session's connection pool is shared.
@lru_cache
def get_email_gateway() -> EmailPort:
    return build_email_gateway(get_settings())


_clock_instance: SystemClock | None = None


def get_clock() -> ClockPort:
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


def get_token_generator() -> TokenGenerator:
    return TokenGenerator()


# --- Services ---
def get_subscription_service(
    settings: Settings = Depends(get_settings),
    uow_factory: UnitOfWorkFactory = Depends(get_unit_of_work_factory),
    email_gateway: EmailPort = Depends(get_email_gateway),
    token_generator: TokenGenerator = Depends(get_token_generator),
    clock: ClockPort = Depends(get_clock),
) -> SubscriptionService:
    return SubscriptionService(
        uow_factory=uow_factory,
        email_sender=email_gateway,
        token_generator=token_generator,
        clock=clock,
        config=SubscriptionConfig(
            base_url=settings.application.base_url,
            confirmation_subject=settings.delivery.confirmation_subject,
        ),
    )


def get_confirmation_service(
    store: SQLiteSubscriberStore = Depends(get_store),
) -> ConfirmationService:
    return ConfirmationService(store)


def get_delivery_pipeline(
    settings: Settings = Depends(get_settings),
    store: SQLiteSubscriberStore = Depends(get_store),
    email_gateway: EmailPort = Depends(get_email_gateway),
    clock: ClockPort = Depends(get_clock),
) -> DeliveryPipeline:
    return DeliveryPipeline(
        store=store,
        email_sender=email_gateway,
        clock=clock,
        config=DeliveryConfig(max_workers=settings.delivery.max_workers),
    )
