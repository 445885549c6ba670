from __future__ import annotations

from dataclasses import dataclass

from mailinglist.adapters.clock import SystemClock
from mailinglist.adapters.dev_email import DevEmailAdapter
from mailinglist.adapters.postmark_email import PostmarkEmailAdapter
from mailinglist.adapters.sqlite.store import SQLiteSubscriberStore, sqlite_unit_of_work_factory
from mailinglist.app_shell.config import Settings
from mailinglist.components.confirmation import ConfirmationService
from mailinglist.components.delivery import DeliveryConfig, DeliveryPipeline
from mailinglist.components.subscription import SubscriptionConfig, SubscriptionService
from mailinglist.components.tokens import TokenGenerator
from mailinglist.core.ports.clock import ClockPort
from mailinglist.core.ports.email import EmailPort


def build_email_gateway(settings: Settings) -> EmailPort:
    cfg = settings.email_client
    if cfg.provider == "postmark":
        return PostmarkEmailAdapter(
            base_url=cfg.base_url,
            sender=cfg.sender_email,
            authorization_token=cfg.authorization_token,
            timeout_seconds=cfg.timeout_seconds,
        )
    return DevEmailAdapter()


@dataclass
class ServiceContext:
    subscription_service: SubscriptionService
    confirmation_service: ConfirmationService
    delivery_pipeline: DeliveryPipeline
    store: SQLiteSubscriberStore
    email_gateway: EmailPort
    clock: ClockPort
    settings: Settings

    @classmethod
    def create(
        cls,
        settings: Settings,
        email_gateway: EmailPort | None = None,
        clock: ClockPort | None = None,
    ) -> ServiceContext:
        db_path = settings.database.path
        store = SQLiteSubscriberStore(db_path)
        gateway = email_gateway or build_email_gateway(settings)
        clock = clock or SystemClock()

        subscription_service = SubscriptionService(
            uow_factory=sqlite_unit_of_work_factory(db_path),
            email_sender=gateway,
            token_generator=TokenGenerator(),
            clock=clock,
            config=SubscriptionConfig(
                base_url=settings.application.base_url,
                confirmation_subject=settings.delivery.confirmation_subject,
            ),
        )
        delivery_pipeline = DeliveryPipeline(
            store=store,
            email_sender=gateway,
            clock=clock,
            config=DeliveryConfig(max_workers=settings.delivery.max_workers),
        )

        return cls(
            subscription_service=subscription_service,
            confirmation_service=ConfirmationService(store),
            delivery_pipeline=delivery_pipeline,
            store=store,
            email_gateway=gateway,
            clock=clock,
            settings=settings,
        )
