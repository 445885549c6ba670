"""
Subscription component.

Double opt-in intake: pending subscriber + token + confirmation email.
"""

from mailinglist.components.subscription.component import (
    SubscriptionService,
    build_confirmation_url,
    render_confirmation_email,
    run_subscribe,
)
from mailinglist.components.subscription.models import (
    SubscribeInput,
    SubscribeOutput,
    SubscriptionConfig,
)
from mailinglist.components.subscription.ports import TokenGeneratorPort

__all__ = [
    # Component
    "run_subscribe",
    "SubscriptionService",
    # Pure functions
    "build_confirmation_url",
    "render_confirmation_email",
    # Models
    "SubscribeInput",
    "SubscribeOutput",
    "SubscriptionConfig",
    # Ports
    "TokenGeneratorPort",
]
