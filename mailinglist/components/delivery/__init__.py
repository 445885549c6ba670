"""
Newsletter Delivery Pipeline component.

Fan-out of one issue to all confirmed subscribers with per-recipient
failure isolation.
"""

from mailinglist.components.delivery.component import DeliveryPipeline, run_deliver
from mailinglist.components.delivery.models import (
    INVALID_STORED_ADDRESS,
    DeliveryConfig,
    DeliveryFailure,
    DeliveryReport,
)

__all__ = [
    "run_deliver",
    "DeliveryPipeline",
    "DeliveryConfig",
    "DeliveryFailure",
    "DeliveryReport",
    "INVALID_STORED_ADDRESS",
]
