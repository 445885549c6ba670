"""
Confirmation component.

Token -> confirmed subscriber, exactly once.
"""

from mailinglist.components.confirmation.component import ConfirmationService, run_confirm
from mailinglist.components.confirmation.models import ConfirmInput, ConfirmOutput

__all__ = [
    "run_confirm",
    "ConfirmationService",
    "ConfirmInput",
    "ConfirmOutput",
]
