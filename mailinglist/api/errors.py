"""
Mapping from the domain error taxonomy to HTTP responses.

Client errors carry the human-readable reason; server errors are logged
and answered with a generic message.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from mailinglist.core.errors import (
    DeliveryError,
    DuplicateEmail,
    InvalidInput,
    InvalidToken,
    MailingListError,
)

logger = logging.getLogger(__name__)

CLIENT_ERROR_STATUS: dict[type[MailingListError], int] = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    DuplicateEmail: status.HTTP_400_BAD_REQUEST,
    InvalidToken: status.HTTP_404_NOT_FOUND,
}


def to_http_exception(err: MailingListError) -> HTTPException:
    for error_type, status_code in CLIENT_ERROR_STATUS.items():
        if isinstance(err, error_type):
            return HTTPException(status_code=status_code, detail=_client_detail(err))

    logger.error("Request failed: %s", err, exc_info=err)
    if isinstance(err, DeliveryError):
        detail = "We could not send the confirmation email. Please try again later."
    else:
        detail = "Something went wrong on our side. Please try again later."
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def _client_detail(err: MailingListError) -> str:
    if isinstance(err, InvalidInput):
        return err.reason
    if isinstance(err, DuplicateEmail):
        return "This email address is already subscribed. Please check your inbox."
    if isinstance(err, InvalidToken):
        return err.reason
    return str(err)
