"""
Subscription endpoints.

Endpoints:
- POST /subscriptions - Register a pending subscriber and send the confirmation email
- GET /subscriptions/confirm?token=... - Confirm a pending subscriber
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mailinglist.api.deps import get_confirmation_service, get_subscription_service
from mailinglist.api.errors import to_http_exception
from mailinglist.api.schemas import (
    ConfirmResponse,
    ErrorResponse,
    SubscribeRequest,
    SubscribeResponse,
)
from mailinglist.components.confirmation import ConfirmationService
from mailinglist.components.subscription import SubscriptionService
from mailinglist.core.errors import MailingListError

router = APIRouter()


@router.post(
    "",
    response_model=SubscribeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def subscribe(
    request: SubscribeRequest,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscribeResponse:
    """
    Subscribe to the newsletter.

    The subscriber stays pending until the link in the confirmation
    email is followed.
    """
    try:
        result = service.subscribe(email=request.email, name=request.name)
    except MailingListError as e:
        raise to_http_exception(e) from e

    return SubscribeResponse(
        subscriber_id=str(result.subscriber_id),
        status=result.status.value,
        message="Please check your email to confirm your subscription.",
    )


@router.get(
    "/confirm",
    response_model=ConfirmResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def confirm(
    token: str = Query("", description="Confirmation token from the email link"),
    service: ConfirmationService = Depends(get_confirmation_service),
) -> ConfirmResponse:
    if not token.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Confirmation token is required",
        )

    try:
        result = service.confirm(token)
    except MailingListError as e:
        raise to_http_exception(e) from e

    if result.already_confirmed:
        message = "Your subscription was already confirmed."
    else:
        message = "Your subscription is confirmed. Welcome aboard!"
    return ConfirmResponse(
        subscriber_id=str(result.subscriber_id),
        already_confirmed=result.already_confirmed,
        message=message,
    )
