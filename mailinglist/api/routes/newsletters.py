"""
Newsletter publishing endpoint.

POST /newsletters fans an issue out to every confirmed subscriber and
answers with the delivery report. Individual send failures are part of
the report, not an error response.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from mailinglist.api.deps import get_delivery_pipeline
from mailinglist.api.errors import to_http_exception
from mailinglist.api.schemas import DeliveryReportResponse, ErrorResponse, NewsletterRequest
from mailinglist.components.delivery import DeliveryPipeline
from mailinglist.core.entities import NewsletterIssue
from mailinglist.core.errors import MailingListError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=DeliveryReportResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def publish_newsletter(
    request: NewsletterRequest,
    pipeline: DeliveryPipeline = Depends(get_delivery_pipeline),
) -> DeliveryReportResponse:
    try:
        issue = NewsletterIssue(
            title=request.title,
            html_content=request.html_content,
            text_content=request.text_content,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    try:
        report = pipeline.deliver(issue)
    except MailingListError as e:
        raise to_http_exception(e) from e

    if report.has_failures:
        logger.warning(
            "Issue '%s' reached %d of %d subscribers",
            issue.title,
            report.succeeded,
            report.attempted,
        )
    return DeliveryReportResponse.from_report(report)
