"""
Request/response models for the HTTP API.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from mailinglist.components.delivery import DeliveryReport


class SubscribeRequest(BaseModel):
    """Request body for a new subscription. Field rules are checked by the service."""

    email: str = Field(default="", description="Email address to subscribe")
    name: str = Field(default="", description="Display name")


class SubscribeResponse(BaseModel):
    subscriber_id: str
    status: str
    message: str


class ConfirmResponse(BaseModel):
    subscriber_id: str
    already_confirmed: bool
    message: str


class NewsletterRequest(BaseModel):
    """Newsletter issue to deliver to all confirmed subscribers."""

    title: str = Field(default="", description="Issue title, used as subject")
    html_content: str = Field(default="", description="HTML body")
    text_content: str = Field(default="", description="Plain text body")


class DeliveryFailureResponse(BaseModel):
    recipient: str
    reason: str


class DeliveryReportResponse(BaseModel):
    attempted: int
    succeeded: int
    failed: int
    failures: list[DeliveryFailureResponse]
    succeeded_recipients: list[str]
    cancelled: bool
    started_at: str | None = None
    finished_at: str | None = None

    @classmethod
    def from_report(cls, report: DeliveryReport) -> DeliveryReportResponse:
        return cls.model_validate(report.to_dict())


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str
