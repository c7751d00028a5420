"""Notification request and response schemas."""

from datetime import datetime

from pydantic import Field

from membership.models import NotificationStatus, NotificationType
from membership.schemas import CamelModel


class SendNotificationRequest(CamelModel):
    type: NotificationType
    recipient: str = Field(min_length=1, max_length=255)
    subject: str = Field(default="", max_length=200)
    body: str = Field(min_length=1)


class SendBulkNotificationRequest(CamelModel):
    type: NotificationType
    recipients: list[str] = Field(min_length=1)
    subject: str = Field(default="", max_length=200)
    body: str = Field(min_length=1)


class PaymentReminderRequest(CamelModel):
    payment_id: int
    type: NotificationType = NotificationType.EMAIL


class NotificationResponse(CamelModel):
    id: int
    type: NotificationType
    recipient: str
    subject: str
    body: str
    status: NotificationStatus
    sent_at: datetime | None = None
    retry_count: int
    error_message: str | None = None
    member_id: int | None = None
    payment_id: int | None = None
    created_at: datetime


class BulkSendResponse(CamelModel):
    total: int
    sent: int
    failed: int


class TemplateResponse(CamelModel):
    id: int
    name: str
    type: NotificationType
    subject: str
    body: str
