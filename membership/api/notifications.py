"""Notification endpoints (delivery itself is external)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from membership.api.auth import get_identity
from membership.models import NotificationStatus
from membership.schemas.notifications import (
    BulkSendResponse,
    NotificationResponse,
    PaymentReminderRequest,
    SendBulkNotificationRequest,
    SendNotificationRequest,
    TemplateResponse,
)
from membership.services import get_db
from membership.services.notification_service import NotificationService

router = APIRouter(
    prefix="/notifications", tags=["notifications"], dependencies=[Depends(get_identity)]
)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """Dependency hook so the gateway can be swapped (tests, deployments)."""
    return NotificationService(db)


@router.get("", response_model=list[NotificationResponse])
def list_notifications(
    service: NotificationService = Depends(get_notification_service),
) -> list[NotificationResponse]:
    return [NotificationResponse.model_validate(n) for n in service.list_notifications()]


@router.get("/templates", response_model=list[TemplateResponse])
def list_templates() -> list[TemplateResponse]:
    return [TemplateResponse.model_validate(t) for t in NotificationService.templates()]


@router.post("/send", response_model=NotificationResponse)
def send_notification(
    body: SendNotificationRequest,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    notification = service.send(
        type=body.type, recipient=body.recipient, subject=body.subject, body=body.body
    )
    return NotificationResponse.model_validate(notification)


@router.post("/send-bulk", response_model=BulkSendResponse)
def send_bulk_notification(
    body: SendBulkNotificationRequest,
    service: NotificationService = Depends(get_notification_service),
) -> BulkSendResponse:
    notifications = service.send_bulk(
        type=body.type, recipients=body.recipients, subject=body.subject, body=body.body
    )
    sent = sum(1 for n in notifications if n.status == NotificationStatus.SENT)
    return BulkSendResponse(total=len(notifications), sent=sent, failed=len(notifications) - sent)


@router.post("/payment-reminder", response_model=NotificationResponse)
def send_payment_reminder(
    body: PaymentReminderRequest,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    """Remind a member about one ledger entry."""
    notification = service.send_payment_reminder(body.payment_id, type=body.type)
    return NotificationResponse.model_validate(notification)
