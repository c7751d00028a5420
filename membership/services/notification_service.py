"""Notification dispatch: records send attempts and hands them to a gateway.

Actual delivery (email/SMS) happens outside this service. The gateway call
outcome is recorded on the row; retries are left to the caller.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from membership.errors import NotFoundError, ValidationFailedError
from membership.models import (
    Member,
    Notification,
    NotificationStatus,
    NotificationType,
    Payment,
)
from membership.services import commit_or_rollback

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationTemplate:
    """Message template with str.format placeholders."""

    id: int
    name: str
    type: NotificationType
    subject: str
    body: str


TEMPLATES = (
    NotificationTemplate(
        id=1,
        name="Payment reminder",
        type=NotificationType.EMAIL,
        subject="Reminder: {kind} of {amount} due {due_date}",
        body=(
            "Dear {name}, your {kind} of {amount} at {center} was due on {due_date} "
            "(reference {reference}). Please settle it at your earliest convenience."
        ),
    ),
    NotificationTemplate(
        id=2,
        name="Welcome",
        type=NotificationType.EMAIL,
        subject="Welcome to {center}",
        body="Dear {name}, welcome to {center}. We are glad to have you with us.",
    ),
    NotificationTemplate(
        id=3,
        name="Payment reminder SMS",
        type=NotificationType.SMS,
        subject="",
        body="Hello {name}, your {kind} of {amount} is due on {due_date}. Ref {reference}.",
    ),
)

REMINDER_TEMPLATE = {
    NotificationType.EMAIL: TEMPLATES[0],
    NotificationType.SMS: TEMPLATES[2],
}


class NotificationGateway(Protocol):
    """External delivery channel. Raises on delivery failure."""

    def send(self, notification: Notification) -> None: ...


class LoggingGateway:
    """Gateway that only logs the message and reports success."""

    def send(self, notification: Notification) -> None:
        logger.info(
            f"notification.send: type={notification.type.value} recipient={notification.recipient} "
            f"subject={notification.subject!r}"
        )


class NotificationService:
    """Service for recording and dispatching member notifications."""

    def __init__(self, db: Session, gateway: Optional[NotificationGateway] = None):
        self.db = db
        self.gateway = gateway or LoggingGateway()

    def _dispatch(self, notification: Notification) -> None:
        """Hand one persisted Pending row to the gateway and record the outcome."""
        try:
            self.gateway.send(notification)
        except Exception as e:
            notification.status = NotificationStatus.FAILED
            notification.error_message = str(e)[:1000]
            notification.retry_count += 1
            logger.warning(
                f"Notification {notification.id} to {notification.recipient} failed: {e}"
            )
        else:
            notification.status = NotificationStatus.SENT
            notification.sent_at = datetime.now(timezone.utc)

    def send(
        self,
        type: NotificationType,
        recipient: str,
        subject: str,
        body: str,
        member_id: Optional[int] = None,
        payment_id: Optional[int] = None,
    ) -> Notification:
        """Record a notification and dispatch it.

        Raises:
            ValidationFailedError: If recipient or body is empty
        """
        if not recipient or not recipient.strip():
            raise ValidationFailedError("Recipient is required")
        if not body or not body.strip():
            raise ValidationFailedError("Message body is required")

        notification = Notification(
            type=type,
            recipient=recipient.strip(),
            subject=subject or "",
            body=body,
            status=NotificationStatus.PENDING,
            retry_count=0,
            member_id=member_id,
            payment_id=payment_id,
        )
        self.db.add(notification)
        self.db.flush()

        self._dispatch(notification)
        commit_or_rollback(self.db)
        self.db.refresh(notification)
        return notification

    def send_bulk(
        self,
        type: NotificationType,
        recipients: Iterable[str],
        subject: str,
        body: str,
    ) -> list[Notification]:
        """Record and dispatch one notification per recipient.

        Raises:
            ValidationFailedError: If no recipient is given or the body is empty
        """
        recipients = [r.strip() for r in recipients if r and r.strip()]
        if not recipients:
            raise ValidationFailedError("At least one recipient is required")
        if not body or not body.strip():
            raise ValidationFailedError("Message body is required")

        notifications = [
            Notification(
                type=type,
                recipient=recipient,
                subject=subject or "",
                body=body,
                status=NotificationStatus.PENDING,
                retry_count=0,
            )
            for recipient in recipients
        ]
        self.db.add_all(notifications)
        self.db.flush()

        for notification in notifications:
            self._dispatch(notification)
        commit_or_rollback(self.db)

        sent = sum(1 for n in notifications if n.status == NotificationStatus.SENT)
        logger.info(f"Bulk notification: recipients={len(notifications)}, sent={sent}")
        return notifications

    def send_payment_reminder(
        self, payment_id: int, type: NotificationType = NotificationType.EMAIL
    ) -> Notification:
        """Remind the owning member about a ledger entry.

        Raises:
            NotFoundError: If the payment does not exist
            ValidationFailedError: If the member has no contact for this channel
        """
        payment = self.db.scalar(
            select(Payment)
            .options(joinedload(Payment.member).joinedload(Member.center))
            .where(Payment.id == payment_id)
        )
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} not found")

        member = payment.member
        recipient = member.email if type == NotificationType.EMAIL else member.phone
        if not recipient:
            raise ValidationFailedError(
                f"Member {member.id} has no {'email' if type == NotificationType.EMAIL else 'phone'}"
            )

        template = REMINDER_TEMPLATE[type]
        values = {
            "name": member.name,
            "center": member.center.name,
            "kind": payment.kind.value.lower(),
            "amount": f"{payment.amount:.2f}",
            "due_date": payment.due_date.isoformat(),
            "reference": payment.reference,
        }
        return self.send(
            type=type,
            recipient=recipient,
            subject=template.subject.format(**values),
            body=template.body.format(**values),
            member_id=member.id,
            payment_id=payment.id,
        )

    def list_notifications(self) -> list[Notification]:
        """All notifications, newest first."""
        return list(
            self.db.scalars(
                select(Notification).order_by(Notification.created_at.desc(), Notification.id.desc())
            )
        )

    @staticmethod
    def templates() -> tuple[NotificationTemplate, ...]:
        """Built-in message templates."""
        return TEMPLATES


__all__ = [
    "NotificationService",
    "NotificationGateway",
    "NotificationTemplate",
    "LoggingGateway",
    "TEMPLATES",
]
