"""Notification ORM model: one row per attempted send."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from membership.models import Base, BaseModel


class NotificationType(str, Enum):
    """Delivery channel."""

    EMAIL = "Email"
    SMS = "SMS"


class NotificationStatus(str, Enum):
    """Outcome of the send attempt."""

    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"


class Notification(Base, BaseModel):
    """Record of a notification handed to the external gateway.

    Delivery and retry orchestration are external; retry_count only counts
    failed attempts recorded here.
    """

    __tablename__ = "notifications"

    type: Mapped[NotificationType] = mapped_column(SQLEnum(NotificationType), nullable=False)
    recipient: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[NotificationStatus] = mapped_column(
        SQLEnum(NotificationStatus),
        nullable=False,
        default=NotificationStatus.PENDING,
    )
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    retry_count: Mapped[int] = mapped_column(nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Optional links when used as a payment reminder
    member_id: Mapped[int | None] = mapped_column(
        ForeignKey("members.id"), nullable=True, index=True
    )
    payment_id: Mapped[int | None] = mapped_column(
        ForeignKey("payments.id", ondelete="SET NULL"), nullable=True, index=True
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, type={self.type}, recipient={self.recipient}, "
            f"status={self.status}, retry_count={self.retry_count})>"
        )


__all__ = ["Notification", "NotificationType", "NotificationStatus"]
