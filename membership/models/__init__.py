"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from membership.models.audit_log import AuditLog  # noqa: E402
from membership.models.center import Center  # noqa: E402
from membership.models.member import Member, MemberStatus  # noqa: E402
from membership.models.notification import (  # noqa: E402
    Notification,
    NotificationStatus,
    NotificationType,
)
from membership.models.payment import (  # noqa: E402
    Payment,
    PaymentKind,
    PaymentMethod,
    PaymentStatus,
)
from membership.models.report import Report, ReportStatus, ReportType  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "AuditLog",
    "Center",
    "Member",
    "MemberStatus",
    "Notification",
    "NotificationStatus",
    "NotificationType",
    "Payment",
    "PaymentKind",
    "PaymentMethod",
    "PaymentStatus",
    "Report",
    "ReportStatus",
    "ReportType",
]
