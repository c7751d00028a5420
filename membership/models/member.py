"""Member ORM model with enrollment center and payment-derived fields."""

from datetime import date, datetime, timezone
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Index, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from membership.models import Base, BaseModel


class MemberStatus(str, Enum):
    """Enrollment status of a member."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Member(Base, BaseModel):
    """
    Member enrolled in exactly one center.

    last_payment_date is the only payment-derived field stored on the member;
    it is written by the payment ledger in the same transaction as the payment.
    """

    __tablename__ = "members"

    # Identity fields
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address: Mapped[str] = mapped_column(String(300), nullable=False)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    external_id: Mapped[str | None] = mapped_column(
        String(20), nullable=True, unique=True, comment="Optional external identification number"
    )

    # Enrollment
    center_id: Mapped[int] = mapped_column(
        ForeignKey("centers.id"), nullable=False, index=True, comment="Enrollment center"
    )
    status: Mapped[MemberStatus] = mapped_column(
        SQLEnum(MemberStatus),
        nullable=False,
        default=MemberStatus.ACTIVE,
    )
    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    last_payment_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        comment="Most recent settled payment date",
    )

    # Emergency contact
    emergency_contact_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    emergency_contact_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    emergency_contact_relation: Mapped[str | None] = mapped_column(String(100), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    registered_by: Mapped[str | None] = mapped_column(
        String(255), nullable=True, comment="Identity of the staff user who registered the member"
    )

    # Relationships
    center: Mapped["Center"] = relationship(  # noqa: F821
        "Center",
        back_populates="members",
    )
    payments: Mapped[list["Payment"]] = relationship(  # noqa: F821
        "Payment",
        back_populates="member",
    )

    __table_args__ = (
        Index("idx_member_center_status", "center_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Member(id={self.id}, name={self.name}, center_id={self.center_id}, "
            f"status={self.status}, last_payment_date={self.last_payment_date})>"
        )


__all__ = ["Member", "MemberStatus"]
