"""Payment ORM model: one ledger entry per dues/fee/fine obligation."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from membership.models import Base, BaseModel


class PaymentStatus(str, Enum):
    """Lifecycle status of a ledger entry."""

    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"
    CANCELLED = "Cancelled"
    """Terminal state."""


class PaymentMethod(str, Enum):
    """How a ledger entry was settled."""

    PIX = "PIX"
    CREDIT_CARD = "CreditCard"
    DEBIT_CARD = "DebitCard"
    CASH = "Cash"
    BANK_TRANSFER = "BankTransfer"


class PaymentKind(str, Enum):
    """Kind of obligation a ledger entry represents."""

    DUES = "Dues"
    FEE = "Fee"
    FINE = "Fine"
    OTHER = "Other"


class Payment(Base, BaseModel):
    """Model representing a ledger entry (pending obligation or settled payment).

    The entry stores only the member reference; member and center names are
    joined in at query time.
    """

    __tablename__ = "payments"

    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id"),
        nullable=False,
        index=True,
        comment="Member who owes or paid the obligation",
    )

    # Obligation details
    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Obligation amount",
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    payment_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        index=True,
        comment="Settlement date, meaningful once Paid",
    )
    method: Mapped[PaymentMethod | None] = mapped_column(SQLEnum(PaymentMethod), nullable=True)
    kind: Mapped[PaymentKind] = mapped_column(
        SQLEnum(PaymentKind), nullable=False, default=PaymentKind.DUES
    )
    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="External transaction reference",
    )
    paid_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    recorded_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Reference period for recurring dues de-duplication
    reference_month: Mapped[int] = mapped_column(nullable=False)
    reference_year: Mapped[int] = mapped_column(nullable=False)

    # Relationships
    member: Mapped["Member"] = relationship(  # noqa: F821
        "Member",
        back_populates="payments",
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payment_amount_non_negative"),
        CheckConstraint(
            "reference_month >= 1 AND reference_month <= 12",
            name="ck_payment_reference_month",
        ),
        Index("idx_payment_member_date", "member_id", "payment_date"),
        Index("idx_payment_member_period", "member_id", "reference_year", "reference_month"),
        Index("idx_payment_reference", "reference"),
    )

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, member_id={self.member_id}, amount={self.amount}, "
            f"status={self.status}, due_date={self.due_date}, payment_date={self.payment_date})>"
        )


__all__ = ["Payment", "PaymentStatus", "PaymentMethod", "PaymentKind"]
