"""Payment ledger request and response schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import Field

from membership.models import Payment, PaymentKind, PaymentMethod, PaymentStatus
from membership.schemas import CamelModel


class CreatePaymentRequest(CamelModel):
    """Body of POST /payments."""

    member_id: int
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    payment_date: date
    due_date: date
    method: PaymentMethod
    status: PaymentStatus | None = None
    kind: PaymentKind = PaymentKind.DUES
    notes: str | None = None
    reference: str | None = Field(default=None, max_length=100)
    paid_by: str | None = Field(default=None, max_length=100)
    reference_month: int | None = Field(default=None, ge=1, le=12)
    reference_year: int | None = Field(default=None, ge=1)


class UpdatePaymentRequest(CamelModel):
    """Body of PUT /payments/{id}; only fields that are sent are applied."""

    member_id: int | None = None
    amount: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    payment_date: date | None = None
    due_date: date | None = None
    method: PaymentMethod | None = None
    status: PaymentStatus | None = None
    kind: PaymentKind | None = None
    notes: str | None = None
    reference: str | None = Field(default=None, max_length=100)
    paid_by: str | None = Field(default=None, max_length=100)
    reference_month: int | None = Field(default=None, ge=1, le=12)
    reference_year: int | None = Field(default=None, ge=1)


class RegisterPaymentRequest(CamelModel):
    """Body of POST /payments/{id}/register."""

    method: PaymentMethod
    paid_by: str | None = Field(default=None, max_length=100)
    notes: str | None = None


class GenerateDuesRequest(CamelModel):
    """Body of POST /payments/generate-monthly."""

    reference_month: int = Field(ge=1, le=12)
    reference_year: int = Field(ge=1, le=9999)
    center_id: int | None = None


class MarkOverdueRequest(CamelModel):
    """Body of POST /payments/mark-overdue."""

    as_of: date | None = None


class PaymentResponse(CamelModel):
    """Payment view with member and center names joined in."""

    id: int
    member_id: int
    member_name: str
    center_name: str
    amount: Decimal
    payment_date: date | None = None
    due_date: date
    method: PaymentMethod | None = None
    status: PaymentStatus
    kind: PaymentKind
    notes: str | None = None
    reference: str
    paid_by: str | None = None
    reference_month: int
    reference_year: int
    created_at: datetime

    @classmethod
    def from_payment(cls, payment: Payment) -> "PaymentResponse":
        """Build the view from a payment with member and center loaded."""
        return cls(
            id=payment.id,
            member_id=payment.member_id,
            member_name=payment.member.name,
            center_name=payment.member.center.name,
            amount=payment.amount,
            payment_date=payment.payment_date,
            due_date=payment.due_date,
            method=payment.method,
            status=payment.status,
            kind=payment.kind,
            notes=payment.notes,
            reference=payment.reference,
            paid_by=payment.paid_by,
            reference_month=payment.reference_month,
            reference_year=payment.reference_year,
            created_at=payment.created_at,
        )


class CreatedResponse(CamelModel):
    id: int


class StatementMember(CamelModel):
    id: int
    name: str
    email: str
    center_name: str
    monthly_dues: Decimal


class StatementSummary(CamelModel):
    total_paid: Decimal
    total_pending: Decimal
    last_payment: date | None = None


class StatementResponse(CamelModel):
    """GET /payments/member/{memberId}/statement."""

    member: StatementMember
    summary: StatementSummary
    payments: list[PaymentResponse]


class StatisticsResponse(CamelModel):
    total_payments: int
    paid_count: int
    pending_count: int
    total_revenue: Decimal


class DuesGenerationResponse(CamelModel):
    generated: int
    skipped: int


class MarkOverdueResponse(CamelModel):
    updated: int


class AuditEntryResponse(CamelModel):
    """One row of GET /payments/{id}/history."""

    id: int
    action: str
    actor: str | None = None
    changes: dict[str, Any] | None = None
    created_at: datetime
