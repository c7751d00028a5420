"""Payment ledger API endpoints."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from membership.api.auth import Identity, get_identity
from membership.models import PaymentStatus
from membership.schemas.payments import (
    AuditEntryResponse,
    CreatedResponse,
    CreatePaymentRequest,
    DuesGenerationResponse,
    GenerateDuesRequest,
    MarkOverdueRequest,
    MarkOverdueResponse,
    PaymentResponse,
    RegisterPaymentRequest,
    StatementMember,
    StatementResponse,
    StatementSummary,
    StatisticsResponse,
    UpdatePaymentRequest,
)
from membership.services import get_db
from membership.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"], dependencies=[Depends(get_identity)])


@router.get("", response_model=list[PaymentResponse])
def list_payments(
    search: str | None = Query(None),
    status_filter: PaymentStatus | None = Query(None, alias="status"),
    member_id: int | None = Query(None, alias="memberId"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
) -> list[PaymentResponse]:
    """List ledger entries ordered by payment date descending."""
    payments = PaymentService(db).list_payments(
        search=search,
        status=status_filter,
        member_id=member_id,
        start_date=start_date,
        end_date=end_date,
    )
    return [PaymentResponse.from_payment(p) for p in payments]


@router.get("/statistics", response_model=StatisticsResponse)
def payment_statistics(db: Session = Depends(get_db)) -> StatisticsResponse:
    """Ledger-wide counters and settled revenue."""
    stats = PaymentService(db).statistics()
    return StatisticsResponse(**stats._asdict())


@router.get("/member/{member_id}/statement", response_model=StatementResponse)
def member_statement(member_id: int, db: Session = Depends(get_db)) -> StatementResponse:
    """Per-member totals and chronological entries."""
    statement = PaymentService(db).statement_for(member_id)
    member = statement.member
    return StatementResponse(
        member=StatementMember(
            id=member.id,
            name=member.name,
            email=member.email,
            center_name=member.center.name,
            monthly_dues=member.center.monthly_dues,
        ),
        summary=StatementSummary(
            total_paid=statement.total_paid,
            total_pending=statement.total_pending,
            last_payment=statement.last_payment_date,
        ),
        payments=[PaymentResponse.from_payment(p) for p in statement.entries],
    )


@router.post("/generate-monthly", response_model=DuesGenerationResponse)
def generate_monthly_dues(
    body: GenerateDuesRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> DuesGenerationResponse:
    """Create pending dues for the reference period."""
    result = PaymentService(db).generate_monthly_dues(
        month=body.reference_month,
        year=body.reference_year,
        center_id=body.center_id,
        actor=identity.subject,
    )
    return DuesGenerationResponse(generated=result.generated, skipped=result.skipped)


@router.post("/mark-overdue", response_model=MarkOverdueResponse)
def mark_overdue(
    body: MarkOverdueRequest | None = None,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> MarkOverdueResponse:
    """Apply the overdue policy to pending entries past their due date."""
    as_of = body.as_of if body else None
    updated = PaymentService(db).mark_overdue(today=as_of, actor=identity.subject)
    return MarkOverdueResponse(updated=updated)


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: int, db: Session = Depends(get_db)) -> PaymentResponse:
    """Single ledger entry."""
    return PaymentResponse.from_payment(PaymentService(db).get(payment_id))


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_payment(
    body: CreatePaymentRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> CreatedResponse:
    """Create a ledger entry; 400 if the member does not exist."""
    payment = PaymentService(db).create(
        member_id=body.member_id,
        amount=body.amount,
        due_date=body.due_date,
        method=body.method,
        kind=body.kind,
        status=body.status,
        notes=body.notes,
        reference=body.reference,
        payment_date=body.payment_date,
        paid_by=body.paid_by,
        reference_month=body.reference_month,
        reference_year=body.reference_year,
        actor=identity.subject,
    )
    return CreatedResponse(id=payment.id)


@router.put("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def update_payment(
    payment_id: int,
    body: UpdatePaymentRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> Response:
    """Partial update; omitted fields keep their values."""
    PaymentService(db).update(
        payment_id, body.model_dump(exclude_unset=True), actor=identity.subject
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> Response:
    """Hard-delete a ledger entry."""
    PaymentService(db).delete(payment_id, actor=identity.subject)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{payment_id}/register", response_model=PaymentResponse)
def register_payment(
    payment_id: int,
    body: RegisterPaymentRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> PaymentResponse:
    """Settle a ledger entry today."""
    service = PaymentService(db)
    service.register_payment(
        payment_id,
        method=body.method,
        paid_by=body.paid_by,
        notes=body.notes,
        actor=identity.subject,
    )
    return PaymentResponse.from_payment(service.get(payment_id))


@router.get("/{payment_id}/history", response_model=list[AuditEntryResponse])
def payment_history(payment_id: int, db: Session = Depends(get_db)) -> list[AuditEntryResponse]:
    """Audit trail of one ledger entry, oldest first."""
    return [AuditEntryResponse.model_validate(a) for a in PaymentService(db).history(payment_id)]
