"""Payment ledger service for recording and managing member obligations.

Provides methods for:
- Creating, updating and deleting ledger entries
- Registering a payment against a pending entry
- Listing entries with filters and ledger-wide statistics
- Generating recurring monthly dues and applying the overdue policy

Every mutation is committed as one unit together with the owning member's
last_payment_date and the audit log entry that describe it.
"""

import calendar
import logging
import secrets
import string
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, NamedTuple, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, joinedload

from membership.config import settings
from membership.errors import NotFoundError, ValidationFailedError
from membership.models import (
    AuditLog,
    Center,
    Member,
    MemberStatus,
    Payment,
    PaymentKind,
    PaymentMethod,
    PaymentStatus,
)
from membership.services import commit_or_rollback, utc_today
from membership.services.audit_service import AuditService
from membership.services.member_service import MemberService

logger = logging.getLogger(__name__)

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits

# Fields a caller may patch through update()
UPDATABLE_FIELDS = (
    "amount",
    "payment_date",
    "due_date",
    "method",
    "kind",
    "status",
    "notes",
    "reference",
    "paid_by",
    "reference_month",
    "reference_year",
)
NON_NULLABLE_FIELDS = {"amount", "due_date", "kind", "status", "reference", "reference_month", "reference_year"}


class PaymentStatistics(NamedTuple):
    """Ledger-wide counters."""

    total_payments: int
    paid_count: int
    pending_count: int
    total_revenue: Decimal


@dataclass
class DuesGenerationResult:
    """Outcome of a monthly dues generation run."""

    generated: int = 0
    skipped: int = 0


def generate_reference(length: int = 8) -> str:
    """Generate an uppercase alphanumeric transaction reference."""
    return "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(length))


def due_date_for(month: int, year: int, day: int) -> date:
    """Return `day` of the given month, clamped to the month's last day."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last))


def _jsonable(value: Any) -> Any:
    """Convert a column value into something the JSON audit column accepts."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (Decimal, date)):
        return str(value)
    return value


def _validate_amount(amount: Decimal) -> Decimal:
    if amount is None or Decimal(amount) <= Decimal(0):
        raise ValidationFailedError("Payment amount must be positive")
    return Decimal(amount).quantize(Decimal("0.01"))


def _validate_period(month: int, year: int) -> None:
    if not 1 <= month <= 12:
        raise ValidationFailedError(f"Invalid reference month: {month}")
    if not 1 <= year <= 9999:
        raise ValidationFailedError(f"Invalid reference year: {year}")


class PaymentService:
    """Core ledger operations service."""

    def __init__(self, db: Session, members: Optional[MemberService] = None):
        """Initialize payment service.

        Args:
            db: SQLAlchemy database session
            members: Member registry (defaults to one bound to the same session)
        """
        self.db = db
        self.members = members or MemberService(db)

    def _commit(self) -> None:
        """Commit the unit of work, rolling back on storage errors."""
        commit_or_rollback(self.db)

    def _settle(self, payment: Payment, today: date) -> None:
        """Apply the Paid side effect on the owning member."""
        if payment.payment_date is None:
            payment.payment_date = today
        self.members.set_last_payment_date(payment.member_id, payment.payment_date)

    def create(
        self,
        member_id: int,
        amount: Decimal,
        due_date: date,
        method: Optional[PaymentMethod] = None,
        kind: PaymentKind = PaymentKind.DUES,
        status: Optional[PaymentStatus] = None,
        notes: Optional[str] = None,
        reference: Optional[str] = None,
        payment_date: Optional[date] = None,
        paid_by: Optional[str] = None,
        reference_month: Optional[int] = None,
        reference_year: Optional[int] = None,
        actor: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Payment:
        """Create a ledger entry.

        Args:
            member_id: Owning member
            amount: Obligation amount (must be positive)
            due_date: Due date
            method: Payment method (optional until settled)
            kind: Obligation kind (default Dues)
            status: Initial status (default Pending)
            notes: Optional notes
            reference: External reference (generated when omitted)
            payment_date: Settlement date; defaults to today for Paid entries
            paid_by: Optional payer name
            reference_month: Reference period month (default: due date month)
            reference_year: Reference period year (default: due date year)
            actor: Identity subject recorded on the entry
            today: Current date (injectable for tests)

        Returns:
            Created Payment object

        Raises:
            ValidationFailedError: If the member does not exist or an input is invalid
        """
        if not self.members.exists(member_id):
            logger.warning(f"Rejected payment for unknown member {member_id}")
            raise ValidationFailedError(f"Member {member_id} not found")

        amount = _validate_amount(amount)
        if due_date is None:
            raise ValidationFailedError("Due date is required")

        if reference_month is None:
            reference_month = due_date.month
        if reference_year is None:
            reference_year = due_date.year
        _validate_period(reference_month, reference_year)

        payment = Payment(
            member_id=member_id,
            amount=amount,
            due_date=due_date,
            payment_date=payment_date,
            method=method,
            kind=kind or PaymentKind.DUES,
            status=status or PaymentStatus.PENDING,
            notes=notes,
            reference=reference or generate_reference(settings.reference_length),
            paid_by=paid_by,
            recorded_by=actor,
            reference_month=reference_month,
            reference_year=reference_year,
        )
        self.db.add(payment)

        if payment.status == PaymentStatus.PAID:
            self._settle(payment, today or utc_today())

        self.db.flush()
        AuditService.log(
            self.db,
            "payment",
            payment.id,
            "create",
            actor=actor,
            changes={
                "member_id": member_id,
                "amount": _jsonable(payment.amount),
                "status": _jsonable(payment.status),
            },
        )
        self._commit()
        self.db.refresh(payment)
        logger.info(
            f"Created payment: id={payment.id}, member_id={member_id}, amount={payment.amount}, "
            f"status={payment.status.value}, reference={payment.reference}"
        )
        return payment

    def get(self, payment_id: int) -> Payment:
        """Get ledger entry by ID with member and center loaded.

        Raises:
            NotFoundError: If the entry does not exist
        """
        payment = self.db.scalar(
            select(Payment)
            .options(joinedload(Payment.member).joinedload(Member.center))
            .where(Payment.id == payment_id)
        )
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} not found")
        return payment

    def update(
        self,
        payment_id: int,
        changes: dict[str, Any],
        actor: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Payment:
        """Apply a partial update to a ledger entry.

        Only keys present in `changes` are applied; an empty patch leaves the
        entry untouched. Moving an entry into Paid advances the member's last
        payment date; moving it out of Paid does not rewind it.

        Raises:
            NotFoundError: If the entry does not exist
            ValidationFailedError: If a value is invalid, the member would change,
                a Cancelled entry would be reopened, or a Paid entry would lose
                its payment date
        """
        payment = self.get(payment_id)

        changes = dict(changes)
        new_member_id = changes.pop("member_id", None)
        if new_member_id is not None and new_member_id != payment.member_id:
            raise ValidationFailedError("A payment cannot be moved to another member")

        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationFailedError(f"Unknown payment fields: {', '.join(sorted(unknown))}")
        for field in NON_NULLABLE_FIELDS & set(changes):
            if changes[field] is None:
                raise ValidationFailedError(f"Field '{field}' cannot be null")

        if "amount" in changes:
            changes["amount"] = _validate_amount(changes["amount"])
        _validate_period(
            changes.get("reference_month", payment.reference_month),
            changes.get("reference_year", payment.reference_year),
        )

        old_status = payment.status
        new_status = changes.get("status", old_status)
        if old_status == PaymentStatus.CANCELLED and new_status != PaymentStatus.CANCELLED:
            raise ValidationFailedError(f"Payment {payment_id} is cancelled and cannot be reopened")
        clears_date = "payment_date" in changes and changes["payment_date"] is None
        if new_status == PaymentStatus.PAID and clears_date:
            raise ValidationFailedError("A paid payment must keep its payment date")

        diff = {}
        for field, value in changes.items():
            current = getattr(payment, field)
            if current != value:
                diff[field] = [_jsonable(current), _jsonable(value)]
                setattr(payment, field, value)

        if not diff:
            return payment

        if old_status != PaymentStatus.PAID and payment.status == PaymentStatus.PAID:
            self._settle(payment, today or utc_today())

        AuditService.log(self.db, "payment", payment.id, "update", actor=actor, changes=diff)
        self._commit()
        self.db.refresh(payment)
        logger.info(f"Updated payment {payment_id}: {', '.join(sorted(diff))}")
        return payment

    def delete(self, payment_id: int, actor: Optional[str] = None) -> None:
        """Hard-delete a ledger entry.

        Raises:
            NotFoundError: If the entry does not exist
        """
        payment = self.db.get(Payment, payment_id)
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} not found")

        AuditService.log(
            self.db,
            "payment",
            payment_id,
            "delete",
            actor=actor,
            changes={
                "member_id": payment.member_id,
                "amount": _jsonable(payment.amount),
                "status": _jsonable(payment.status),
            },
        )
        self.db.delete(payment)
        self._commit()
        logger.info(f"Deleted payment {payment_id} (member_id={payment.member_id})")

    def register_payment(
        self,
        payment_id: int,
        method: PaymentMethod,
        paid_by: Optional[str] = None,
        notes: Optional[str] = None,
        actor: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Payment:
        """Settle a ledger entry today.

        Sets status Paid, payment date, method and optional payer/notes, and
        advances the member's last payment date in the same transaction.

        Raises:
            NotFoundError: If the entry does not exist
            ValidationFailedError: If the entry is cancelled
        """
        payment = self.get(payment_id)
        if payment.status == PaymentStatus.CANCELLED:
            raise ValidationFailedError(f"Payment {payment_id} is cancelled and cannot be paid")
        if method is None:
            raise ValidationFailedError("Payment method is required")

        today = today or utc_today()
        old_status = payment.status
        payment.status = PaymentStatus.PAID
        payment.payment_date = today
        payment.method = method
        if paid_by is not None:
            payment.paid_by = paid_by
        if notes is not None:
            payment.notes = notes
        self._settle(payment, today)

        AuditService.log(
            self.db,
            "payment",
            payment.id,
            "register",
            actor=actor,
            changes={
                "status": [_jsonable(old_status), PaymentStatus.PAID.value],
                "payment_date": str(today),
                "method": method.value,
            },
        )
        self._commit()
        self.db.refresh(payment)
        logger.info(
            f"Registered payment {payment_id}: member_id={payment.member_id}, "
            f"amount={payment.amount}, method={method.value}"
        )
        return payment

    def list_payments(
        self,
        search: Optional[str] = None,
        status: Optional[PaymentStatus] = None,
        member_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Payment]:
        """List ledger entries ordered by payment date descending.

        Args:
            search: Substring matched against member name and email
            status: Only entries with this status
            member_id: Only entries of this member
            start_date: Payment date lower bound (inclusive)
            end_date: Payment date upper bound (inclusive)

        Returns:
            Payments with member and center loaded
        """
        stmt = (
            select(Payment)
            .join(Payment.member)
            .options(joinedload(Payment.member).joinedload(Member.center))
        )

        if search:
            stmt = stmt.where(or_(Member.name.contains(search), Member.email.contains(search)))
        if status is not None:
            stmt = stmt.where(Payment.status == status)
        if member_id is not None:
            stmt = stmt.where(Payment.member_id == member_id)
        if start_date is not None:
            stmt = stmt.where(Payment.payment_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(Payment.payment_date <= end_date)

        stmt = stmt.order_by(Payment.payment_date.desc().nulls_last(), Payment.id.desc())
        return list(self.db.scalars(stmt).unique())

    def history(self, payment_id: int) -> list[AuditLog]:
        """Audit rows of one ledger entry, oldest first; kept after deletion."""
        return AuditService.history(self.db, "payment", payment_id)

    def for_member(self, member_id: int) -> list[Payment]:
        """All ledger entries of one member, unordered."""
        return list(self.db.scalars(select(Payment).where(Payment.member_id == member_id)))

    def statement_for(self, member_id: int):
        """Build the member statement (totals plus ordered entries).

        Raises:
            NotFoundError: If the member does not exist
        """
        # Import here to avoid circular import
        from membership.services.statement_service import StatementService

        return StatementService(self.db).statement_for(member_id)

    def statistics(self) -> PaymentStatistics:
        """Count entries and sum settled revenue across the whole ledger."""
        total = self.db.scalar(select(func.count(Payment.id))) or 0
        paid = self.db.scalar(
            select(func.count(Payment.id)).where(Payment.status == PaymentStatus.PAID)
        ) or 0
        pending = self.db.scalar(
            select(func.count(Payment.id)).where(Payment.status == PaymentStatus.PENDING)
        ) or 0
        revenue = self.db.scalar(
            select(func.sum(Payment.amount)).where(Payment.status == PaymentStatus.PAID)
        )
        return PaymentStatistics(
            total_payments=total,
            paid_count=paid,
            pending_count=pending,
            total_revenue=Decimal(revenue or 0).quantize(Decimal("0.01")),
        )

    def generate_monthly_dues(
        self,
        month: int,
        year: int,
        center_id: Optional[int] = None,
        actor: Optional[str] = None,
    ) -> DuesGenerationResult:
        """Create Pending dues for every active member lacking them this period.

        Members who already have a Dues entry for (month, year) are skipped,
        as are members whose center charges no dues.

        Raises:
            ValidationFailedError: If month or year is out of range
        """
        _validate_period(month, year)

        stmt = (
            select(Member)
            .options(joinedload(Member.center))
            .where(Member.status == MemberStatus.ACTIVE)
        )
        if center_id is not None:
            stmt = stmt.where(Member.center_id == center_id)
        members = list(self.db.scalars(stmt.order_by(Member.id)))

        already_billed = set(
            self.db.scalars(
                select(Payment.member_id).where(
                    Payment.kind == PaymentKind.DUES,
                    Payment.reference_month == month,
                    Payment.reference_year == year,
                )
            )
        )

        result = DuesGenerationResult()
        due = due_date_for(month, year, settings.dues_due_day)
        created = []
        for member in members:
            center: Center = member.center
            if member.id in already_billed or center.monthly_dues <= 0:
                result.skipped += 1
                continue
            payment = Payment(
                member_id=member.id,
                amount=center.monthly_dues,
                due_date=due,
                kind=PaymentKind.DUES,
                status=PaymentStatus.PENDING,
                reference=generate_reference(settings.reference_length),
                recorded_by=actor,
                reference_month=month,
                reference_year=year,
            )
            self.db.add(payment)
            created.append(payment)
            result.generated += 1

        if created:
            self.db.flush()
            for payment in created:
                AuditService.log(
                    self.db,
                    "payment",
                    payment.id,
                    "generate_dues",
                    actor=actor,
                    changes={"period": f"{year:04d}-{month:02d}", "amount": _jsonable(payment.amount)},
                )
            self._commit()

        logger.info(
            f"Generated monthly dues {year:04d}-{month:02d}: "
            f"generated={result.generated}, skipped={result.skipped}, center_id={center_id}"
        )
        return result

    def mark_overdue(self, today: Optional[date] = None, actor: Optional[str] = None) -> int:
        """Move Pending entries past their due date to Overdue.

        Returns:
            Number of entries updated
        """
        today = today or utc_today()
        overdue = list(
            self.db.scalars(
                select(Payment).where(
                    Payment.status == PaymentStatus.PENDING,
                    Payment.due_date < today,
                )
            )
        )
        for payment in overdue:
            payment.status = PaymentStatus.OVERDUE
            AuditService.log(
                self.db,
                "payment",
                payment.id,
                "mark_overdue",
                actor=actor,
                changes={"status": [PaymentStatus.PENDING.value, PaymentStatus.OVERDUE.value]},
            )

        if overdue:
            self._commit()
        logger.info(f"Marked {len(overdue)} payments overdue as of {today}")
        return len(overdue)


__all__ = [
    "PaymentService",
    "PaymentStatistics",
    "DuesGenerationResult",
    "generate_reference",
    "due_date_for",
]
