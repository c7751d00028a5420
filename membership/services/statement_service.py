"""Statement engine: per-member financial summary computed from the ledger.

Statement totals count only entries whose status is exactly Paid or exactly
Pending; Overdue and Cancelled entries are listed but contribute to neither
sum. Nothing here writes to the database.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy.orm import Session

from membership.models import Member, Payment, PaymentStatus
from membership.services.member_service import MemberService
from membership.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass
class Statement:
    """Financial summary of one member."""

    member: Member
    total_paid: Decimal = ZERO
    total_pending: Decimal = ZERO
    last_payment_date: date | None = None
    entries: list[Payment] = field(default_factory=list)


def _entry_sort_key(payment: Payment) -> tuple[date, int]:
    when = payment.payment_date or payment.created_at.date()
    return when, payment.id or 0


def build_statement(member: Member, payments: Iterable[Payment]) -> Statement:
    """Aggregate a member's ledger entries into a statement.

    Args:
        member: Member the entries belong to
        payments: The member's ledger entries, in any order

    Returns:
        Statement with entries ordered by payment (or creation) date descending
    """
    entries = sorted(payments, key=_entry_sort_key, reverse=True)

    total_paid = sum(
        (p.amount for p in entries if p.status == PaymentStatus.PAID), ZERO
    )
    total_pending = sum(
        (p.amount for p in entries if p.status == PaymentStatus.PENDING), ZERO
    )

    return Statement(
        member=member,
        total_paid=total_paid,
        total_pending=total_pending,
        last_payment_date=member.last_payment_date,
        entries=entries,
    )


class StatementService:
    """Load a member and its ledger entries and build the statement."""

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db
        self.members = MemberService(db)
        self.payments = PaymentService(db, members=self.members)

    def statement_for(self, member_id: int) -> Statement:
        """Build the statement of one member.

        Raises:
            NotFoundError: If the member does not exist
        """
        member = self.members.get(member_id)
        statement = build_statement(member, self.payments.for_member(member_id))
        logger.debug(
            f"Statement for member {member_id}: entries={len(statement.entries)}, "
            f"paid={statement.total_paid}, pending={statement.total_pending}"
        )
        return statement


__all__ = ["Statement", "StatementService", "build_statement"]
