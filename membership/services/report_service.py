"""Report aggregator: cross-cutting aggregates over the ledger and members.

Each aggregate is a pure function of (members or payments snapshot,
parameters). ReportService loads the snapshots, runs the aggregate and
persists the result as an immutable Report row.
"""

import calendar
import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from membership.config import settings
from membership.errors import NotFoundError, ValidationFailedError
from membership.models import (
    Member,
    MemberStatus,
    Payment,
    PaymentStatus,
    Report,
    ReportStatus,
    ReportType,
)
from membership.schemas.reports import (
    CenterMembersRow,
    CenterPaymentsRow,
    DateRange,
    DelinquencyReport,
    DelinquencySummary,
    DelinquentMemberRow,
    MembersByCenterReport,
    MonthlyFinancialReport,
    MonthlySummary,
    MonthPeriod,
    PaymentsByPeriodReport,
    PaymentsTotals,
    RevenueRow,
)
from membership.services import commit_or_rollback, utc_today
from membership.services.audit_service import AuditService

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
UNSPECIFIED_METHOD = "Unspecified"


# ---------- parameter helpers ----------


def one_month_before(day: date) -> date:
    """Same day of the previous month, clamped to that month's end."""
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def parse_date_param(parameters: dict[str, Any], key: str, default: date) -> date:
    """Read an ISO date (or datetime) parameter, falling back to `default`."""
    raw = parameters.get(key)
    if raw in (None, ""):
        return default
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return datetime.fromisoformat(str(raw)).date()
    except ValueError as e:
        raise ValidationFailedError(f"Parameter '{key}' is not an ISO date: {raw!r}") from e


def parse_int_param(parameters: dict[str, Any], key: str, default: int) -> int:
    """Read an integer parameter (int or numeric string)."""
    raw = parameters.get(key)
    if raw in (None, ""):
        return default
    if isinstance(raw, bool):
        raise ValidationFailedError(f"Parameter '{key}' must be an integer")
    try:
        return int(str(raw))
    except ValueError as e:
        raise ValidationFailedError(f"Parameter '{key}' must be an integer: {raw!r}") from e


def month_bounds(month: int, year: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    if not 1 <= month <= 12:
        raise ValidationFailedError(f"Invalid month: {month}")
    if not 1 <= year <= 9999:
        raise ValidationFailedError(f"Invalid year: {year}")
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


# ---------- pure aggregates ----------


def members_by_center(members: Iterable[Member]) -> MembersByCenterReport:
    """Group members by center with active/inactive counts."""
    groups: dict[int, dict[str, Any]] = {}
    for member in members:
        row = groups.setdefault(
            member.center_id,
            {"center": member.center.name, "total": 0, "active": 0, "inactive": 0},
        )
        row["total"] += 1
        if member.status == MemberStatus.ACTIVE:
            row["active"] += 1
        else:
            row["inactive"] += 1

    rows = [
        CenterMembersRow(
            center_id=center_id,
            center=g["center"],
            total_members=g["total"],
            active_count=g["active"],
            inactive_count=g["inactive"],
        )
        for center_id, g in sorted(groups.items(), key=lambda item: item[1]["center"])
    ]
    return MembersByCenterReport(rows=rows, total=sum(r.total_members for r in rows))


def payments_by_period(payments: Iterable[Payment], start: date, end: date) -> PaymentsByPeriodReport:
    """Group entries paid within [start, end] by the member's center."""
    if start > end:
        raise ValidationFailedError("startDate must not be after endDate")

    groups: dict[int, dict[str, Any]] = {}
    for payment in payments:
        if payment.payment_date is None or not start <= payment.payment_date <= end:
            continue
        center = payment.member.center
        row = groups.setdefault(
            center.id, {"center": center.name, "count": 0, "amount": ZERO, "paid": 0, "pending": 0}
        )
        row["count"] += 1
        row["amount"] += payment.amount
        if payment.status == PaymentStatus.PAID:
            row["paid"] += 1
        elif payment.status == PaymentStatus.PENDING:
            row["pending"] += 1

    rows = [
        CenterPaymentsRow(
            center_id=center_id,
            center=g["center"],
            count=g["count"],
            amount=g["amount"],
            paid_count=g["paid"],
            pending_count=g["pending"],
        )
        for center_id, g in sorted(groups.items(), key=lambda item: item[1]["center"])
    ]
    return PaymentsByPeriodReport(
        period=DateRange(start=start, end=end),
        rows=rows,
        summary=PaymentsTotals(
            count=sum(r.count for r in rows),
            amount=sum((r.amount for r in rows), ZERO),
        ),
    )


def delinquency(
    members: Iterable[Member], today: date, cutoff_days: int = 30
) -> DelinquencyReport:
    """Active members whose last payment (or registration) is older than the cutoff.

    A member that never paid is delinquent regardless of the cutoff; days
    overdue then count from the registration date.
    """
    cutoff = today - timedelta(days=cutoff_days)
    rows = []
    for member in members:
        if member.status != MemberStatus.ACTIVE:
            continue
        last = member.last_payment_date
        if last is not None and last >= cutoff:
            continue
        since = last if last is not None else member.registered_at.date()
        rows.append(
            DelinquentMemberRow(
                member_id=member.id,
                name=member.name,
                email=member.email,
                phone=member.phone,
                center=member.center.name,
                monthly_dues=member.center.monthly_dues,
                last_payment_date=last,
                days_overdue=(today - since).days,
            )
        )

    rows.sort(key=lambda r: (-r.days_overdue, r.member_id))
    return DelinquencyReport(
        cutoff_date=cutoff,
        rows=rows,
        summary=DelinquencySummary(
            count=len(rows),
            monthly_dues_total=sum((r.monthly_dues for r in rows), ZERO),
        ),
    )


def monthly_financial(payments: Iterable[Payment], month: int, year: int) -> MonthlyFinancialReport:
    """Revenue of Paid entries settled within one calendar month."""
    start, end = month_bounds(month, year)

    by_center: dict[str, list] = defaultdict(lambda: [ZERO, 0])
    by_method: dict[str, list] = defaultdict(lambda: [ZERO, 0])
    total = ZERO
    count = 0
    for payment in payments:
        if payment.status != PaymentStatus.PAID or payment.payment_date is None:
            continue
        if not start <= payment.payment_date <= end:
            continue
        total += payment.amount
        count += 1

        center_row = by_center[payment.member.center.name]
        center_row[0] += payment.amount
        center_row[1] += 1

        method = payment.method.value if payment.method is not None else UNSPECIFIED_METHOD
        method_row = by_method[method]
        method_row[0] += payment.amount
        method_row[1] += 1

    def _rows(groups: dict[str, list]) -> list[RevenueRow]:
        return [
            RevenueRow(label=label, revenue=revenue, count=n)
            for label, (revenue, n) in sorted(groups.items())
        ]

    return MonthlyFinancialReport(
        period=MonthPeriod(month=month, year=year),
        summary=MonthlySummary(total_revenue=total, total_count=count),
        by_center=_rows(by_center),
        by_method=_rows(by_method),
    )


# ---------- service ----------


class ReportService:
    """Generate, persist and read reports."""

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db

    def _members(self) -> list[Member]:
        return list(self.db.scalars(select(Member).options(joinedload(Member.center))))

    def _payments_between(self, start: date, end: date, status: Optional[PaymentStatus] = None) -> list[Payment]:
        stmt = (
            select(Payment)
            .options(joinedload(Payment.member).joinedload(Member.center))
            .where(Payment.payment_date >= start, Payment.payment_date <= end)
        )
        if status is not None:
            stmt = stmt.where(Payment.status == status)
        return list(self.db.scalars(stmt).unique())

    def compute(
        self,
        report_type: ReportType,
        parameters: dict[str, Any],
        today: Optional[date] = None,
    ) -> BaseModel:
        """Run one report kind without persisting it.

        Raises:
            ValidationFailedError: If the type or a parameter is invalid
        """
        today = today or utc_today()

        if report_type == ReportType.MEMBERS_BY_CENTER:
            return members_by_center(self._members())

        if report_type == ReportType.PAYMENTS_BY_PERIOD:
            start = parse_date_param(parameters, "startDate", one_month_before(today))
            end = parse_date_param(parameters, "endDate", today)
            if start > end:
                raise ValidationFailedError("startDate must not be after endDate")
            return payments_by_period(self._payments_between(start, end), start, end)

        if report_type == ReportType.DELINQUENCY:
            return delinquency(self._members(), today, settings.delinquency_cutoff_days)

        if report_type == ReportType.MONTHLY_FINANCIAL:
            month = parse_int_param(parameters, "month", today.month)
            year = parse_int_param(parameters, "year", today.year)
            start, end = month_bounds(month, year)
            payments = self._payments_between(start, end, PaymentStatus.PAID)
            return monthly_financial(payments, month, year)

        raise ValidationFailedError(f"Unsupported report type: {report_type}")

    def generate(
        self,
        name: str,
        report_type: ReportType,
        parameters: Optional[dict[str, Any]] = None,
        actor: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Report:
        """Compute a report and store it as a new immutable row.

        Args:
            name: Display name
            report_type: Report kind
            parameters: Report parameters (dates stored as ISO strings)
            actor: Identity subject recorded as generated_by
            now: Generation time (injectable for tests)

        Returns:
            Persisted Report with its result payload
        """
        if not name or not name.strip():
            raise ValidationFailedError("Report name is required")

        parameters = {
            key: value.isoformat() if isinstance(value, date) else value
            for key, value in (parameters or {}).items()
        }
        now = now or datetime.now(timezone.utc)
        data = self.compute(report_type, parameters, today=now.date())

        report = Report(
            name=name.strip(),
            type=report_type,
            parameters=parameters,
            result=data.model_dump(mode="json", by_alias=True),
            generated_at=now,
            generated_by=actor,
            status=ReportStatus.GENERATED,
        )
        self.db.add(report)
        self.db.flush()
        AuditService.log(
            self.db, "report", report.id, "generate", actor=actor, changes={"type": report_type.value}
        )
        commit_or_rollback(self.db)
        self.db.refresh(report)
        logger.info(f"Generated report: id={report.id}, type={report_type.value}, name={report.name}")
        return report

    def list_reports(self) -> list[Report]:
        """All reports, newest first."""
        return list(
            self.db.scalars(select(Report).order_by(Report.generated_at.desc(), Report.id.desc()))
        )

    def get(self, report_id: int) -> Report:
        """Get report by ID.

        Raises:
            NotFoundError: If the report does not exist
        """
        report = self.db.get(Report, report_id)
        if report is None:
            raise NotFoundError(f"Report {report_id} not found")
        return report


__all__ = [
    "ReportService",
    "members_by_center",
    "payments_by_period",
    "delinquency",
    "monthly_financial",
    "one_month_before",
]
