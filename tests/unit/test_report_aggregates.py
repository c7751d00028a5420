"""Unit tests for report aggregates over in-memory snapshots."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from membership.errors import ValidationFailedError
from membership.models import (
    Center,
    Member,
    MemberStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
)
from membership.services.report_service import (
    delinquency,
    members_by_center,
    monthly_financial,
    parse_date_param,
    parse_int_param,
    payments_by_period,
)

TODAY = date(2025, 3, 1)

NORTH = Center(id=1, name="North", address="N st", monthly_dues=Decimal("100.00"))
SOUTH = Center(id=2, name="South", address="S st", monthly_dues=Decimal("80.00"))


def _member(mid, center, status=MemberStatus.ACTIVE, last=None, registered_days_ago=100):
    return Member(
        id=mid,
        name=f"Member {mid}",
        email=f"m{mid}@example.com",
        address="Street",
        center_id=center.id,
        center=center,
        status=status,
        last_payment_date=last,
        registered_at=datetime.combine(
            TODAY - timedelta(days=registered_days_ago), datetime.min.time(), tzinfo=timezone.utc
        ),
    )


def _payment(pid, member, amount, status, payment_date, method=PaymentMethod.PIX):
    return Payment(
        id=pid,
        member_id=member.id,
        member=member,
        amount=Decimal(amount),
        due_date=payment_date or TODAY,
        payment_date=payment_date,
        status=status,
        method=method,
        reference=f"R{pid}",
        reference_month=1,
        reference_year=2025,
    )


class TestMembersByCenter:
    def test_groups_with_active_and_inactive_counts(self):
        members = [
            _member(1, NORTH),
            _member(2, NORTH, MemberStatus.INACTIVE),
            _member(3, SOUTH),
        ]

        report = members_by_center(members)

        assert report.total == 3
        north, south = report.rows
        assert (north.center, north.total_members, north.active_count, north.inactive_count) == (
            "North", 2, 1, 1,
        )
        assert (south.center, south.total_members, south.active_count) == ("South", 1, 1)

    def test_empty_registry(self):
        report = members_by_center([])
        assert report.rows == []
        assert report.total == 0


class TestPaymentsByPeriod:
    def test_filters_by_payment_date_and_groups_by_center(self):
        a, b = _member(1, NORTH), _member(2, SOUTH)
        payments = [
            _payment(1, a, "100.00", PaymentStatus.PAID, date(2025, 2, 1)),
            _payment(2, a, "40.00", PaymentStatus.PENDING, date(2025, 2, 28)),
            _payment(3, b, "80.00", PaymentStatus.PAID, date(2025, 2, 10)),
            _payment(4, b, "80.00", PaymentStatus.PAID, date(2025, 1, 31)),
            _payment(5, b, "80.00", PaymentStatus.PENDING, None),
        ]

        report = payments_by_period(payments, date(2025, 2, 1), date(2025, 2, 28))

        north, south = report.rows
        assert (north.count, north.amount, north.paid_count, north.pending_count) == (
            2, Decimal("140.00"), 1, 1,
        )
        assert (south.count, south.amount, south.paid_count) == (1, Decimal("80.00"), 1)
        assert report.summary.count == 3
        assert report.summary.amount == Decimal("220.00")

    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationFailedError):
            payments_by_period([], date(2025, 3, 1), date(2025, 2, 1))


class TestDelinquency:
    def test_never_paid_member_counts_from_registration(self):
        """Active, never paid, registered 40 days ago: 40 days overdue."""
        member = _member(1, NORTH, registered_days_ago=40)

        report = delinquency([member], TODAY, cutoff_days=30)

        assert len(report.rows) == 1
        assert report.rows[0].days_overdue == 40
        assert report.rows[0].last_payment_date is None

    def test_recent_payment_is_not_delinquent(self):
        member = _member(1, NORTH, last=TODAY - timedelta(days=10))

        report = delinquency([member], TODAY, cutoff_days=30)

        assert report.rows == []
        assert report.summary.count == 0

    def test_inactive_members_excluded_and_sorted_by_days(self):
        members = [
            _member(1, NORTH, last=TODAY - timedelta(days=35)),
            _member(2, SOUTH, last=TODAY - timedelta(days=90)),
            _member(3, NORTH, MemberStatus.INACTIVE, last=TODAY - timedelta(days=200)),
        ]

        report = delinquency(members, TODAY, cutoff_days=30)

        assert [r.member_id for r in report.rows] == [2, 1]
        assert [r.days_overdue for r in report.rows] == [90, 35]
        assert report.summary.count == 2
        assert report.summary.monthly_dues_total == Decimal("180.00")

    def test_payment_exactly_at_cutoff_is_not_delinquent(self):
        member = _member(1, NORTH, last=TODAY - timedelta(days=30))
        assert delinquency([member], TODAY, cutoff_days=30).rows == []


class TestMonthlyFinancial:
    def test_only_paid_within_calendar_month(self):
        """January 2025 includes the 1st and the 31st, nothing else."""
        a, b = _member(1, NORTH), _member(2, SOUTH)
        payments = [
            _payment(1, a, "100.00", PaymentStatus.PAID, date(2025, 1, 1)),
            _payment(2, b, "80.00", PaymentStatus.PAID, date(2025, 1, 31), PaymentMethod.CASH),
            _payment(3, a, "100.00", PaymentStatus.PAID, date(2024, 12, 31)),
            _payment(4, a, "100.00", PaymentStatus.PAID, date(2025, 2, 1)),
            _payment(5, b, "80.00", PaymentStatus.PENDING, date(2025, 1, 15)),
        ]

        report = monthly_financial(payments, 1, 2025)

        assert report.summary.total_revenue == Decimal("180.00")
        assert report.summary.total_count == 2
        assert {r.label: r.revenue for r in report.by_center} == {
            "North": Decimal("100.00"),
            "South": Decimal("80.00"),
        }
        assert {r.label: r.count for r in report.by_method} == {"Cash": 1, "PIX": 1}

    def test_invalid_month_rejected(self):
        with pytest.raises(ValidationFailedError):
            monthly_financial([], 13, 2025)


class TestParameterParsing:
    def test_date_param_defaults_and_parses(self):
        assert parse_date_param({}, "startDate", TODAY) == TODAY
        assert parse_date_param({"startDate": "2025-01-05"}, "startDate", TODAY) == date(2025, 1, 5)
        assert parse_date_param(
            {"startDate": "2025-01-05T10:30:00"}, "startDate", TODAY
        ) == date(2025, 1, 5)
        assert parse_date_param(
            {"startDate": datetime(2025, 1, 5, 8, 0)}, "startDate", TODAY
        ) == date(2025, 1, 5)
        assert parse_date_param({"startDate": date(2025, 1, 6)}, "startDate", TODAY) == date(2025, 1, 6)

    def test_malformed_date_rejected(self):
        with pytest.raises(ValidationFailedError):
            parse_date_param({"endDate": "yesterday"}, "endDate", TODAY)

    def test_int_param(self):
        assert parse_int_param({"month": "3"}, "month", 1) == 3
        assert parse_int_param({}, "year", 2025) == 2025
        with pytest.raises(ValidationFailedError):
            parse_int_param({"month": "march"}, "month", 1)
