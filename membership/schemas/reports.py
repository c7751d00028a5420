"""Report request, listing and payload schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import Field

from membership.models import ReportStatus, ReportType
from membership.schemas import CamelModel


class GenerateReportRequest(CamelModel):
    """Body of POST /reports/generate."""

    name: str = Field(min_length=1, max_length=200)
    type: ReportType
    parameters: dict[str, Any] = Field(default_factory=dict)


class ReportSummaryResponse(CamelModel):
    """Report list item."""

    id: int
    name: str
    type: ReportType
    generated_at: datetime
    generated_by: str | None = None
    status: ReportStatus


class ReportResponse(ReportSummaryResponse):
    """Report detail with its stored parameters and payload."""

    parameters: dict[str, Any]
    data: dict[str, Any]


# Report payloads


class CenterMembersRow(CamelModel):
    center_id: int
    center: str
    total_members: int
    active_count: int
    inactive_count: int


class MembersByCenterReport(CamelModel):
    title: str = "Members by center"
    rows: list[CenterMembersRow]
    total: int


class DateRange(CamelModel):
    start: date
    end: date


class CenterPaymentsRow(CamelModel):
    center_id: int
    center: str
    count: int
    amount: Decimal
    paid_count: int
    pending_count: int


class PaymentsTotals(CamelModel):
    count: int
    amount: Decimal


class PaymentsByPeriodReport(CamelModel):
    title: str = "Payments by period"
    period: DateRange
    rows: list[CenterPaymentsRow]
    summary: PaymentsTotals


class DelinquentMemberRow(CamelModel):
    member_id: int
    name: str
    email: str
    phone: str | None = None
    center: str
    monthly_dues: Decimal
    last_payment_date: date | None = None
    days_overdue: int


class DelinquencySummary(CamelModel):
    count: int
    monthly_dues_total: Decimal


class DelinquencyReport(CamelModel):
    title: str = "Delinquency"
    cutoff_date: date
    rows: list[DelinquentMemberRow]
    summary: DelinquencySummary


class MonthPeriod(CamelModel):
    month: int
    year: int


class RevenueRow(CamelModel):
    label: str
    revenue: Decimal
    count: int


class MonthlySummary(CamelModel):
    total_revenue: Decimal
    total_count: int


class MonthlyFinancialReport(CamelModel):
    title: str = "Monthly financial"
    period: MonthPeriod
    summary: MonthlySummary
    by_center: list[RevenueRow]
    by_method: list[RevenueRow]
