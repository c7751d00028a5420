"""Report ORM model: immutable snapshot of a generated report."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from membership.models import Base, BaseModel


class ReportType(str, Enum):
    """Supported report kinds."""

    MEMBERS_BY_CENTER = "MembersByCenter"
    PAYMENTS_BY_PERIOD = "PaymentsByPeriod"
    DELINQUENCY = "Delinquency"
    MONTHLY_FINANCIAL = "MonthlyFinancial"


class ReportStatus(str, Enum):
    """Generation status."""

    GENERATED = "Generated"


class Report(Base, BaseModel):
    """Materialized report.

    Rows are never updated: regenerating a report inserts a new row.
    """

    __tablename__ = "reports"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[ReportType] = mapped_column(SQLEnum(ReportType), nullable=False, index=True)
    parameters: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    result: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    generated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[ReportStatus] = mapped_column(
        SQLEnum(ReportStatus), nullable=False, default=ReportStatus.GENERATED
    )

    def __repr__(self) -> str:
        return f"<Report(id={self.id}, name={self.name}, type={self.type}, generated_at={self.generated_at})>"


__all__ = ["Report", "ReportType", "ReportStatus"]
