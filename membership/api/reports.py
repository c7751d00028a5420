"""Report generation and retrieval endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from membership.api.auth import Identity, get_identity
from membership.models import Report
from membership.schemas.reports import GenerateReportRequest, ReportResponse, ReportSummaryResponse
from membership.services import get_db
from membership.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"], dependencies=[Depends(get_identity)])


def _detail(report: Report) -> ReportResponse:
    return ReportResponse(
        id=report.id,
        name=report.name,
        type=report.type,
        generated_at=report.generated_at,
        generated_by=report.generated_by,
        status=report.status,
        parameters=report.parameters,
        data=report.result,
    )


@router.post("/generate", response_model=ReportResponse)
def generate_report(
    body: GenerateReportRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> ReportResponse:
    """Compute a report and persist it as a new snapshot."""
    report = ReportService(db).generate(
        name=body.name,
        report_type=body.type,
        parameters=body.parameters,
        actor=identity.subject,
    )
    return _detail(report)


@router.get("", response_model=list[ReportSummaryResponse])
def list_reports(db: Session = Depends(get_db)) -> list[ReportSummaryResponse]:
    """Persisted reports, newest first."""
    return [ReportSummaryResponse.model_validate(r) for r in ReportService(db).list_reports()]


@router.get("/{report_id}", response_model=ReportResponse)
def get_report(report_id: int, db: Session = Depends(get_db)) -> ReportResponse:
    """Single persisted report with its payload."""
    return _detail(ReportService(db).get(report_id))
