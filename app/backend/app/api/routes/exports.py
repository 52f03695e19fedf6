"""Export endpoint for report datasets."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.auth import RequestUserContext, get_current_user_context
from app.db.dependencies import get_db_session
from app.services.worklog_report_service import ReportQuery, WorklogReportService

router = APIRouter(prefix="/exports", tags=["exports"])


def _service(db: Session) -> WorklogReportService:
    return WorklogReportService(db)


@router.get("/{report_key}")
def export_report(
    report_key: str,
    format: str = Query(default="xlsx"),
    report_date: date | None = Query(default=None, alias="date"),
    work_status: str | None = Query(default=None),
    region: str | None = Query(default=None),
    cohort: str | None = Query(default=None),
    search: str | None = Query(default=None),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> Response:
    service = _service(db)
    exported = service.export_report(
        context=context,
        report_key=report_key,
        format_name=format,
        query=ReportQuery(
            report_date=report_date,
            work_status=work_status,
            region=region,
            cohort=cohort,
            search=search,
        ),
    )
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
