"""Reporting endpoints for daily performance and NSH outliers."""

from __future__ import annotations

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import RequestUserContext, get_current_user_context
from app.db.dependencies import get_db_session
from app.services.worklog_report_service import ReportQuery, WorklogReportService

router = APIRouter(prefix="/reports", tags=["reports"])

PerformanceSortField = Literal["name", "billable", "non_billable", "uncategorized", "total"]
SortOrder = Literal["asc", "desc"]


def _service(db: Session) -> WorklogReportService:
    return WorklogReportService(db)


@router.get("/daily-performance")
def report_daily_performance(
    report_date: date | None = Query(default=None, alias="date"),
    work_status: str | None = None,
    region: str | None = None,
    cohort: str | None = None,
    search: str | None = None,
    sort_by: PerformanceSortField | None = None,
    sort_order: SortOrder | None = None,
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    return service.daily_performance_report(
        context=context,
        query=ReportQuery(
            report_date=report_date,
            work_status=work_status,
            region=region,
            cohort=cohort,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        ),
    )


@router.get("/nsh")
def report_nsh(
    report_date: date | None = Query(default=None, alias="date"),
    work_status: str | None = None,
    region: str | None = None,
    cohort: str | None = None,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1),
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    return service.nsh_report(
        context=context,
        query=ReportQuery(
            report_date=report_date,
            work_status=work_status,
            region=region,
            cohort=cohort,
            search=search,
        ),
        page=page,
        per_page=per_page,
    )
