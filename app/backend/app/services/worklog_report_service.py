"""Daily performance, NSH and export service layer."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from io import BytesIO
from time import perf_counter
from typing import TypeVar
from zoneinfo import ZoneInfo

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.auth import Permission, RequestUserContext, has_any_permission
from app.core.config import get_settings
from app.models.entities import IvaUser
from app.repositories.reporting_repository import PeakWorklogRow, ReportingRepository, UserPopulationFilter
from app.services.access_scope import RegionScope, resolve_region_scope, resolve_user_population
from app.services.eligibility import adjust_start_date
from app.services.report_listing import nsh_summary, paginate, performance_summary, sort_performance_rows
from app.services.secondary_data import FetchResult, fetch_optional
from app.services.task_categories import TaskCategoryMapping, build_task_category_mapping
from app.services.worklog_aggregation import (
    SECONDS_PER_HOUR,
    ClassifiedWorklog,
    aggregate_category_hours,
    fan_out,
    load_classified_worklogs,
    select_peak_worklog,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

VIEW_PERMISSIONS = {Permission.VIEW_REPORTS, Permission.VIEW_TEAM_DATA}
EXPORT_PERMISSIONS = {Permission.EXPORT_REPORTS, Permission.VIEW_TEAM_DATA}

UNKNOWN_REGION = "Unknown Region"
UNKNOWN_TASK = "Unknown Task"
UNKNOWN_PROJECT = "Unknown Project"

DAILY_PERFORMANCE_EXPORT_COLUMNS = (
    "id",
    "full_name",
    "email",
    "job_title",
    "work_status",
    "region",
    "cohort",
    "billable_hours",
    "non_billable_hours",
    "uncategorized_hours",
    "total_hours",
    "entries_count",
    "has_data",
)
NSH_EXPORT_COLUMNS = (
    "id",
    "full_name",
    "email",
    "job_title",
    "work_status",
    "region",
    "hours",
    "task_name",
    "project_name",
    "category",
    "start_time",
    "end_time",
    "comment",
)


@dataclass(slots=True)
class ReportQuery:
    report_date: date | None = None
    work_status: str | None = None
    region: str | None = None
    cohort: str | None = None
    search: str | None = None
    sort_by: str | None = None
    sort_order: str | None = None

    def population_filter(self) -> UserPopulationFilter:
        return UserPopulationFilter(
            work_status=self.work_status,
            region=self.region,
            cohort=self.cohort,
            search=self.search,
        )


@dataclass(frozen=True, slots=True)
class ReportWindow:
    day: date
    is_yesterday: bool

    @property
    def start(self) -> datetime:
        return datetime.combine(self.day, time.min)

    @property
    def end(self) -> datetime:
        return datetime.combine(self.day, time.max)


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


def resolve_report_window(requested: date | None, *, timezone_name: str, today: date | None = None) -> ReportWindow:
    """Resolve the subject day; defaults to yesterday in the reference timezone."""

    current_day = today or datetime.now(ZoneInfo(timezone_name)).date()
    yesterday = current_day - timedelta(days=1)
    day = requested or yesterday
    return ReportWindow(day=day, is_yesterday=day == yesterday)


def _user_display_fields(user: IvaUser) -> dict[str, object]:
    return {
        "id": user.id,
        "full_name": user.full_name,
        "email": user.email,
        "job_title": user.job_title,
        "work_status": user.work_status,
    }


class WorklogReportService:
    """Service computing worklog reports scoped by caller permissions."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = ReportingRepository(db)
        self.settings = get_settings()

    # ---------- Access / scope ----------
    @staticmethod
    def _ensure_permission(context: RequestUserContext, allowed: set[Permission]) -> None:
        if not has_any_permission(context, allowed):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions for this operation.",
            )

    def _window(self, requested: date | None) -> ReportWindow:
        return resolve_report_window(requested, timezone_name=self.settings.report_timezone)

    @staticmethod
    def _compute(report: str, compute: Callable[[], T]) -> T:
        try:
            return compute()
        except SQLAlchemyError as exc:
            logger.exception("Report computation failed", extra={"report": report})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to generate report.",
            ) from exc

    def _scope(self, report: str, context: RequestUserContext) -> RegionScope:
        return self._compute(report, lambda: resolve_region_scope(context, self.repo))

    # ---------- Daily performance ----------
    def _performance_row(
        self,
        user: IvaUser,
        worklogs: list[ClassifiedWorklog],
        window: ReportWindow,
    ) -> dict[str, object]:
        hours = aggregate_category_hours(worklogs)
        eligibility = adjust_start_date(
            hire_date=user.hire_date,
            end_of_employment=user.end_date,
            start_date=window.day,
            end_date=window.day,
        )
        return {
            **_user_display_fields(user),
            "region": user.region.name if user.region else None,
            "cohort": user.cohort.name if user.cohort else None,
            "timedoctor_version": user.timedoctor_version,
            "billable_hours": hours.billable_hours,
            "non_billable_hours": hours.non_billable_hours,
            "uncategorized_hours": hours.uncategorized_hours,
            "total_hours": hours.total_hours,
            "entries_count": hours.entries_count,
            "has_data": eligibility.has_data,
            "adjusted_start_date": eligibility.adjusted_start_date.isoformat(),
            "eligible_days": max(0, eligibility.days_difference),
            "hire_date": user.hire_date.isoformat() if user.hire_date else None,
            "end_date": user.end_date.isoformat() if user.end_date else None,
        }

    def _performance_rows(self, query: ReportQuery, scope: RegionScope, window: ReportWindow) -> list[dict[str, object]]:
        users = resolve_user_population(self.repo, query.population_filter(), scope)
        logger.debug("Report population resolved", extra={"report": "daily_performance", "user_count": len(users)})
        mapping = build_task_category_mapping(self.repo.list_category_task_links())
        worklogs_by_user = load_classified_worklogs(
            self.repo,
            [user.id for user in users],
            start=window.start,
            end=window.end,
            mapping=mapping,
        )
        return fan_out(
            lambda user: self._performance_row(user, worklogs_by_user.get(user.id, []), window),
            users,
            max_workers=self.settings.report_worker_count,
        )

    def _filter_options(self, scope: RegionScope) -> tuple[FetchResult[list[dict[str, object]]], FetchResult[list[str]]]:
        work_status_options = fetch_optional(
            "work_status_options",
            lambda: [
                {"value": value, "description": description}
                for value, description in self.repo.list_work_status_options()
            ],
            default=[],
            validate=lambda options: all(option["value"] for option in options),
        )
        region_options = fetch_optional(
            "region_options",
            lambda: self.repo.list_region_names(region_id=scope.region_id),
            default=[],
        )
        return work_status_options, region_options

    def daily_performance_report(self, *, context: RequestUserContext, query: ReportQuery) -> dict[str, object]:
        self._ensure_permission(context, VIEW_PERMISSIONS)
        scope = self._scope("daily_performance", context)
        window = self._window(query.report_date)

        started = perf_counter()
        rows = self._compute("daily_performance", lambda: self._performance_rows(query, scope, window))

        summary = performance_summary(rows)
        rows = sort_performance_rows(rows, query.sort_by, query.sort_order)
        work_status_options, region_options = self._filter_options(scope)

        logger.info(
            "Daily performance report generated",
            extra={
                "report": "daily_performance",
                "report_date": window.day.isoformat(),
                "row_count": len(rows),
                "duration_ms": round((perf_counter() - started) * 1000, 1),
            },
        )
        return {
            "success": True,
            "date": window.day.isoformat(),
            "is_yesterday": window.is_yesterday,
            "performance_data": rows,
            "summary": summary,
            "work_status_options": work_status_options.value,
            "region_options": region_options.value,
            "region_filter": scope.as_payload(),
            "warnings": [
                warning
                for warning in (work_status_options.warning(), region_options.warning())
                if warning is not None
            ],
        }

    # ---------- NSH ----------
    @staticmethod
    def _nsh_row(user: IvaUser, peak: PeakWorklogRow, mapping: TaskCategoryMapping) -> dict[str, object]:
        worklog = peak.worklog
        links = mapping.categories_for(worklog.task_id) if worklog.task_id is not None else ()
        return {
            **_user_display_fields(user),
            "region": user.region.name if user.region else UNKNOWN_REGION,
            "worklog_id": worklog.id,
            "hours": round(worklog.duration / SECONDS_PER_HOUR, 2),
            "task_name": peak.task_name or UNKNOWN_TASK,
            "project_name": peak.project_name or UNKNOWN_PROJECT,
            "category": mapping.classify(worklog.task_id).value,
            "task_categories": [link.category_name for link in links],
            "start_time": worklog.start_time.isoformat(),
            "end_time": worklog.end_time.isoformat(),
            "comment": worklog.comment,
        }

    def _nsh_rows(self, query: ReportQuery, scope: RegionScope, window: ReportWindow) -> list[dict[str, object]]:
        users = resolve_user_population(self.repo, query.population_filter(), scope)
        logger.debug("Report population resolved", extra={"report": "nsh", "user_count": len(users)})
        if not users:
            return []

        mapping = build_task_category_mapping(self.repo.list_category_task_links())
        candidates_by_user: dict[int, list[PeakWorklogRow]] = {}
        for row in self.repo.list_peak_worklogs([user.id for user in users], start=window.start, end=window.end):
            candidates_by_user.setdefault(row.worklog.iva_id, []).append(row)

        users_with_worklogs = [user for user in users if user.id in candidates_by_user]
        peaks = fan_out(
            lambda user: select_peak_worklog(
                candidates_by_user[user.id],
                duration=lambda row: row.worklog.duration,
                identity=lambda row: row.worklog.id,
            ),
            users_with_worklogs,
            max_workers=self.settings.report_worker_count,
        )
        rows = [
            self._nsh_row(user, peak, mapping)
            for user, peak in zip(users_with_worklogs, peaks)
            if peak is not None
        ]
        rows.sort(key=lambda row: (-float(row["hours"]), str(row["full_name"]).casefold(), row["id"]))
        return rows

    def nsh_report(
        self,
        *,
        context: RequestUserContext,
        query: ReportQuery,
        page: int = 1,
        per_page: int | None = None,
    ) -> dict[str, object]:
        self._ensure_permission(context, VIEW_PERMISSIONS)
        scope = self._scope("nsh", context)
        window = self._window(query.report_date)
        page_size = min(per_page or self.settings.nsh_default_per_page, self.settings.nsh_max_per_page)

        started = perf_counter()
        rows = self._compute("nsh", lambda: self._nsh_rows(query, scope, window))

        summary = nsh_summary(rows, thresholds=self.settings.nsh_threshold_hours)
        page_rows, pagination = paginate(rows, page=page, per_page=page_size)

        logger.info(
            "NSH report generated",
            extra={
                "report": "nsh",
                "report_date": window.day.isoformat(),
                "row_count": len(rows),
                "duration_ms": round((perf_counter() - started) * 1000, 1),
            },
        )
        return {
            "success": True,
            "date": window.day.isoformat(),
            "is_yesterday": window.is_yesterday,
            "nsh_data": page_rows,
            "summary": summary,
            "pagination": pagination,
            "region_filter": scope.as_payload(),
        }

    # ---------- Exports ----------
    def export_report(
        self,
        *,
        context: RequestUserContext,
        report_key: str,
        format_name: str,
        query: ReportQuery,
    ) -> ExportFilePayload:
        self._ensure_permission(context, EXPORT_PERMISSIONS)
        normalized_key = report_key.strip().lower()
        normalized_format = format_name.strip().lower()
        if normalized_format not in {"csv", "xlsx"}:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="format must be one of: csv, xlsx.",
            )

        if normalized_key == "daily-performance":
            payload = self.daily_performance_report(context=context, query=query)
            rows = payload["performance_data"]
            columns = DAILY_PERFORMANCE_EXPORT_COLUMNS
        elif normalized_key == "nsh":
            scope = self._scope("nsh_export", context)
            window = self._window(query.report_date)
            rows = self._compute("nsh_export", lambda: self._nsh_rows(query, scope, window))
            payload = {"date": window.day.isoformat()}
            columns = NSH_EXPORT_COLUMNS
        else:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Unknown report_key for export.",
            )

        base_filename = f"{normalized_key}-{payload['date']}"
        if normalized_format == "csv":
            sio = io.StringIO()
            writer = csv.DictWriter(sio, fieldnames=list(columns), extrasaction="ignore")
            writer.writeheader()
            writer.writerows(rows)
            return ExportFilePayload(
                media_type="text/csv; charset=utf-8",
                filename=f"{base_filename}.csv",
                content=sio.getvalue().encode("utf-8"),
            )

        # XLSX
        from openpyxl import Workbook

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = normalized_key[:31]
        sheet.append(list(columns))
        for row in rows:
            sheet.append([row.get(column) for column in columns])

        output = BytesIO()
        workbook.save(output)
        return ExportFilePayload(
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            filename=f"{base_filename}.xlsx",
            content=output.getvalue(),
        )
