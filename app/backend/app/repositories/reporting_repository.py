"""Repository helpers for the worklog reporting domain."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session, selectinload

from app.models.entities import (
    Cohort,
    ConfigurationSetting,
    ConfigurationSettingType,
    IvaManager,
    IvaUser,
    Project,
    Region,
    ReportCategory,
    Task,
    TaskReportCategory,
    Worklog,
)

WORK_STATUS_SETTING_KEY = "work_status"


@dataclass(frozen=True, slots=True)
class CategoryTaskLink:
    """One task association of an active report category."""

    task_id: int
    category_id: int
    category_name: str
    category_type: str


@dataclass(frozen=True, slots=True)
class PeakWorklogRow:
    """Worklog tied for the user's longest duration, with resolved display names."""

    worklog: Worklog
    task_name: str | None
    project_name: str | None


@dataclass(slots=True)
class UserPopulationFilter:
    work_status: str | None = None
    region: str | None = None
    cohort: str | None = None
    search: str | None = None


class ReportingRepository:
    """Read-only queries used by the daily performance and NSH reports."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Category configuration ----------
    def list_category_task_links(self) -> list[CategoryTaskLink]:
        rows = self.db.execute(
            select(
                TaskReportCategory.task_id,
                ReportCategory.id,
                ReportCategory.cat_name,
                ConfigurationSetting.setting_value,
            )
            .join(ReportCategory, ReportCategory.id == TaskReportCategory.cat_id)
            .join(ConfigurationSetting, ConfigurationSetting.id == ReportCategory.category_type)
            .where(ReportCategory.is_active.is_(True))
            .order_by(ReportCategory.category_order.asc(), ReportCategory.id.asc(), TaskReportCategory.task_id.asc())
        ).all()
        return [
            CategoryTaskLink(
                task_id=task_id,
                category_id=category_id,
                category_name=category_name,
                category_type=category_type,
            )
            for task_id, category_id, category_name, category_type in rows
        ]

    # ---------- User population ----------
    def list_active_users(
        self,
        filters: UserPopulationFilter,
        *,
        region_id: int | None = None,
    ) -> list[IvaUser]:
        conditions = [IvaUser.is_active.is_(True)]
        if region_id is not None:
            conditions.append(IvaUser.region_id == region_id)
        if filters.work_status:
            conditions.append(IvaUser.work_status == filters.work_status)
        if filters.region:
            conditions.append(IvaUser.region.has(Region.name == filters.region))
        if filters.cohort:
            conditions.append(IvaUser.cohort.has(Cohort.name == filters.cohort))
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(or_(IvaUser.full_name.ilike(pattern), IvaUser.email.ilike(pattern)))

        return self.db.scalars(
            select(IvaUser)
            .options(selectinload(IvaUser.region), selectinload(IvaUser.cohort))
            .where(and_(*conditions))
            .order_by(IvaUser.full_name.asc(), IvaUser.id.asc())
        ).all()

    def get_user_by_email(self, email: str) -> IvaUser | None:
        return self.db.scalar(select(IvaUser).where(func.lower(IvaUser.email) == email.strip().lower()))

    def get_managed_region_id(self, manager_user_id: int) -> int | None:
        return self.db.scalar(
            select(IvaManager.region_id)
            .where(
                and_(
                    IvaManager.iva_manager_id == manager_user_id,
                    IvaManager.region_id.is_not(None),
                )
            )
            .order_by(IvaManager.id.asc())
            .limit(1)
        )

    # ---------- Worklogs ----------
    def list_worklogs_for_users(
        self,
        user_ids: Collection[int],
        *,
        start: datetime,
        end: datetime,
    ) -> list[Worklog]:
        return self.db.scalars(
            select(Worklog)
            .where(
                and_(
                    Worklog.iva_id.in_(list(user_ids)),
                    Worklog.is_active.is_(True),
                    Worklog.start_time >= start,
                    Worklog.start_time <= end,
                )
            )
            .order_by(Worklog.iva_id.asc(), Worklog.start_time.asc(), Worklog.id.asc())
        ).all()

    def list_peak_worklogs(
        self,
        user_ids: Collection[int],
        *,
        start: datetime,
        end: datetime,
    ) -> list[PeakWorklogRow]:
        window = and_(
            Worklog.iva_id.in_(list(user_ids)),
            Worklog.is_active.is_(True),
            Worklog.start_time >= start,
            Worklog.start_time <= end,
        )
        peaks = (
            select(Worklog.iva_id.label("iva_id"), func.max(Worklog.duration).label("max_duration"))
            .where(window)
            .group_by(Worklog.iva_id)
            .subquery()
        )
        rows = self.db.execute(
            select(Worklog, Task.task_name, Project.project_name)
            .join(
                peaks,
                and_(peaks.c.iva_id == Worklog.iva_id, peaks.c.max_duration == Worklog.duration),
            )
            .outerjoin(Task, Task.id == Worklog.task_id)
            .outerjoin(Project, Project.id == Worklog.project_id)
            .where(window)
            .order_by(Worklog.iva_id.asc(), Worklog.id.asc())
        ).all()
        return [
            PeakWorklogRow(worklog=worklog, task_name=task_name, project_name=project_name)
            for worklog, task_name, project_name in rows
        ]

    # ---------- Filter options ----------
    def list_work_status_options(self) -> list[tuple[str, str | None]]:
        rows = self.db.execute(
            select(ConfigurationSetting.setting_value, ConfigurationSetting.description)
            .join(ConfigurationSettingType, ConfigurationSettingType.id == ConfigurationSetting.setting_type_id)
            .where(
                and_(
                    ConfigurationSettingType.key == WORK_STATUS_SETTING_KEY,
                    ConfigurationSetting.is_active.is_(True),
                )
            )
            .order_by(ConfigurationSetting.display_order.asc(), ConfigurationSetting.id.asc())
        ).all()
        return [(value, description) for value, description in rows]

    def list_region_names(self, *, region_id: int | None = None) -> list[str]:
        conditions = [Region.is_active.is_(True)]
        if region_id is not None:
            conditions.append(Region.id == region_id)
        return self.db.scalars(select(Region.name).where(and_(*conditions)).order_by(Region.name.asc())).all()
