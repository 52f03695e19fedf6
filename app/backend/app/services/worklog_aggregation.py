"""Batch worklog loading and per-user reductions."""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import TypeVar

from app.models.entities import Worklog
from app.repositories.reporting_repository import ReportingRepository
from app.services.task_categories import TaskCategoryMapping, WorklogCategory

SECONDS_PER_HOUR = 3600

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class ClassifiedWorklog:
    id: int
    user_id: int
    task_id: int | None
    project_id: int | None
    start_time: datetime
    end_time: datetime
    duration: int
    comment: str | None
    category: WorklogCategory

    @property
    def hours(self) -> float:
        return self.duration / SECONDS_PER_HOUR


@dataclass(frozen=True, slots=True)
class CategoryHours:
    billable_hours: float
    non_billable_hours: float
    uncategorized_hours: float
    total_hours: float
    entries_count: int


def classify_worklog(worklog: Worklog, mapping: TaskCategoryMapping) -> ClassifiedWorklog:
    return ClassifiedWorklog(
        id=worklog.id,
        user_id=worklog.iva_id,
        task_id=worklog.task_id,
        project_id=worklog.project_id,
        start_time=worklog.start_time,
        end_time=worklog.end_time,
        duration=worklog.duration,
        comment=worklog.comment,
        category=mapping.classify(worklog.task_id),
    )


def load_classified_worklogs(
    repo: ReportingRepository,
    user_ids: Collection[int],
    *,
    start: datetime,
    end: datetime,
    mapping: TaskCategoryMapping,
) -> dict[int, list[ClassifiedWorklog]]:
    """Load every in-window worklog for ``user_ids`` in one query, grouped by user."""

    if not user_ids:
        return {}

    grouped: dict[int, list[ClassifiedWorklog]] = {}
    for worklog in repo.list_worklogs_for_users(user_ids, start=start, end=end):
        grouped.setdefault(worklog.iva_id, []).append(classify_worklog(worklog, mapping))
    return grouped


def aggregate_category_hours(worklogs: Sequence[ClassifiedWorklog]) -> CategoryHours:
    totals = {category: 0.0 for category in WorklogCategory}
    for worklog in worklogs:
        totals[worklog.category] += worklog.hours

    billable = round(totals[WorklogCategory.BILLABLE], 2)
    non_billable = round(totals[WorklogCategory.NON_BILLABLE], 2)
    uncategorized = round(totals[WorklogCategory.UNCATEGORIZED], 2)
    return CategoryHours(
        billable_hours=billable,
        non_billable_hours=non_billable,
        uncategorized_hours=uncategorized,
        total_hours=round(billable + non_billable + uncategorized, 2),
        entries_count=len(worklogs),
    )


def select_peak_worklog(worklogs: Iterable[T], *, duration: Callable[[T], int], identity: Callable[[T], int]) -> T | None:
    """Return the longest worklog; ties resolve to the lowest id."""

    return min(worklogs, key=lambda row: (-duration(row), identity(row)), default=None)


def fan_out(func: Callable[[T], R], items: Sequence[T], *, max_workers: int = 1) -> list[R]:
    """Apply ``func`` to each item, results in input order."""

    if max_workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(func, items))
