"""Task categorization built from report-category configuration."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from app.repositories.reporting_repository import CategoryTaskLink


class WorklogCategory(str, enum.Enum):
    BILLABLE = "billable"
    NON_BILLABLE = "non_billable"
    UNCATEGORIZED = "uncategorized"


def category_for_type(category_type: str | None) -> WorklogCategory:
    """Map a configured category-type value onto a worklog category.

    Billable wins when the value starts with "billable"; any value containing
    "non-billable" is non-billable; everything else stays uncategorized.
    """

    normalized = (category_type or "").strip().lower()
    if normalized.startswith("billable"):
        return WorklogCategory.BILLABLE
    if "non-billable" in normalized:
        return WorklogCategory.NON_BILLABLE
    return WorklogCategory.UNCATEGORIZED


def classify(
    task_id: int | None,
    billable_task_ids: frozenset[int],
    non_billable_task_ids: frozenset[int],
) -> WorklogCategory:
    if task_id is None:
        return WorklogCategory.UNCATEGORIZED
    if task_id in billable_task_ids:
        return WorklogCategory.BILLABLE
    if task_id in non_billable_task_ids:
        return WorklogCategory.NON_BILLABLE
    return WorklogCategory.UNCATEGORIZED


@dataclass(frozen=True)
class TaskCategoryMapping:
    """Immutable per-request snapshot of task categorization."""

    billable_task_ids: frozenset[int] = frozenset()
    non_billable_task_ids: frozenset[int] = frozenset()
    links_by_task: Mapping[int, tuple[CategoryTaskLink, ...]] = field(default_factory=dict)

    def classify(self, task_id: int | None) -> WorklogCategory:
        return classify(task_id, self.billable_task_ids, self.non_billable_task_ids)

    def categories_for(self, task_id: int) -> tuple[CategoryTaskLink, ...]:
        return self.links_by_task.get(task_id, ())


def build_task_category_mapping(links: Iterable[CategoryTaskLink]) -> TaskCategoryMapping:
    billable: set[int] = set()
    non_billable: set[int] = set()
    links_by_task: dict[int, list[CategoryTaskLink]] = {}

    for link in links:
        links_by_task.setdefault(link.task_id, []).append(link)
        category = category_for_type(link.category_type)
        if category is WorklogCategory.BILLABLE:
            billable.add(link.task_id)
        elif category is WorklogCategory.NON_BILLABLE:
            non_billable.add(link.task_id)

    return TaskCategoryMapping(
        billable_task_ids=frozenset(billable),
        # A task linked to both kinds of category is billable.
        non_billable_task_ids=frozenset(non_billable - billable),
        links_by_task={task_id: tuple(rows) for task_id, rows in links_by_task.items()},
    )
