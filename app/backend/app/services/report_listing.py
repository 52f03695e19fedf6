"""Sorting, pagination and summary statistics over report rows."""

from __future__ import annotations

import math
from collections.abc import Sequence

DEFAULT_SORT_FIELD = "name"
DEFAULT_SORT_ORDER = "asc"

PERFORMANCE_SORT_FIELDS: dict[str, str] = {
    "name": "full_name",
    "billable": "billable_hours",
    "non_billable": "non_billable_hours",
    "uncategorized": "uncategorized_hours",
    "total": "total_hours",
}


def _name_key(row: dict[str, object]) -> str:
    return str(row.get("full_name") or "").casefold()


def sort_performance_rows(
    rows: Sequence[dict[str, object]],
    sort_by: str | None,
    sort_order: str | None,
) -> list[dict[str, object]]:
    """Order rows by a whitelisted field; unknown fields sort by name ascending."""

    field = PERFORMANCE_SORT_FIELDS.get(sort_by or DEFAULT_SORT_FIELD)
    if field is None:
        field = PERFORMANCE_SORT_FIELDS[DEFAULT_SORT_FIELD]
        sort_order = DEFAULT_SORT_ORDER
    descending = sort_order == "desc"

    if field == "full_name":
        key = lambda row: (_name_key(row), row["id"])  # noqa: E731
    else:
        key = lambda row: (float(row[field]), _name_key(row), row["id"])  # noqa: E731
    return sorted(rows, key=key, reverse=descending)


def paginate(
    rows: Sequence[dict[str, object]],
    *,
    page: int,
    per_page: int,
) -> tuple[list[dict[str, object]], dict[str, object]]:
    total = len(rows)
    offset = (page - 1) * per_page
    page_rows = list(rows[offset : offset + per_page])

    return page_rows, {
        "current_page": page,
        "per_page": per_page,
        "total": total,
        "last_page": max(1, math.ceil(total / per_page)),
        "from": offset + 1 if page_rows else None,
        "to": offset + len(page_rows) if page_rows else None,
    }


def _sum(rows: Sequence[dict[str, object]], field: str) -> float:
    return round(sum(float(row[field]) for row in rows), 2)


def performance_summary(rows: Sequence[dict[str, object]]) -> dict[str, object]:
    return {
        "total_users": len(rows),
        "total_billable_hours": _sum(rows, "billable_hours"),
        "total_non_billable_hours": _sum(rows, "non_billable_hours"),
        "total_uncategorized_hours": _sum(rows, "uncategorized_hours"),
        "total_hours": _sum(rows, "total_hours"),
        "users_with_data": sum(1 for row in rows if float(row["total_hours"]) > 0),
        "users_without_data": sum(1 for row in rows if float(row["total_hours"]) == 0),
    }


def nsh_summary(rows: Sequence[dict[str, object]], *, thresholds: Sequence[int]) -> dict[str, object]:
    hours = [float(row["hours"]) for row in rows]
    summary: dict[str, object] = {
        "total_users": len(hours),
        "total_hours": round(sum(hours), 2),
        "average_hours": round(sum(hours) / len(hours), 2) if hours else 0,
        "max_hours": max(hours) if hours else 0,
    }
    for threshold in sorted(set(thresholds)):
        summary[f"users_over_{threshold}h"] = sum(1 for value in hours if value >= threshold)
    return summary
