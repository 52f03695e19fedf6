"""Outcome wrapper for optional secondary data fetches."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FetchStatus(str, enum.Enum):
    SUCCESS = "success"
    UNAVAILABLE = "unavailable"
    INVALID_DATA = "invalid_data"


@dataclass(frozen=True, slots=True)
class FetchResult(Generic[T]):
    label: str
    status: FetchStatus
    value: T

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.SUCCESS

    def warning(self) -> dict[str, str] | None:
        if self.ok:
            return None
        return {"source": self.label, "status": self.status.value}


def fetch_optional(
    label: str,
    loader: Callable[[], T],
    *,
    default: T,
    validate: Callable[[T], bool] | None = None,
) -> FetchResult[T]:
    """Run ``loader`` without letting a storage failure abort the caller."""

    try:
        value = loader()
    except SQLAlchemyError:
        logger.warning("Optional data %s is unavailable", label, exc_info=True)
        return FetchResult(label=label, status=FetchStatus.UNAVAILABLE, value=default)

    if validate is not None and not validate(value):
        logger.warning("Optional data %s failed validation", label)
        return FetchResult(label=label, status=FetchStatus.INVALID_DATA, value=default)
    return FetchResult(label=label, status=FetchStatus.SUCCESS, value=value)
