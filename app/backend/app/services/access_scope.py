"""Region visibility scope and candidate user population."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import HTTPException, status

from app.core.auth import RequestUserContext
from app.models.entities import IvaUser
from app.repositories.reporting_repository import ReportingRepository, UserPopulationFilter

REGION_SCOPE_REASON = "view_team_data_permission"


@dataclass(frozen=True, slots=True)
class RegionScope:
    region_id: int | None = None

    @property
    def applied(self) -> bool:
        return self.region_id is not None

    def as_payload(self) -> dict[str, object]:
        if not self.applied:
            return {"applied": False, "locked": False}
        return {
            "applied": True,
            "region_id": self.region_id,
            "locked": True,
            "reason": REGION_SCOPE_REASON,
        }


UNRESTRICTED = RegionScope()


def region_access_error(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "error": "region_not_assigned",
            "message": message,
            "region_access_error": True,
        },
    )


def resolve_region_scope(context: RequestUserContext, repo: ReportingRepository) -> RegionScope:
    """Resolve the region restriction applying to ``context``.

    Raises 403 when a team-data viewer has no region assignment.
    """

    if not context.is_region_restricted:
        return UNRESTRICTED

    directory_user = repo.get_user_by_email(context.email)
    if directory_user is None:
        raise region_access_error("Your account is not linked to a workforce profile with a region assignment.")

    region_id = repo.get_managed_region_id(directory_user.id)
    if region_id is None:
        raise region_access_error("No region is assigned to your account. Contact an administrator.")
    return RegionScope(region_id=region_id)


def resolve_user_population(
    repo: ReportingRepository,
    filters: UserPopulationFilter,
    scope: RegionScope,
) -> list[IvaUser]:
    return repo.list_active_users(filters, region_id=scope.region_id)
