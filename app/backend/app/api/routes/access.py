"""Access and session context endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import RequestUserContext, get_current_user_context
from app.db.dependencies import get_db_session
from app.repositories.reporting_repository import ReportingRepository
from app.services.access_scope import resolve_region_scope

router = APIRouter(prefix="/access", tags=["access"])


@router.get("/context")
def get_access_context(
    context: RequestUserContext = Depends(get_current_user_context),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    """Return authenticated session access context.

    A team-data viewer without a region assignment gets the region access error here too.
    """

    scope = resolve_region_scope(context, ReportingRepository(db))

    return {
        "user": {
            "id": str(context.user_id),
            "email": context.email,
            "display_name": context.display_name,
            "status": context.status,
            "microsoft_oid": context.microsoft_oid,
        },
        "roles": [role.value for role in context.role_names],
        "permissions": sorted(permission.value for permission in context.permissions),
        "region_filter": scope.as_payload(),
        "has_access": bool(context.roles),
    }
