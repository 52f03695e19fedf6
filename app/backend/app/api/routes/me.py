"""Current user endpoint."""

from fastapi import APIRouter, Depends

from app.core.auth import AppRole, RequestUserContext, get_current_user_context, has_role

router = APIRouter(prefix="/me", tags=["me"])


@router.get("")
def get_me(context: RequestUserContext = Depends(get_current_user_context)) -> dict[str, object]:
    """Return current authenticated user profile and roles."""

    return {
        "id": str(context.user_id),
        "microsoft_oid": context.microsoft_oid,
        "email": context.email,
        "display_name": context.display_name,
        "status": context.status,
        "roles": [assignment.role.value for assignment in context.roles],
        "region_restricted": context.is_region_restricted,
        "is_admin": has_role(context, {AppRole.ADMIN}),
    }
