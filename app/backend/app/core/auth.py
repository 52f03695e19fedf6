"""Authentication context extraction and permission guard utilities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.dependencies import get_db_session
from app.models.entities import RoleAssignment, RoleType, User


class AppRole(str, Enum):
    """Application role names."""

    ADMIN = "admin"
    HR = "hr"
    FINANCE = "finance"
    RTL = "rtl"
    ARTL = "artl"
    IVA = "iva"


class Permission(str, Enum):
    MANAGE_USERS = "manage_users"
    MANAGE_ROLES = "manage_roles"
    VIEW_ACTIVITY_LOGS = "view_activity_logs"
    MANAGE_CONFIGURATION = "manage_configuration"
    APPROVE_MANUAL_TIME = "approve_manual_time"
    MANAGE_IVAS = "manage_ivas"
    VIEW_IVA_DATA = "view_iva_data"
    GENERATE_REPORTS = "generate_reports"
    VIEW_REPORTS = "view_reports"
    EXPORT_REPORTS = "export_reports"
    VIEW_TEAM_DATA = "view_team_data"
    MANAGE_TEAM_DATA = "manage_team_data"
    VIEW_OWN_DATA = "view_own_data"


ROLE_TYPE_TO_APP_ROLE: dict[RoleType, AppRole] = {
    RoleType.ADMIN: AppRole.ADMIN,
    RoleType.HR: AppRole.HR,
    RoleType.FINANCE: AppRole.FINANCE,
    RoleType.RTL: AppRole.RTL,
    RoleType.ARTL: AppRole.ARTL,
    RoleType.IVA: AppRole.IVA,
}


APP_ROLE_TO_DB_ROLE: dict[AppRole, RoleType] = {app_role: db_role for db_role, app_role in ROLE_TYPE_TO_APP_ROLE.items()}


ROLE_PERMISSIONS: dict[AppRole, frozenset[Permission]] = {
    AppRole.ADMIN: frozenset(Permission),
    AppRole.HR: frozenset(
        {
            Permission.APPROVE_MANUAL_TIME,
            Permission.MANAGE_IVAS,
            Permission.VIEW_IVA_DATA,
            Permission.GENERATE_REPORTS,
            Permission.VIEW_REPORTS,
            Permission.EXPORT_REPORTS,
            Permission.MANAGE_CONFIGURATION,
        }
    ),
    AppRole.FINANCE: frozenset({Permission.VIEW_REPORTS, Permission.EXPORT_REPORTS}),
    AppRole.RTL: frozenset({Permission.VIEW_TEAM_DATA, Permission.APPROVE_MANUAL_TIME}),
    AppRole.ARTL: frozenset({Permission.VIEW_TEAM_DATA, Permission.APPROVE_MANUAL_TIME}),
    AppRole.IVA: frozenset({Permission.VIEW_OWN_DATA}),
}


@dataclass(frozen=True)
class EffectiveRoleAssignment:
    """Effective role assignment resolved for request context."""

    role: AppRole
    assignment_id: UUID


@dataclass(frozen=True)
class RequestUserContext:
    """Authenticated request actor resolved from headers and DB state."""

    user_id: UUID
    microsoft_oid: str
    email: str
    display_name: str
    status: str
    roles: tuple[EffectiveRoleAssignment, ...]

    @property
    def role_names(self) -> tuple[AppRole, ...]:
        """Unique role names assigned to this user."""

        return tuple(dict.fromkeys(assignment.role for assignment in self.roles))

    @property
    def permissions(self) -> frozenset[Permission]:
        """Union of permissions granted by all assigned roles."""

        granted: set[Permission] = set()
        for role in self.role_names:
            granted.update(ROLE_PERMISSIONS[role])
        return frozenset(granted)

    @property
    def is_region_restricted(self) -> bool:
        """Team-data viewers without full reporting access only see their own region."""

        return Permission.VIEW_TEAM_DATA in self.permissions and Permission.VIEW_REPORTS not in self.permissions


def _require_identity_headers(
    x_ms_oid: str | None,
    x_ms_email: str | None,
    x_ms_display_name: str | None,
) -> tuple[str, str, str]:
    if not x_ms_oid or not x_ms_email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=(
                "Missing identity headers. Expected X-MS-OID and X-MS-EMAIL or enable development principal fallback."
            ),
        )

    display_name = x_ms_display_name or x_ms_email
    return x_ms_oid.strip(), x_ms_email.strip().lower(), display_name.strip()


def _resolve_identity(
    x_ms_oid: str | None,
    x_ms_email: str | None,
    x_ms_display_name: str | None,
) -> tuple[str, str, str]:
    settings = get_settings()
    if x_ms_oid and x_ms_email:
        return _require_identity_headers(x_ms_oid, x_ms_email, x_ms_display_name)

    if settings.auth_allow_dev_principal:
        return (
            settings.auth_dev_microsoft_oid.strip(),
            settings.auth_dev_email.strip().lower(),
            settings.auth_dev_display_name.strip(),
        )

    return _require_identity_headers(x_ms_oid, x_ms_email, x_ms_display_name)


def _upsert_user(db: Session, *, microsoft_oid: str, email: str, display_name: str) -> User:
    user = db.scalar(select(User).where(User.microsoft_oid == microsoft_oid))
    now = datetime.utcnow()

    if user is None:
        user = User(
            microsoft_oid=microsoft_oid,
            email=email,
            display_name=display_name,
            status="active",
            last_login_at=now,
            created_at=now,
            updated_at=now,
        )
        db.add(user)
        db.flush()
        return user

    changed = False
    if user.email != email:
        user.email = email
        changed = True
    if user.display_name != display_name:
        user.display_name = display_name
        changed = True

    user.last_login_at = now
    if changed:
        user.updated_at = now
    db.flush()
    return user


def ensure_user_principal(
    db: Session,
    *,
    microsoft_oid: str,
    email: str,
    display_name: str,
) -> User:
    """Ensure user exists and return persisted row.

    Utility exported for tests and seed helpers.
    """

    normalized_oid = microsoft_oid.strip()
    normalized_email = email.strip().lower()
    normalized_display_name = display_name.strip() or normalized_email

    user = _upsert_user(
        db,
        microsoft_oid=normalized_oid,
        email=normalized_email,
        display_name=normalized_display_name,
    )
    db.commit()
    db.refresh(user)
    return user


def _load_effective_roles(db: Session, *, user_id: UUID) -> tuple[EffectiveRoleAssignment, ...]:
    assignments = db.scalars(
        select(RoleAssignment).where(
            and_(RoleAssignment.user_id == user_id, RoleAssignment.active.is_(True))
        )
    ).all()

    return tuple(
        EffectiveRoleAssignment(
            role=ROLE_TYPE_TO_APP_ROLE[assignment.role],
            assignment_id=assignment.id,
        )
        for assignment in assignments
    )


def get_current_user_context(
    x_ms_oid: str | None = Header(default=None, alias="X-MS-OID"),
    x_ms_email: str | None = Header(default=None, alias="X-MS-EMAIL"),
    x_ms_display_name: str | None = Header(default=None, alias="X-MS-DISPLAY-NAME"),
    db: Session = Depends(get_db_session),
) -> RequestUserContext:
    """Resolve current request user and effective role assignments.

    Identity is taken from trusted headers set by the fronting proxy; token
    issuance and directory login happen upstream.
    """

    microsoft_oid, email, display_name = _resolve_identity(x_ms_oid, x_ms_email, x_ms_display_name)
    user = _upsert_user(db, microsoft_oid=microsoft_oid, email=email, display_name=display_name)
    roles = _load_effective_roles(db, user_id=user.id)
    db.commit()

    return RequestUserContext(
        user_id=user.id,
        microsoft_oid=user.microsoft_oid,
        email=user.email,
        display_name=user.display_name,
        status=user.status,
        roles=roles,
    )


def has_role(context: RequestUserContext, allowed_roles: set[AppRole]) -> bool:
    """Check whether user has any of the allowed roles."""

    return any(role in allowed_roles for role in context.role_names)


def has_any_permission(context: RequestUserContext, permissions: set[Permission]) -> bool:
    """Check whether user holds at least one of the given permissions."""

    return not context.permissions.isdisjoint(permissions)

