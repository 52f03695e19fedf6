from __future__ import annotations

import uuid

from app.core.auth import (
    AppRole,
    EffectiveRoleAssignment,
    Permission,
    RequestUserContext,
    has_any_permission,
    has_role,
)


def _context(*roles: AppRole) -> RequestUserContext:
    return RequestUserContext(
        user_id=uuid.uuid4(),
        microsoft_oid="oid-1",
        email="user@test.local",
        display_name="User",
        status="active",
        roles=tuple(EffectiveRoleAssignment(role=role, assignment_id=uuid.uuid4()) for role in roles),
    )


def test_has_role_matches_expected_roles() -> None:
    context = _context(AppRole.FINANCE)

    assert has_role(context, {AppRole.FINANCE}) is True
    assert has_role(context, {AppRole.RTL, AppRole.ADMIN}) is False


def test_permissions_are_union_of_assigned_roles() -> None:
    context = _context(AppRole.FINANCE, AppRole.RTL)

    assert Permission.VIEW_REPORTS in context.permissions
    assert Permission.VIEW_TEAM_DATA in context.permissions
    assert Permission.MANAGE_USERS not in context.permissions
    assert has_any_permission(context, {Permission.EXPORT_REPORTS, Permission.MANAGE_ROLES}) is True


def test_team_data_viewer_is_region_restricted() -> None:
    assert _context(AppRole.RTL).is_region_restricted is True
    assert _context(AppRole.ARTL).is_region_restricted is True


def test_full_report_access_lifts_region_restriction() -> None:
    assert _context(AppRole.ADMIN).is_region_restricted is False
    assert _context(AppRole.RTL, AppRole.FINANCE).is_region_restricted is False
    assert _context(AppRole.IVA).is_region_restricted is False


def test_context_without_roles_has_no_permissions() -> None:
    context = _context()

    assert context.permissions == frozenset()
    assert has_any_permission(context, {Permission.VIEW_REPORTS, Permission.VIEW_TEAM_DATA}) is False


def test_duplicate_role_assignments_collapse() -> None:
    context = _context(AppRole.HR, AppRole.HR)

    assert context.role_names == (AppRole.HR,)
