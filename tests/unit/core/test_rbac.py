"""Tests for the RBAC permission model and evaluator."""

import pytest

from talentdesk.core.rbac.checker import PermissionChecker, check_permission, grants
from talentdesk.core.rbac.models import PermissionEntry, RoleData
from talentdesk.core.rbac.permissions import (
    AccessLevel,
    DuplicateResourceError,
    Permission,
    RESOURCE_CATALOG,
    Resource,
    UnknownResourceError,
    build_permission_map,
    default_permissions,
    serialize_permissions,
)
from talentdesk.core.rbac.roles import (
    ADMIN_PERMISSIONS,
    DEFAULT_ROLES,
    HR_MANAGER_PERMISSIONS,
    RECRUITER_PERMISSIONS,
    VIEWER_PERMISSIONS,
    get_default_role_permissions,
)


RECRUITER = [
    {"resource": "candidates", "action": "write"},
    {"resource": "reports", "action": "read"},
]


class TestPermissionModel:
    """Test permission definitions."""

    def test_permission_string_format(self):
        perm = Permission("candidates", AccessLevel.WRITE)
        assert str(perm) == "candidates:write"

    def test_permission_from_string(self):
        perm = Permission.from_string("reports:read")
        assert perm.resource == "reports"
        assert perm.action == AccessLevel.READ

    def test_invalid_permission_format(self):
        with pytest.raises(ValueError):
            Permission.from_string("invalid")

        with pytest.raises(ValueError):
            Permission.from_string("too:many:parts")

        with pytest.raises(ValueError):
            Permission.from_string("jobs:admin")

    def test_dict_shape(self):
        perm = Permission.from_dict({"resource": "jobs", "action": "none"})
        assert perm == Permission("jobs", AccessLevel.NONE)
        assert perm.to_dict() == {"resource": "jobs", "action": "none"}

    def test_default_permissions_cover_catalog(self):
        perms = default_permissions()
        assert [p.resource for p in perms] == [info.key.value for info in RESOURCE_CATALOG]
        assert all(p.action is AccessLevel.NONE for p in perms)

    def test_catalog_lists_every_resource_once(self):
        keys = [info.key for info in RESOURCE_CATALOG]
        assert len(keys) == len(set(keys))
        assert set(keys) == set(Resource)

    def test_serialize_preserves_order(self):
        perms = [Permission("reports", AccessLevel.READ), {"resource": "candidates", "action": "write"}]
        assert serialize_permissions(perms) == [
            {"resource": "reports", "action": "read"},
            {"resource": "candidates", "action": "write"},
        ]


class TestPermissionMap:
    def test_map_keyed_by_resource(self):
        mapping = build_permission_map(RECRUITER)
        assert mapping == {"candidates": AccessLevel.WRITE, "reports": AccessLevel.READ}

    def test_duplicate_resource_rejected(self):
        with pytest.raises(DuplicateResourceError) as exc:
            build_permission_map([
                {"resource": "jobs", "action": "read"},
                {"resource": "jobs", "action": "write"},
            ])
        assert exc.value.resource == "jobs"

    def test_unknown_resource_rejected(self):
        with pytest.raises(UnknownResourceError):
            build_permission_map([{"resource": "payroll", "action": "read"}])

    def test_unknown_resource_allowed_when_not_required(self):
        mapping = build_permission_map([{"resource": "payroll", "action": "read"}], require_known=False)
        assert mapping == {"payroll": AccessLevel.READ}

    def test_role_data_rejects_duplicates(self):
        with pytest.raises(ValueError):
            RoleData(
                name="Broken",
                description="Lists jobs twice",
                permissions=[
                    PermissionEntry(resource="jobs", action=AccessLevel.READ),
                    PermissionEntry(resource="jobs", action=AccessLevel.NONE),
                ],
            )

    def test_role_data_defaults_to_none_everywhere(self):
        data = RoleData(name="Blank", description="Nothing granted")
        assert len(data.permissions) == len(RESOURCE_CATALOG)
        assert all(p.action is AccessLevel.NONE for p in data.permissions)

    def test_role_data_requires_name_and_description(self):
        with pytest.raises(ValueError):
            RoleData(name="", description="x")
        with pytest.raises(ValueError):
            RoleData(name="x", description="   ")


class TestCheckPermission:
    """The evaluator's contract."""

    @pytest.mark.parametrize("permissions", [None, []])
    def test_absent_or_empty_list_denies(self, permissions):
        assert check_permission(permissions, "jobs", "read") is False
        assert check_permission(permissions, "jobs", "write") is False

    def test_write_implies_read(self):
        perms = [{"resource": "jobs", "action": "write"}]
        assert check_permission(perms, "jobs", "read") is True
        assert check_permission(perms, "jobs", "write") is True

    def test_read_does_not_imply_write(self):
        perms = [{"resource": "jobs", "action": "read"}]
        assert check_permission(perms, "jobs", "read") is True
        assert check_permission(perms, "jobs", "write") is False

    def test_stored_none_denies_both(self):
        perms = [{"resource": "jobs", "action": "none"}]
        assert check_permission(perms, "jobs", "read") is False
        assert check_permission(perms, "jobs", "write") is False

    def test_unmatched_resource_denies(self):
        perms = [{"resource": "jobs", "action": "write"}]
        for resource in ("clients", "unknown", ""):
            assert check_permission(perms, resource, "read") is False
            assert check_permission(perms, resource, "write") is False

    def test_recruiter_scenario(self):
        assert check_permission(RECRUITER, "candidates", "write") is True
        assert check_permission(RECRUITER, "reports", "write") is False
        assert check_permission(RECRUITER, "clients", "read") is False

    def test_first_match_wins(self):
        perms = [
            {"resource": "jobs", "action": "read"},
            {"resource": "jobs", "action": "write"},
        ]
        assert check_permission(perms, "jobs", "write") is False

    def test_requesting_none_denies(self):
        perms = [{"resource": "jobs", "action": "write"}]
        assert check_permission(perms, "jobs", AccessLevel.NONE) is False

    def test_accepts_enums_and_tuples(self):
        perms = [Permission("candidates", AccessLevel.WRITE)]
        assert check_permission(perms, Resource.CANDIDATES, AccessLevel.WRITE) is True
        entries = [PermissionEntry(resource="jobs", action=AccessLevel.READ)]
        assert check_permission(entries, Resource.JOBS, AccessLevel.READ) is True

    def test_malformed_entries_never_raise(self):
        perms = [{"resource": "jobs"}, {"action": "write"}, {"resource": "jobs", "action": "admin"}, object()]
        assert check_permission(perms, "jobs", "read") is False

    def test_idempotent(self):
        results = {check_permission(RECRUITER, "candidates", "write") for _ in range(50)}
        assert results == {True}
        assert RECRUITER == [
            {"resource": "candidates", "action": "write"},
            {"resource": "reports", "action": "read"},
        ]

    def test_grants_table(self):
        assert grants("write", "read") and grants("write", "write")
        assert grants("read", "read") and not grants("read", "write")
        assert not grants("none", "read") and not grants("none", "write")
        assert not grants(None, "read")


class TestPermissionChecker:
    def test_agrees_with_check_permission(self):
        checker = PermissionChecker(RECRUITER)
        for resource in Resource:
            for action in (AccessLevel.READ, AccessLevel.WRITE):
                assert checker.has_permission(resource, action) == check_permission(
                    RECRUITER, resource, action
                )

    def test_can_read_and_write(self):
        checker = PermissionChecker(RECRUITER)
        assert checker.can_write("candidates")
        assert checker.can_read("reports")
        assert not checker.can_write("reports")

    def test_first_entry_kept_on_duplicates(self):
        checker = PermissionChecker([
            {"resource": "jobs", "action": "none"},
            {"resource": "jobs", "action": "write"},
        ])
        assert not checker.can_read("jobs")

    def test_get_accessible_resources(self):
        checker = PermissionChecker(RECRUITER)
        assert checker.get_accessible_resources(AccessLevel.READ) == [Resource.CANDIDATES, Resource.REPORTS]
        assert checker.get_accessible_resources(AccessLevel.WRITE) == [Resource.CANDIDATES]

    def test_empty_checker_denies(self):
        checker = PermissionChecker(None)
        assert checker.get_accessible_resources() == []


class TestDefaultRoles:
    """Test default role definitions."""

    def test_all_default_roles_defined(self):
        assert set(DEFAULT_ROLES) == {"admin", "hr_manager", "recruiter", "viewer"}

    def test_every_role_lists_every_resource_once(self):
        for config in DEFAULT_ROLES.values():
            mapping = build_permission_map(config["permissions"])
            assert set(mapping) == {r.value for r in Resource}

    def test_admin_has_full_access(self):
        checker = PermissionChecker(ADMIN_PERMISSIONS)
        assert all(checker.can_write(r) for r in Resource)

    def test_recruiter_permissions(self):
        checker = PermissionChecker(RECRUITER_PERMISSIONS)
        assert checker.can_write("candidates")
        assert checker.can_write("interviews")
        assert checker.can_read("jobs")
        assert not checker.can_write("jobs")
        assert not checker.can_read("employees")
        assert not checker.can_read("roles")

    def test_hr_manager_permissions(self):
        checker = PermissionChecker(HR_MANAGER_PERMISSIONS)
        assert checker.can_write("employees")
        assert checker.can_write("onboarding")
        assert checker.can_read("candidates")
        assert not checker.can_write("candidates")
        assert not checker.can_write("users")

    def test_viewer_is_readonly(self):
        checker = PermissionChecker(VIEWER_PERMISSIONS)
        assert checker.get_accessible_resources(AccessLevel.WRITE) == []
        assert checker.can_read("reports")

    def test_only_admin_can_manage_roles(self):
        for key, config in DEFAULT_ROLES.items():
            assert PermissionChecker(config["permissions"]).can_write("roles") == (key == "admin")

    def test_get_default_role_permissions(self):
        assert get_default_role_permissions("admin") == ADMIN_PERMISSIONS

    def test_invalid_role_raises(self):
        with pytest.raises(ValueError):
            get_default_role_permissions("unknown_role")
