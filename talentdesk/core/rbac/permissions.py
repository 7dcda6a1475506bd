"""Permission model for TalentDesk RBAC.

A role grants one access level per resource:

  - ``none``  - the area is hidden
  - ``read``  - the area can be viewed
  - ``write`` - the area can be viewed and modified

Permission string format: "resource:action"
Examples:
  - candidates:write
  - reports:read
  - clients:none
"""

from enum import Enum
from typing import Any, Iterable, NamedTuple, Union


class Resource(str, Enum):
    """Protected areas of the back office."""

    # Recruitment
    CANDIDATES = "candidates"     # Candidate pipeline
    JOBS = "jobs"                 # Job descriptions
    CLIENTS = "clients"           # Client companies
    INTERVIEWS = "interviews"     # Interview schedule and feedback
    SCREENING = "screening"       # Screen tracker

    # People
    EMPLOYEES = "employees"       # Employee records
    ONBOARDING = "onboarding"     # Onboard tracker

    # Reporting
    REPORTS = "reports"           # Reports and interview reports

    # Administration
    USERS = "users"               # User accounts
    ROLES = "roles"               # Role definitions


class AccessLevel(str, Enum):
    """Access level stored per resource. Only READ and WRITE are ever requested."""

    NONE = "none"
    READ = "read"
    WRITE = "write"


class Permission(NamedTuple):
    """A permission is a resource paired with the access level granted on it."""
    resource: str
    action: AccessLevel

    def __str__(self) -> str:
        return f"{self.resource}:{self.action.value}"

    @classmethod
    def from_string(cls, perm_str: str) -> "Permission":
        """Parse a permission string like 'candidates:write'."""
        parts = perm_str.split(":")
        if len(parts) != 2 or not parts[0]:
            raise ValueError(f"Invalid permission format: {perm_str}")
        return cls(parts[0], AccessLevel(parts[1]))

    @classmethod
    def from_dict(cls, data: dict) -> "Permission":
        """Build from the persisted ``{"resource": ..., "action": ...}`` shape."""
        return cls(str(data["resource"]), AccessLevel(data["action"]))

    def to_dict(self) -> dict[str, str]:
        return {"resource": self.resource, "action": self.action.value}


# Permission tuples, persisted dicts, or any object with resource/action attributes
PermissionLike = Union[Permission, dict, Any]


class DuplicateResourceError(ValueError):
    """Raised when a permission list names the same resource twice."""

    def __init__(self, resource: str):
        super().__init__(f"Duplicate permission entry for resource: {resource}")
        self.resource = resource


class UnknownResourceError(ValueError):
    """Raised when a permission list names a resource outside the catalogue."""

    def __init__(self, resource: str):
        super().__init__(f"Unknown resource: {resource}")
        self.resource = resource


class ResourceInfo(NamedTuple):
    key: Resource
    name: str
    description: str


# Catalogue shown by the role form, in display order
RESOURCE_CATALOG: list[ResourceInfo] = [
    ResourceInfo(Resource.CANDIDATES, "Candidates", "Source, screen and track candidates."),
    ResourceInfo(Resource.JOBS, "Job Descriptions", "Publish and maintain client job descriptions."),
    ResourceInfo(Resource.CLIENTS, "Clients", "Manage client companies and contacts."),
    ResourceInfo(Resource.EMPLOYEES, "Employees", "Maintain employee records."),
    ResourceInfo(Resource.REPORTS, "Reports", "View recruitment and interview reports."),
    ResourceInfo(Resource.INTERVIEWS, "Interviews", "Schedule interviews and record feedback."),
    ResourceInfo(Resource.ONBOARDING, "Onboard Tracker", "Follow new joiners through onboarding."),
    ResourceInfo(Resource.SCREENING, "Screen Tracker", "Track candidate screening calls."),
    ResourceInfo(Resource.USERS, "Users", "Create user accounts and assign roles."),
    ResourceInfo(Resource.ROLES, "Roles", "Define roles and their permissions."),
]


def is_known_resource(resource: str) -> bool:
    return resource in {r.value for r in Resource}


def coerce_permission(item: PermissionLike) -> Permission:
    """Normalize a Permission, its persisted dict shape, or an attribute-style entry."""
    if isinstance(item, Permission):
        return item
    if isinstance(item, dict):
        return Permission.from_dict(item)
    return Permission(str(item.resource), AccessLevel(item.action))


def default_permissions() -> list[Permission]:
    """Permission list for a new role: every catalogued resource set to none."""
    return [Permission(info.key.value, AccessLevel.NONE) for info in RESOURCE_CATALOG]


def build_permission_map(
    permissions: Iterable[PermissionLike],
    *,
    require_known: bool = True,
) -> dict[str, AccessLevel]:
    """
    Index a permission list by resource, enforcing one entry per resource.

    Used at role-save time; the evaluator itself tolerates duplicates.

    Raises:
        DuplicateResourceError: A resource appears more than once
        UnknownResourceError: ``require_known`` is set and a resource is not catalogued
    """
    mapping: dict[str, AccessLevel] = {}
    for item in permissions:
        perm = coerce_permission(item)
        if perm.resource in mapping:
            raise DuplicateResourceError(perm.resource)
        if require_known and not is_known_resource(perm.resource):
            raise UnknownResourceError(perm.resource)
        mapping[perm.resource] = perm.action
    return mapping


def serialize_permissions(permissions: Iterable[PermissionLike]) -> list[dict[str, str]]:
    """Convert to the JSON shape stored on a role, preserving order."""
    return [coerce_permission(p).to_dict() for p in permissions]
