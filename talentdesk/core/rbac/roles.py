"""Default role definitions for TalentDesk.

Seeded into an empty database:
1. Admin - Write access to everything
2. HR Manager - People operations plus recruitment oversight
3. Recruiter - Candidate pipeline work
4. Viewer - Read-only access to recruitment data
"""

from typing import Dict, List

from .permissions import AccessLevel, Permission, RESOURCE_CATALOG


def _build_permissions(**levels: AccessLevel) -> List[Permission]:
    """One entry per catalogued resource; anything not named gets none."""
    return [
        Permission(info.key.value, levels.get(info.key.value, AccessLevel.NONE))
        for info in RESOURCE_CATALOG
    ]


ADMIN_PERMISSIONS = [
    Permission(info.key.value, AccessLevel.WRITE) for info in RESOURCE_CATALOG
]

HR_MANAGER_PERMISSIONS = _build_permissions(
    employees=AccessLevel.WRITE,
    onboarding=AccessLevel.WRITE,
    candidates=AccessLevel.READ,
    jobs=AccessLevel.READ,
    clients=AccessLevel.READ,
    interviews=AccessLevel.READ,
    reports=AccessLevel.READ,
    users=AccessLevel.READ,
)

RECRUITER_PERMISSIONS = _build_permissions(
    candidates=AccessLevel.WRITE,
    interviews=AccessLevel.WRITE,
    screening=AccessLevel.WRITE,
    jobs=AccessLevel.READ,
    clients=AccessLevel.READ,
    reports=AccessLevel.READ,
)

VIEWER_PERMISSIONS = _build_permissions(
    candidates=AccessLevel.READ,
    jobs=AccessLevel.READ,
    clients=AccessLevel.READ,
    reports=AccessLevel.READ,
)


DEFAULT_ROLES: Dict[str, dict] = {
    "admin": {
        "name": "Admin",
        "description": "Full access to every area of the back office",
        "permissions": ADMIN_PERMISSIONS,
    },
    "hr_manager": {
        "name": "HR Manager",
        "description": "Manages employees and onboarding, oversees recruitment",
        "permissions": HR_MANAGER_PERMISSIONS,
    },
    "recruiter": {
        "name": "Recruiter",
        "description": "Works the candidate pipeline, interviews and screening",
        "permissions": RECRUITER_PERMISSIONS,
    },
    "viewer": {
        "name": "Viewer",
        "description": "Read-only access to candidates, jobs, clients and reports",
        "permissions": VIEWER_PERMISSIONS,
    },
}


def get_default_role_permissions(role_key: str) -> List[Permission]:
    """Get permissions list for a default role."""
    role = DEFAULT_ROLES.get(role_key)
    if not role:
        raise ValueError(f"Unknown default role: {role_key}")
    return role["permissions"]
