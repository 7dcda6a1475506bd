"""Permission evaluation for TalentDesk.

``check_permission`` is the single source of truth for access decisions.
Guards, the session context and the API all delegate to it.
"""

from typing import Iterable, Optional, Union

from .permissions import AccessLevel, PermissionLike, Resource


def _entry_parts(entry: PermissionLike) -> tuple[Optional[str], Optional[str]]:
    if isinstance(entry, dict):
        resource, action = entry.get("resource"), entry.get("action")
    else:
        resource = getattr(entry, "resource", None)
        action = getattr(entry, "action", None)
    if isinstance(action, AccessLevel):
        action = action.value
    return resource, action


def grants(stored: Union[str, AccessLevel, None], required: Union[str, AccessLevel]) -> bool:
    """Whether a stored access level satisfies a requested one. Write implies read."""
    stored_value = stored.value if isinstance(stored, AccessLevel) else stored
    required_value = required.value if isinstance(required, AccessLevel) else required

    if required_value == AccessLevel.READ.value:
        return stored_value in (AccessLevel.READ.value, AccessLevel.WRITE.value)
    if required_value == AccessLevel.WRITE.value:
        return stored_value == AccessLevel.WRITE.value
    # ``none`` is never a meaningful request
    return False


def check_permission(
    permissions: Optional[Iterable[PermissionLike]],
    resource: Union[str, Resource],
    required_action: Union[str, AccessLevel],
) -> bool:
    """
    Decide whether a role's permission list allows an action on a resource.

    The first entry naming the resource decides. A missing list, an empty
    list or a resource with no entry all deny. Never raises.

    Args:
        permissions: Role permissions as Permission tuples or persisted dicts
        resource: Resource key, e.g. "candidates"
        required_action: "read" or "write"

    Returns:
        True if access is allowed
    """
    if not permissions:
        return False

    key = resource.value if isinstance(resource, Resource) else resource
    for entry in permissions:
        entry_resource, entry_action = _entry_parts(entry)
        if entry_resource == key:
            return grants(entry_action, required_action)
    return False


class PermissionChecker:
    """Checks access for one role, with the permission list indexed by resource."""

    def __init__(self, permissions: Optional[Iterable[PermissionLike]]):
        """
        Initialize with a role's permission list.

        Later duplicates are ignored so lookups agree with ``check_permission``.
        """
        self.levels: dict[str, Optional[str]] = {}
        for entry in permissions or []:
            entry_resource, entry_action = _entry_parts(entry)
            if entry_resource is not None and entry_resource not in self.levels:
                self.levels[entry_resource] = entry_action

    def has_permission(
        self,
        resource: Union[str, Resource],
        action: Union[str, AccessLevel] = AccessLevel.READ,
    ) -> bool:
        key = resource.value if isinstance(resource, Resource) else resource
        if key not in self.levels:
            return False
        return grants(self.levels[key], action)

    def can_read(self, resource: Union[str, Resource]) -> bool:
        return self.has_permission(resource, AccessLevel.READ)

    def can_write(self, resource: Union[str, Resource]) -> bool:
        return self.has_permission(resource, AccessLevel.WRITE)

    def get_accessible_resources(self, action: AccessLevel = AccessLevel.READ) -> list[Resource]:
        """Get catalogued resources the role can perform the action on."""
        return [r for r in Resource if self.has_permission(r, action)]
