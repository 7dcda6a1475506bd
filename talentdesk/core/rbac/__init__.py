"""RBAC (Role-Based Access Control) module for TalentDesk.

This module defines the permission model, default roles and the permission evaluator.
The session context lives in ``talentdesk.core.rbac.session``.
"""

from .permissions import Permission, Resource, AccessLevel, RESOURCE_CATALOG
from .checker import PermissionChecker, check_permission

__all__ = [
    "Permission",
    "Resource",
    "AccessLevel",
    "RESOURCE_CATALOG",
    "PermissionChecker",
    "check_permission",
]
