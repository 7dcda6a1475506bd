"""Database models for TalentDesk."""

from talentdesk.db.models.role import Role
from talentdesk.db.models.user import User

__all__ = [
    "Role",
    "User",
]
