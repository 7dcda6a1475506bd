"""Database seeding for TalentDesk.

Creates the default roles and the user the session resolves at startup.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from talentdesk.core.rbac.permissions import serialize_permissions
from talentdesk.core.rbac.roles import DEFAULT_ROLES
from talentdesk.db.models import Role, User

logger = logging.getLogger(__name__)


def seed_default_roles(db: Session) -> dict[str, Role]:
    """
    Create the default roles.

    Idempotent - roles that already exist by name are returned as they are.

    Args:
        db: Database session

    Returns:
        Dict mapping role key to Role object
    """
    created_roles = {}

    for role_key, role_config in DEFAULT_ROLES.items():
        existing = db.query(Role).filter(Role.name == role_config["name"]).first()
        if existing:
            created_roles[role_key] = existing
            continue

        role = Role(
            name=role_config["name"],
            description=role_config["description"],
            permissions=serialize_permissions(role_config["permissions"]),
        )
        db.add(role)
        created_roles[role_key] = role

    db.flush()
    return created_roles


def seed_user(
    db: Session,
    user_id: str,
    *,
    role: Optional[Role] = None,
    username: str = "admin",
    name: str = "Administrator",
    email: str = "admin@talentdesk.example.com",
    department: Optional[str] = None,
) -> User:
    """Create a user with a fixed id unless it already exists."""
    existing = db.query(User).filter(User.id == user_id).first()
    if existing:
        return existing

    user = User(
        id=user_id,
        username=username,
        name=name,
        email=email,
        role_id=role.id if role else None,
        department=department,
    )
    db.add(user)
    db.flush()
    return user


def seed_database(db: Session, current_user_id: str) -> None:
    """Seed default roles and an admin user for ``current_user_id``, then commit."""
    roles = seed_default_roles(db)
    seed_user(db, current_user_id, role=roles["admin"])
    db.commit()
    logger.info(f"Seeded {len(roles)} default roles and user {current_user_id}")
