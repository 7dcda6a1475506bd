"""Role and user persistence.

Every operation is an awaited request/response call that can fail. The
error policy differs by direction:

- Reads (``get_roles``, ``get_role``, ``get_users``, ``get_user``,
  ``get_user_with_role``) log the failure, post a notification where the
  user asked for the data, and return an empty/``None`` sentinel.
- Writes log, notify and raise a ``StoreError`` subclass so the calling
  form can keep its state and show the message.

Not-found is never an error: lookups return ``None``, ``update_*`` returns
``None`` and ``delete_*`` returns ``False``.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from talentdesk.core.rbac.models import Role, RoleData, User, UserData, UserWithRole
from talentdesk.core.rbac.permissions import serialize_permissions
from talentdesk.db.models import Role as RoleModel, User as UserModel
from talentdesk.services.notifications import NotificationCenter

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a store mutation fails."""

    def __init__(self, message: str, operation: str):
        super().__init__(message)
        self.operation = operation


class RoleStoreError(StoreError):
    """Raised when creating, updating or deleting a role fails."""


class UserStoreError(StoreError):
    """Raised when creating, updating or deleting a user fails."""


class RoleStore(ABC):
    """Persistence boundary for roles and the user-role lookup."""

    @abstractmethod
    async def create_role(self, data: RoleData) -> Role:
        pass

    @abstractmethod
    async def get_roles(self) -> List[Role]:
        pass

    @abstractmethod
    async def get_role(self, role_id: str) -> Optional[Role]:
        pass

    @abstractmethod
    async def update_role(self, role_id: str, data: RoleData) -> Optional[Role]:
        """Replace name, description and the whole permission list."""

    @abstractmethod
    async def delete_role(self, role_id: str) -> bool:
        pass

    @abstractmethod
    async def assign_role_to_user(self, user_id: str, role_id: str) -> bool:
        pass

    @abstractmethod
    async def get_user_with_role(self, user_id: str) -> Optional[UserWithRole]:
        """
        Fetch a user and the role its ``role_id`` points at in one lookup.

        Returns ``None`` if the user does not exist or the lookup failed.
        A missing or dangling ``role_id`` yields ``role=None``.
        """


class UserStore(ABC):
    """Persistence boundary for user accounts."""

    @abstractmethod
    async def get_users(self) -> List[User]:
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def create_user(self, data: UserData) -> User:
        pass

    @abstractmethod
    async def update_user(self, user_id: str, data: UserData) -> Optional[User]:
        pass

    @abstractmethod
    async def delete_user(self, user_id: str) -> bool:
        pass


SessionFactory = Callable[[], Session]


class SqlRoleStore(RoleStore):
    """Role store backed by the SQLAlchemy ``roles`` and ``users`` tables."""

    def __init__(self, session_factory: SessionFactory, notifier: NotificationCenter):
        self._session_factory = session_factory
        self._notifier = notifier

    def _fail(self, operation: str, error: Exception) -> RoleStoreError:
        logger.exception(f"Error during {operation}")
        self._notifier.error(f"Failed to {operation}: {error}")
        return RoleStoreError(f"Failed to {operation}: {error}", operation)

    async def create_role(self, data: RoleData) -> Role:
        try:
            with self._session_factory() as db:
                existing = db.query(RoleModel).filter(RoleModel.name == data.name).first()
                if existing:
                    raise ValueError("Role with this name already exists")

                now = datetime.utcnow()
                role = RoleModel(
                    name=data.name,
                    description=data.description,
                    permissions=serialize_permissions(data.permissions),
                    created_at=now,
                    updated_at=now,
                )
                db.add(role)
                db.commit()
                db.refresh(role)
                logger.info(f"Created role {role.name} ({role.id})")
                return Role.model_validate(role)
        except (SQLAlchemyError, ValueError) as e:
            raise self._fail("create role", e) from e

    async def get_roles(self) -> List[Role]:
        try:
            with self._session_factory() as db:
                roles = db.query(RoleModel).order_by(RoleModel.name).all()
                return [Role.model_validate(r) for r in roles]
        except (SQLAlchemyError, ValueError) as e:
            logger.exception("Error fetching roles")
            self._notifier.error(f"Failed to fetch roles: {e}")
            return []

    async def get_role(self, role_id: str) -> Optional[Role]:
        try:
            with self._session_factory() as db:
                role = db.query(RoleModel).filter(RoleModel.id == role_id).first()
                return Role.model_validate(role) if role else None
        except (SQLAlchemyError, ValueError) as e:
            logger.exception(f"Error fetching role {role_id}")
            self._notifier.error(f"Failed to fetch role: {e}")
            return None

    async def update_role(self, role_id: str, data: RoleData) -> Optional[Role]:
        try:
            with self._session_factory() as db:
                role = db.query(RoleModel).filter(RoleModel.id == role_id).first()
                if not role:
                    return None

                duplicate = db.query(RoleModel).filter(
                    and_(RoleModel.name == data.name, RoleModel.id != role_id)
                ).first()
                if duplicate:
                    raise ValueError("Role with this name already exists")

                role.name = data.name
                role.description = data.description
                role.permissions = serialize_permissions(data.permissions)
                role.updated_at = datetime.utcnow()
                db.commit()
                db.refresh(role)
                logger.info(f"Updated role {role.name} ({role.id})")
                return Role.model_validate(role)
        except (SQLAlchemyError, ValueError) as e:
            raise self._fail("update role", e) from e

    async def delete_role(self, role_id: str) -> bool:
        # Users still pointing at the role are left dangling and resolve to no role
        try:
            with self._session_factory() as db:
                role = db.query(RoleModel).filter(RoleModel.id == role_id).first()
                if not role:
                    return False
                in_use = db.query(UserModel).filter(UserModel.role_id == role_id).count()
                if in_use:
                    logger.warning(f"Deleting role {role_id} still assigned to {in_use} user(s)")
                db.delete(role)
                db.commit()
                logger.info(f"Deleted role {role_id}")
                return True
        except SQLAlchemyError as e:
            raise self._fail("delete role", e) from e

    async def assign_role_to_user(self, user_id: str, role_id: str) -> bool:
        try:
            with self._session_factory() as db:
                user = db.query(UserModel).filter(UserModel.id == user_id).first()
                role = db.query(RoleModel).filter(RoleModel.id == role_id).first()
                if not user or not role:
                    return False
                user.role_id = role_id
                user.updated_at = datetime.utcnow()
                db.commit()
                logger.info(f"Assigned role {role_id} to user {user_id}")
                return True
        except SQLAlchemyError as e:
            raise self._fail("assign role", e) from e

    async def get_user_with_role(self, user_id: str) -> Optional[UserWithRole]:
        try:
            with self._session_factory() as db:
                user = db.query(UserModel).filter(UserModel.id == user_id).first()
                if not user:
                    logger.warning(f"User {user_id} not found")
                    return None

                role = None
                if user.role_id:
                    role_row = db.query(RoleModel).filter(RoleModel.id == user.role_id).first()
                    if role_row:
                        role = Role.model_validate(role_row)
                    else:
                        logger.warning(f"User {user_id} references missing role {user.role_id}")

                return UserWithRole(user=User.model_validate(user), role=role)
        except (SQLAlchemyError, ValueError):
            logger.exception(f"Error fetching user with role for {user_id}")
            return None


class SqlUserStore(UserStore):
    """User store backed by the SQLAlchemy ``users`` table."""

    def __init__(self, session_factory: SessionFactory, notifier: NotificationCenter):
        self._session_factory = session_factory
        self._notifier = notifier

    def _fail(self, operation: str, error: Exception) -> UserStoreError:
        logger.exception(f"Error during {operation}")
        self._notifier.error(f"Failed to {operation}: {error}")
        return UserStoreError(f"Failed to {operation}: {error}", operation)

    @staticmethod
    def _check_unique(db: Session, data: UserData, exclude_id: Optional[str] = None) -> None:
        query = db.query(UserModel).filter(
            (UserModel.username == data.username) | (UserModel.email == data.email)
        )
        if exclude_id:
            query = query.filter(UserModel.id != exclude_id)
        if query.first():
            raise ValueError("A user with this username or email already exists")

    async def get_users(self) -> List[User]:
        try:
            with self._session_factory() as db:
                users = db.query(UserModel).order_by(UserModel.name).all()
                return [User.model_validate(u) for u in users]
        except SQLAlchemyError as e:
            logger.exception("Error fetching users")
            self._notifier.error(f"Failed to fetch users: {e}")
            return []

    async def get_user(self, user_id: str) -> Optional[User]:
        try:
            with self._session_factory() as db:
                user = db.query(UserModel).filter(UserModel.id == user_id).first()
                return User.model_validate(user) if user else None
        except SQLAlchemyError as e:
            logger.exception(f"Error fetching user {user_id}")
            self._notifier.error(f"Failed to fetch user: {e}")
            return None

    async def create_user(self, data: UserData) -> User:
        try:
            with self._session_factory() as db:
                self._check_unique(db, data)
                user = UserModel(**data.model_dump())
                db.add(user)
                db.commit()
                db.refresh(user)
                logger.info(f"Created user {user.username} ({user.id})")
                return User.model_validate(user)
        except (SQLAlchemyError, ValueError) as e:
            raise self._fail("create user", e) from e

    async def update_user(self, user_id: str, data: UserData) -> Optional[User]:
        try:
            with self._session_factory() as db:
                user = db.query(UserModel).filter(UserModel.id == user_id).first()
                if not user:
                    return None
                self._check_unique(db, data, exclude_id=user_id)
                for key, value in data.model_dump().items():
                    setattr(user, key, value)
                user.updated_at = datetime.utcnow()
                db.commit()
                db.refresh(user)
                return User.model_validate(user)
        except (SQLAlchemyError, ValueError) as e:
            raise self._fail("update user", e) from e

    async def delete_user(self, user_id: str) -> bool:
        try:
            with self._session_factory() as db:
                user = db.query(UserModel).filter(UserModel.id == user_id).first()
                if not user:
                    return False
                db.delete(user)
                db.commit()
                return True
        except SQLAlchemyError as e:
            raise self._fail("delete user", e) from e
