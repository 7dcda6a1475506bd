"""Records exchanged between the stores, the session context and the API."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .checker import PermissionChecker
from .permissions import AccessLevel, build_permission_map, default_permissions


class PermissionEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    resource: str = Field(..., min_length=1)
    action: AccessLevel


def _blank_permissions() -> List[PermissionEntry]:
    return [PermissionEntry(resource=p.resource, action=p.action) for p in default_permissions()]


class RoleData(BaseModel):
    """Full role contents as submitted by the role form."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    permissions: List[PermissionEntry] = Field(default_factory=_blank_permissions)

    @field_validator("name", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("permissions")
    @classmethod
    def one_entry_per_resource(cls, value: List[PermissionEntry]) -> List[PermissionEntry]:
        build_permission_map(value)
        return value


class Role(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str
    description: str
    permissions: List[PermissionEntry] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def checker(self) -> PermissionChecker:
        return PermissionChecker(self.permissions)


class UserData(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    role_id: Optional[str] = None
    department: Optional[str] = None


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    username: str
    name: str
    email: str
    role_id: Optional[str] = None
    department: Optional[str] = None


class UserWithRole(BaseModel):
    """A user together with the role its ``role_id`` resolves to, if any."""

    model_config = ConfigDict(frozen=True)

    user: User
    role: Optional[Role] = None
