"""Role management API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from talentdesk.api.deps import get_notifier, get_rbac_session, get_role_store
from talentdesk.api.guards import PermissionDependency, require_permission
from talentdesk.core.rbac.models import PermissionEntry, Role, RoleData
from talentdesk.core.rbac.permissions import RESOURCE_CATALOG, AccessLevel, Resource
from talentdesk.core.rbac.session import RBACSession
from talentdesk.services.notifications import NotificationCenter
from talentdesk.services.role_store import RoleStore, RoleStoreError

router = APIRouter(prefix="/roles", tags=["roles"])


# Schemas
class RoleResponse(BaseModel):
    id: str
    name: str
    description: str
    permissions: List[PermissionEntry]
    created_at: str
    updated_at: str


class RoleDetailResponse(RoleResponse):
    can_edit: bool


class ResourceInfoResponse(BaseModel):
    key: str
    name: str
    description: str
    default_action: AccessLevel = AccessLevel.NONE


def _to_response(role: Role) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        name=role.name,
        description=role.description,
        permissions=list(role.permissions),
        created_at=role.created_at.isoformat() if role.created_at else "",
        updated_at=role.updated_at.isoformat() if role.updated_at else "",
    )


async def _refresh_if_current(session: RBACSession, role_id: str) -> None:
    current: Optional[Role] = session.user_role
    if current is not None and current.id == role_id:
        await session.refresh_user_role()


# Endpoints
@router.get(
    "",
    response_model=List[RoleResponse],
    dependencies=[require_permission(Resource.ROLES, AccessLevel.READ)],
)
async def list_roles(store: RoleStore = Depends(get_role_store)):
    """List all roles."""
    roles = await store.get_roles()
    return [_to_response(r) for r in roles]


@router.get(
    "/resources",
    response_model=List[ResourceInfoResponse],
    dependencies=[require_permission(Resource.ROLES, AccessLevel.READ)],
)
async def list_resources():
    """Resources a role form offers, in display order."""
    return [
        ResourceInfoResponse(key=info.key.value, name=info.name, description=info.description)
        for info in RESOURCE_CATALOG
    ]


@router.get(
    "/{role_id}",
    response_model=RoleDetailResponse,
    dependencies=[require_permission(Resource.ROLES, AccessLevel.READ)],
)
async def get_role(
    role_id: str,
    store: RoleStore = Depends(get_role_store),
    can_edit: bool = Depends(
        PermissionDependency(Resource.ROLES, AccessLevel.WRITE, redirect_on_failure=False)
    ),
):
    """Get a specific role by ID, with whether the current role may edit it."""
    role = await store.get_role(role_id)
    if not role:
        raise HTTPException(status_code=404, detail="Role not found")
    return RoleDetailResponse(**_to_response(role).model_dump(), can_edit=can_edit)


@router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[require_permission(Resource.ROLES, AccessLevel.WRITE)],
)
async def create_role(
    role_data: RoleData,
    store: RoleStore = Depends(get_role_store),
    notifier: NotificationCenter = Depends(get_notifier),
):
    """Create a new role."""
    try:
        role = await store.create_role(role_data)
    except RoleStoreError as e:
        raise HTTPException(status_code=400, detail=str(e))

    notifier.success("Role created successfully")
    return _to_response(role)


@router.put(
    "/{role_id}",
    response_model=RoleResponse,
    dependencies=[require_permission(Resource.ROLES, AccessLevel.WRITE)],
)
async def update_role(
    role_id: str,
    role_data: RoleData,
    store: RoleStore = Depends(get_role_store),
    session: RBACSession = Depends(get_rbac_session),
    notifier: NotificationCenter = Depends(get_notifier),
):
    """Replace a role's name, description and permission list."""
    try:
        role = await store.update_role(role_id, role_data)
    except RoleStoreError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not role:
        raise HTTPException(status_code=404, detail="Role not found")

    notifier.success("Role updated successfully")
    await _refresh_if_current(session, role_id)
    return _to_response(role)


@router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[require_permission(Resource.ROLES, AccessLevel.WRITE)],
)
async def delete_role(
    role_id: str,
    store: RoleStore = Depends(get_role_store),
    session: RBACSession = Depends(get_rbac_session),
):
    """Delete a role. Users assigned to it are left without a role."""
    try:
        deleted = await store.delete_role(role_id)
    except RoleStoreError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Role not found")

    await _refresh_if_current(session, role_id)
    return None
