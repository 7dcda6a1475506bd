"""User management API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from talentdesk.api.deps import get_notifier, get_rbac_session, get_role_store, get_user_store
from talentdesk.api.guards import require_permission
from talentdesk.core.rbac.models import User, UserData
from talentdesk.core.rbac.permissions import AccessLevel, Resource
from talentdesk.core.rbac.session import RBACSession
from talentdesk.services.notifications import NotificationCenter
from talentdesk.services.role_store import RoleStore, StoreError, UserStore

router = APIRouter(prefix="/users", tags=["users"])


class AssignRoleRequest(BaseModel):
    role_id: str = Field(..., min_length=1)


async def _refresh_if_current(session: RBACSession, user_id: str) -> None:
    if session.current_user is not None and session.current_user.id == user_id:
        await session.refresh_user_role()


@router.get(
    "",
    response_model=List[User],
    dependencies=[require_permission(Resource.USERS, AccessLevel.READ)],
)
async def list_users(store: UserStore = Depends(get_user_store)):
    """List all users."""
    return await store.get_users()


@router.get(
    "/{user_id}",
    response_model=User,
    dependencies=[require_permission(Resource.USERS, AccessLevel.READ)],
)
async def get_user(user_id: str, store: UserStore = Depends(get_user_store)):
    user = await store.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post(
    "",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    dependencies=[require_permission(Resource.USERS, AccessLevel.WRITE)],
)
async def create_user(
    user_data: UserData,
    store: UserStore = Depends(get_user_store),
    notifier: NotificationCenter = Depends(get_notifier),
):
    try:
        user = await store.create_user(user_data)
    except StoreError as e:
        raise HTTPException(status_code=400, detail=str(e))

    notifier.success("User created successfully")
    return user


@router.put(
    "/{user_id}",
    response_model=User,
    dependencies=[require_permission(Resource.USERS, AccessLevel.WRITE)],
)
async def update_user(
    user_id: str,
    user_data: UserData,
    store: UserStore = Depends(get_user_store),
    session: RBACSession = Depends(get_rbac_session),
    notifier: NotificationCenter = Depends(get_notifier),
):
    try:
        user = await store.update_user(user_id, user_data)
    except StoreError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    notifier.success("User updated successfully")
    await _refresh_if_current(session, user_id)
    return user


@router.put(
    "/{user_id}/role",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[require_permission(Resource.USERS, AccessLevel.WRITE)],
)
async def assign_role(
    user_id: str,
    request: AssignRoleRequest,
    store: RoleStore = Depends(get_role_store),
    session: RBACSession = Depends(get_rbac_session),
):
    """Point a user at a role."""
    try:
        assigned = await store.assign_role_to_user(user_id, request.role_id)
    except StoreError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not assigned:
        raise HTTPException(status_code=404, detail="User or role not found")

    await _refresh_if_current(session, user_id)
    return None


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[require_permission(Resource.USERS, AccessLevel.WRITE)],
)
async def delete_user(user_id: str, store: UserStore = Depends(get_user_store)):
    try:
        deleted = await store.delete_user(user_id)
    except StoreError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="User not found")
    return None
