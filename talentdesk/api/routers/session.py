"""Session context endpoints: who is signed in and what they may do."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from talentdesk.api.deps import get_rbac_session
from talentdesk.api.navigation import navigation_items
from talentdesk.core.rbac.models import Role, User
from talentdesk.core.rbac.permissions import AccessLevel
from talentdesk.core.rbac.session import RBACSession

router = APIRouter(prefix="/session", tags=["session"])


class SessionResponse(BaseModel):
    current_user: Optional[User]
    user_role: Optional[Role]
    is_loading: bool


class PermissionCheckResponse(BaseModel):
    resource: str
    action: AccessLevel
    allowed: bool


class NavItemResponse(BaseModel):
    title: str
    path: str


def _snapshot(session: RBACSession) -> SessionResponse:
    state = session.state
    return SessionResponse(
        current_user=state.current_user,
        user_role=state.user_role,
        is_loading=state.is_loading,
    )


@router.get("", response_model=SessionResponse)
async def get_session(session: RBACSession = Depends(get_rbac_session)):
    return _snapshot(session)


@router.post("/refresh", response_model=SessionResponse)
async def refresh_session(session: RBACSession = Depends(get_rbac_session)):
    """Re-fetch the current user's role."""
    await session.refresh_user_role()
    return _snapshot(session)


@router.get("/check", response_model=PermissionCheckResponse)
async def check(
    resource: str = Query(..., min_length=1),
    action: AccessLevel = Query(AccessLevel.READ),
    session: RBACSession = Depends(get_rbac_session),
):
    return PermissionCheckResponse(
        resource=resource,
        action=action,
        allowed=session.check_permission(resource, action),
    )


@router.get("/navigation", response_model=List[NavItemResponse])
async def navigation(session: RBACSession = Depends(get_rbac_session)):
    return navigation_items(session)
