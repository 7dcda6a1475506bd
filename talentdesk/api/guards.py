"""Guards: the only place the rest of the application gates behaviour on permissions.

Two consumption patterns over ``RBACSession.check_permission``:

- ``guard_content`` renders content or a fallback. No side effects.
- ``RouteGuard`` protects a route. While the session loads it defers the
  check; once loaded it either allows, or notifies "Access Denied" and
  redirects to the default route.

Route guard states::

    LOADING ──session loaded──► CHECKING ──allowed──► ALLOWED
                                    │
                                    └──denied──► DENIED_REDIRECTING (terminal)

``PermissionDependency`` runs a fresh ``RouteGuard`` at route resolution
time; ``require_permission`` wraps it for ``dependencies=[...]``.
"""

import logging
from enum import Enum
from typing import Any, Optional, Union

from fastapi import Depends, Request, params

from talentdesk.api.deps import get_notifier, get_rbac_session
from talentdesk.core.config import get_settings
from talentdesk.core.rbac.permissions import AccessLevel, Resource
from talentdesk.core.rbac.session import RBACSession
from talentdesk.services.notifications import NotificationCenter

logger = logging.getLogger(__name__)

ACCESS_DENIED_TITLE = "Access Denied"
ACCESS_DENIED_PAGE = "You do not have permission to access this page"
ACCESS_DENIED_RESOURCE = "You do not have permission to access this resource"


def guard_content(
    session: RBACSession,
    resource: Union[str, Resource],
    children: Any,
    *,
    action: Union[str, AccessLevel] = AccessLevel.READ,
    fallback: Any = None,
) -> Any:
    """Return ``children`` if the session may perform ``action`` on ``resource``, else ``fallback``."""
    if session.check_permission(resource, action):
        return children
    return fallback


class RouteGuardState(str, Enum):
    LOADING = "loading"
    CHECKING = "checking"
    ALLOWED = "allowed"
    DENIED_REDIRECTING = "denied_redirecting"


class RouteGuard:
    """One mount of a protected route."""

    def __init__(
        self,
        session: RBACSession,
        resource: Union[str, Resource],
        action: Union[str, AccessLevel] = AccessLevel.READ,
        *,
        notifier: Optional[NotificationCenter] = None,
        default_route: Optional[str] = None,
        message: str = ACCESS_DENIED_PAGE,
    ):
        self.session = session
        self.resource = resource
        self.action = action
        self.notifier = notifier
        self.default_route = default_route or get_settings().default_route
        self.message = message
        self.redirect_to: Optional[str] = None
        self.state = RouteGuardState.LOADING if session.is_loading else RouteGuardState.CHECKING

    def evaluate(self) -> RouteGuardState:
        """Advance the state machine against the current session state."""
        if self.state is RouteGuardState.DENIED_REDIRECTING:
            return self.state

        if self.session.is_loading:
            self.state = RouteGuardState.LOADING
            return self.state

        self.state = RouteGuardState.CHECKING
        if self.session.check_permission(self.resource, self.action):
            self.state = RouteGuardState.ALLOWED
        else:
            self._deny()
        return self.state

    def _deny(self) -> None:
        self.state = RouteGuardState.DENIED_REDIRECTING
        self.redirect_to = self.default_route
        logger.info(f"Access denied to {self.resource} ({self.action}), redirecting to {self.redirect_to}")
        if self.notifier is not None:
            self.notifier.error(self.message, title=ACCESS_DENIED_TITLE)

    @property
    def allowed(self) -> bool:
        return self.state is RouteGuardState.ALLOWED


def use_permission(
    session: RBACSession,
    resource: Union[str, Resource],
    action: Union[str, AccessLevel] = AccessLevel.READ,
    redirect_on_failure: bool = True,
    *,
    notifier: Optional[NotificationCenter] = None,
) -> tuple[bool, Optional[RouteGuard]]:
    """
    Hook form of the route guard.

    Returns the permission outcome and, when redirecting is enabled, the
    evaluated guard so the caller can follow ``guard.redirect_to``. With
    ``redirect_on_failure=False`` it is a pure query.
    """
    allowed = session.check_permission(resource, action)
    if not redirect_on_failure:
        return allowed, None

    guard = RouteGuard(session, resource, action, notifier=notifier, message=ACCESS_DENIED_RESOURCE)
    guard.evaluate()
    return allowed, guard


class AccessDenied(Exception):
    """Raised by the route guard dependency; answered with a redirect."""

    def __init__(self, redirect_to: str, resource: str, action: str):
        super().__init__(f"Access denied: {resource}:{action}")
        self.redirect_to = redirect_to
        self.resource = resource
        self.action = action


class SessionLoading(Exception):
    """Raised while the session has not finished loading; answered with 503."""

    def __init__(self, retry_after: int):
        super().__init__("Session is loading")
        self.retry_after = retry_after


def _value(item: Union[str, Enum]) -> str:
    return item.value if isinstance(item, Enum) else item


class PermissionDependency:
    """
    FastAPI dependency for route protection.

    Usage:
        @router.get("/roles", dependencies=[Depends(PermissionDependency("roles"))])
        async def list_roles():
            ...

        # Hook mode: no redirect, the endpoint receives the boolean
        async def page(can_edit: bool = Depends(PermissionDependency("roles", "write", redirect_on_failure=False))):
            ...
    """

    def __init__(
        self,
        resource: Union[str, Resource],
        action: Union[str, AccessLevel] = AccessLevel.READ,
        *,
        redirect_on_failure: bool = True,
    ):
        self.resource = resource
        self.action = action
        self.redirect_on_failure = redirect_on_failure

    async def __call__(
        self,
        request: Request,
        session: RBACSession = Depends(get_rbac_session),
        notifier: NotificationCenter = Depends(get_notifier),
    ) -> bool:
        if not self.redirect_on_failure:
            return session.check_permission(self.resource, self.action)

        settings = getattr(request.app.state, "settings", None) or get_settings()
        guard = RouteGuard(
            session, self.resource, self.action,
            notifier=notifier, default_route=settings.default_route,
        )
        state = guard.evaluate()

        if state is RouteGuardState.LOADING:
            raise SessionLoading(settings.loading_retry_after)
        if state is RouteGuardState.DENIED_REDIRECTING:
            raise AccessDenied(guard.redirect_to, _value(self.resource), _value(self.action))
        return True


def require_permission(
    resource: Union[str, Resource],
    action: Union[str, AccessLevel] = AccessLevel.READ,
) -> params.Depends:
    """Route-level guard for ``dependencies=[...]`` on a route or router."""
    return Depends(PermissionDependency(resource, action))
