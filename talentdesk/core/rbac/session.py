"""RBAC session context.

Holds the signed-in user and their resolved role for the running service.
State is an immutable ``SessionState`` snapshot; the only way to change it
is to dispatch an event through ``reduce``, and only ``RBACSession`` itself
dispatches. Guards and endpoints read through the selectors.

Lifecycle::

    loading ──initialize()──► loaded (user + role)
       │                         │
       └──── failure ──► loaded (no user, no role: deny all)
                                 │
                     refresh_user_role() re-fetches the role only
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Union

from talentdesk.core.identity import UserIdProvider
from talentdesk.services.notifications import NotificationCenter
from talentdesk.services.role_store import RoleStore

from .checker import PermissionChecker, check_permission
from .models import Role, User
from .permissions import AccessLevel, Resource

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load user information"


@dataclass(frozen=True)
class SessionState:
    current_user: Optional[User] = None
    user_role: Optional[Role] = None
    is_loading: bool = True


class SessionEventType(str, Enum):
    LOAD_STARTED = "load_started"
    USER_LOADED = "user_loaded"
    LOAD_FAILED = "load_failed"
    ROLE_REFRESHED = "role_refreshed"
    LOAD_FINISHED = "load_finished"


@dataclass(frozen=True)
class SessionEvent:
    type: SessionEventType
    user: Optional[User] = None
    role: Optional[Role] = None


def reduce(state: SessionState, event: SessionEvent) -> SessionState:
    """Pure transition function for session state."""
    if event.type is SessionEventType.LOAD_STARTED:
        return replace(state, is_loading=True)
    if event.type is SessionEventType.USER_LOADED:
        return replace(state, current_user=event.user, user_role=event.role)
    if event.type is SessionEventType.LOAD_FAILED:
        return replace(state, current_user=None, user_role=None)
    if event.type is SessionEventType.ROLE_REFRESHED:
        return replace(state, user_role=event.role)
    if event.type is SessionEventType.LOAD_FINISHED:
        return replace(state, is_loading=False)
    raise ValueError(f"Unknown session event: {event.type}")


Listener = Callable[[SessionState], None]


class RBACSession:
    """
    Single owner of the session state.

    Overlapping ``refresh_user_role`` calls are serialized; the refresh that
    finishes last decides the role.
    """

    def __init__(
        self,
        store: RoleStore,
        identity: UserIdProvider,
        notifier: NotificationCenter,
    ):
        self._store = store
        self._identity = identity
        self._notifier = notifier
        self._state = SessionState()
        self._listeners: List[Listener] = []
        self._refresh_lock = asyncio.Lock()

    # Selectors

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_user(self) -> Optional[User]:
        return self._state.current_user

    @property
    def user_role(self) -> Optional[Role]:
        return self._state.user_role

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    def check_permission(
        self,
        resource: Union[str, Resource],
        action: Union[str, AccessLevel] = AccessLevel.READ,
    ) -> bool:
        role = self._state.user_role
        return check_permission(role.permissions if role else None, resource, action)

    def checker(self) -> PermissionChecker:
        role = self._state.user_role
        return PermissionChecker(role.permissions if role else None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback run after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, event: SessionEvent) -> None:
        self._state = reduce(self._state, event)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                # A failing listener must not stall the transition
                logger.exception(f"Session listener failed on {event.type.value}")

    # Lifecycle

    async def initialize(self) -> None:
        """Resolve the current user and role. Never raises; failures leave the session empty."""
        self._dispatch(SessionEvent(SessionEventType.LOAD_STARTED))
        try:
            user_id = await self._identity.current_user_id()
            result = await self._store.get_user_with_role(user_id)
            if result:
                self._dispatch(SessionEvent(
                    SessionEventType.USER_LOADED, user=result.user, role=result.role,
                ))
                role_name = result.role.name if result.role else "no role"
                logger.info(f"Session loaded for {result.user.username} ({role_name})")
            else:
                self._dispatch(SessionEvent(SessionEventType.LOAD_FAILED))
                self._notifier.error(LOAD_FAILED_MESSAGE)
        except Exception:
            logger.exception("Error loading user")
            self._dispatch(SessionEvent(SessionEventType.LOAD_FAILED))
            self._notifier.error(LOAD_FAILED_MESSAGE)
        finally:
            self._dispatch(SessionEvent(SessionEventType.LOAD_FINISHED))

    async def refresh_user_role(self) -> None:
        """Re-fetch the role of the current user. Failures keep the previous role."""
        if self._state.current_user is None:
            return

        async with self._refresh_lock:
            user = self._state.current_user
            if user is None:
                return
            self._dispatch(SessionEvent(SessionEventType.LOAD_STARTED))
            try:
                result = await self._store.get_user_with_role(user.id)
                if result:
                    self._dispatch(SessionEvent(SessionEventType.ROLE_REFRESHED, role=result.role))
                else:
                    logger.warning(f"Role refresh for {user.id} returned nothing, keeping previous role")
            except Exception:
                logger.exception("Error refreshing user role")
            finally:
                self._dispatch(SessionEvent(SessionEventType.LOAD_FINISHED))
