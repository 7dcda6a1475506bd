from typing import Generator

from fastapi import HTTPException, Request, status
from sqlalchemy.orm import Session

from talentdesk.core.rbac.session import RBACSession
from talentdesk.services.notifications import NotificationCenter
from talentdesk.services.role_store import RoleStore, UserStore


def get_db(request: Request) -> Generator:
    """Database session dependency."""
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_rbac_session(request: Request) -> RBACSession:
    """The process-wide RBAC session created at startup."""
    session = getattr(request.app.state, "rbac_session", None)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="RBAC session not configured",
        )
    return session


def get_notifier(request: Request) -> NotificationCenter:
    return request.app.state.notifier


def get_role_store(request: Request) -> RoleStore:
    return request.app.state.role_store


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store
