import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from talentdesk import __version__
from talentdesk.api.deps import get_rbac_session
from talentdesk.api.guards import AccessDenied, SessionLoading
from talentdesk.api.navigation import navigation_items
from talentdesk.api.routers import health, notifications, roles, session, users
from talentdesk.api.schemas.common import LoadingResponse
from talentdesk.common.logger import setup_logger
from talentdesk.core.config import Settings, get_settings
from talentdesk.core.identity import FixedUserIdProvider, TokenUserIdProvider, UserIdProvider
from talentdesk.core.rbac.session import RBACSession
from talentdesk.db.base import Base
from talentdesk.db.seed import seed_database
from talentdesk.services.notifications import NotificationCenter
from talentdesk.services.role_store import SqlRoleStore, SqlUserStore

logger = logging.getLogger(__name__)


def _default_identity(settings: Settings) -> UserIdProvider:
    if settings.session_token:
        return TokenUserIdProvider(settings.session_token)
    return FixedUserIdProvider(settings.current_user_id)


def create_app(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[Engine] = None,
    session_factory: Optional[Callable[[], Session]] = None,
    identity: Optional[UserIdProvider] = None,
) -> FastAPI:
    """Build the application with its process-wide session context."""
    settings = settings or get_settings()

    if engine is None or session_factory is None:
        from talentdesk.db.session import SessionLocal, engine as default_engine
        engine = engine or default_engine
        session_factory = session_factory or SessionLocal

    setup_logger(
        "talentdesk",
        level=settings.log_level,
        log_dir=settings.log_dir if settings.log_to_file else None,
    )

    notifier = NotificationCenter()
    role_store = SqlRoleStore(session_factory, notifier)
    user_store = SqlUserStore(session_factory, notifier)
    rbac_session = RBACSession(role_store, identity or _default_identity(settings), notifier)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.create_tables:
            Base.metadata.create_all(bind=engine)
        if settings.seed_defaults:
            with session_factory() as db:
                seed_database(db, settings.current_user_id)
        await rbac_session.initialize()
        yield

    app = FastAPI(
        title=settings.app_name,
        description="HR and recruitment back office",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.notifier = notifier
    app.state.role_store = role_store
    app.state.user_store = user_store
    app.state.rbac_session = rbac_session

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AccessDenied)
    async def access_denied_handler(request: Request, exc: AccessDenied):
        return RedirectResponse(url=exc.redirect_to, status_code=303)

    @app.exception_handler(SessionLoading)
    async def session_loading_handler(request: Request, exc: SessionLoading):
        return JSONResponse(
            status_code=503,
            content=LoadingResponse(retry_after=exc.retry_after).model_dump(),
            headers={"Retry-After": str(exc.retry_after)},
        )

    app.include_router(health.router)
    app.include_router(roles.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(session.router, prefix="/api")
    app.include_router(notifications.router, prefix="/api")

    @app.get(settings.default_route)
    async def root(request: Request):
        """Default route: the dashboard, with the navigation the current role may see."""
        current = get_rbac_session(request)
        return {
            "name": settings.app_name,
            "version": __version__,
            "is_loading": current.is_loading,
            "navigation": navigation_items(current),
        }

    return app


app = create_app()
