"""FastAPI dependencies for request-scoped access to app resources.

Process-lifetime resources (config, database, catalog, session manager)
live on app.state; handlers receive them through these dependencies.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, HTTPException, Request, Response, status

from codetrain.config.app_config import AppConfig
from codetrain.core.catalog import ModuleCatalog
from codetrain.db.database import Database
from codetrain.db.users_repository import get_user_by_id
from codetrain.web.sessions import Session, SessionManager

logger = structlog.get_logger(__name__)


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_catalog(request: Request) -> ModuleCatalog:
    return request.app.state.catalog


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_session_id(
    request: Request,
    config: AppConfig = Depends(get_config),
    manager: SessionManager = Depends(get_session_manager),
) -> str | None:
    """Session id from the signed cookie, if present and untampered."""
    cookie_value = request.cookies.get(config.cookie_name)
    if not cookie_value:
        return None
    return manager.unsign(cookie_value)


async def get_optional_session(
    session_id: str | None = Depends(get_session_id),
    manager: SessionManager = Depends(get_session_manager),
) -> Session | None:
    """Resolve the live session, refreshing its expiry."""
    if session_id is None:
        return None
    return await manager.get_session(session_id)


async def require_session(
    response: Response,
    session: Session | None = Depends(get_optional_session),
    config: AppConfig = Depends(get_config),
    manager: SessionManager = Depends(get_session_manager),
    db: Database = Depends(get_database),
) -> Session:
    """Require an authenticated session; re-issue the cookie to roll its expiry.

    Sessions whose user has since been deleted are ended.
    """
    if session is not None and get_user_by_id(db, session.user_id) is None:
        logger.info("session_user_missing", user_id=session.user_id)
        await manager.end_session(session.session_id)
        session = None

    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    set_session_cookie(response, config, manager, session.session_id)
    return session


def set_session_cookie(
    response: Response, config: AppConfig, manager: SessionManager, session_id: str
) -> None:
    response.set_cookie(
        key=config.cookie_name,
        value=manager.sign(session_id),
        max_age=config.session_ttl_seconds,
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.cookie_same_site,
        domain=config.cookie_domain,
        path="/",
    )


def clear_session_cookie(response: Response, config: AppConfig) -> None:
    response.delete_cookie(
        key=config.cookie_name,
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.cookie_same_site,
        domain=config.cookie_domain,
        path="/",
    )
