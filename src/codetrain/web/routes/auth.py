"""Authentication endpoints: register, login, logout, current user."""

import asyncio

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status

from codetrain.config.app_config import AppConfig
from codetrain.core.auth import (
    DUMMY_PASSWORD_HASH,
    RegistrationError,
    hash_password,
    validate_registration,
    verify_password,
)
from codetrain.db.database import Database
from codetrain.db.users_repository import (
    DuplicateUserError,
    get_user_by_username,
    insert_user,
)
from codetrain.web.dependencies import (
    clear_session_cookie,
    get_config,
    get_database,
    get_session_id,
    get_session_manager,
    require_session,
    set_session_cookie,
)
from codetrain.web.schemas import (
    AuthResponse,
    CurrentUserResponse,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from codetrain.web.sessions import Session, SessionManager

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)

INVALID_CREDENTIALS = "Invalid username or password"


@router.post("/register", response_model=AuthResponse)
async def register(
    payload: RegisterRequest,
    response: Response,
    old_session_id: str | None = Depends(get_session_id),
    db: Database = Depends(get_database),
    config: AppConfig = Depends(get_config),
    manager: SessionManager = Depends(get_session_manager),
) -> AuthResponse:
    """Register a new user and log them in."""
    username = payload.username.strip()
    email = payload.email.strip()

    logger.info("registration_attempt", username=username)

    try:
        validate_registration(username, email, payload.password)
    except RegistrationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    password_hash = await asyncio.to_thread(hash_password, payload.password)

    try:
        user = insert_user(db, username, email, password_hash)
    except DuplicateUserError as e:
        logger.info("registration_duplicate", username=username)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    session = await manager.regenerate(old_session_id, user.id, user.username)
    set_session_cookie(response, config, manager, session.session_id)

    logger.info("user_registered", user_id=user.id, username=user.username)
    return AuthResponse(
        message="Registration successful!",
        user=UserResponse(**user.public_dict()),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    old_session_id: str | None = Depends(get_session_id),
    db: Database = Depends(get_database),
    config: AppConfig = Depends(get_config),
    manager: SessionManager = Depends(get_session_manager),
) -> AuthResponse:
    """Log in with username and password.

    Unknown users and wrong passwords get the same 401 message.
    """
    username = payload.username.strip()

    logger.info("login_attempt", username=username)

    if not username or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username and password are required",
        )

    user = get_user_by_username(db, username)
    password_hash = user.password_hash if user is not None else DUMMY_PASSWORD_HASH
    password_ok = await asyncio.to_thread(verify_password, password_hash, payload.password)
    if user is None or not password_ok:
        logger.info("login_failed", username=username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
        )

    session = await manager.regenerate(old_session_id, user.id, user.username)
    set_session_cookie(response, config, manager, session.session_id)

    logger.info("user_logged_in", user_id=user.id, username=user.username)
    return AuthResponse(
        message="Login successful!",
        user=UserResponse(**user.public_dict()),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    session_id: str | None = Depends(get_session_id),
    config: AppConfig = Depends(get_config),
    manager: SessionManager = Depends(get_session_manager),
) -> MessageResponse:
    """Destroy the session and clear the cookie."""
    if session_id is not None:
        await manager.end_session(session_id)
    clear_session_cookie(response, config)
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=CurrentUserResponse, response_model_exclude_none=True)
async def current_user(session: Session = Depends(require_session)) -> CurrentUserResponse:
    """Return the authenticated identity."""
    return CurrentUserResponse(
        user=UserResponse(id=session.user_id, username=session.username),
    )
