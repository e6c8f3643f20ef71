from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from eventqr.core.database import get_db
from eventqr.core.rate_limiter import login_rate_limit, register_rate_limit
from eventqr.models.user import User
from eventqr.modules.auth.dependencies import require_auth
from eventqr.modules.auth.session_cookie import (
    clear_session_cookie,
    client_info,
    get_session_token,
    set_session_cookie,
)
from eventqr.schemas.auth import UserLogin, UserRegister, UserResponse
from eventqr.schemas.event import EventResponse
from eventqr.schemas.stats import MessageResponse
from eventqr.services.auth_service import AuthService, get_auth_service
from eventqr.services.storage_service import storage_service

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@register_rate_limit()
async def register(
    request: Request,
    response: Response,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Create a regular user account and sign it in.

    Any role/banned fields in the body are ignored: new accounts are always
    role "user" and not banned.
    """
    user, token = await auth_service.register(
        db, user_data, current_token=get_session_token(request), **client_info(request)
    )
    set_session_cookie(response, token)
    return user


@router.post("/login", response_model=UserResponse)
@login_rate_limit()
async def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Sign in with username and password. Issues a new session id on success."""
    user, token = await auth_service.login(
        db, credentials, current_token=get_session_token(request), **client_info(request)
    )
    set_session_cookie(response, token)
    return user


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    """End the current session. Succeeds with or without one."""
    await auth_service.logout(db, get_session_token(request))
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(require_auth)):
    """Get current user information"""
    return current_user


@router.get("/user/events", response_model=List[EventResponse])
async def list_my_events(
    current_user: User = Depends(require_auth),
    db: AsyncSession = Depends(get_db)
):
    """Events owned by the current user, newest first"""
    return await storage_service.get_events_by_user(db, current_user.id)
