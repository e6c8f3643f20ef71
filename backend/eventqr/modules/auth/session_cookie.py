from typing import Optional

from fastapi import Request, Response

from eventqr.core.config import settings


def get_session_token(request: Request) -> Optional[str]:
    """Opaque session id from the request cookie, if any"""
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_SECONDS,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


def client_info(request: Request) -> dict:
    """User agent and address stored alongside a new session"""
    return {
        "user_agent": request.headers.get("user-agent"),
        "ip_address": request.client.host if request.client else None,
    }
