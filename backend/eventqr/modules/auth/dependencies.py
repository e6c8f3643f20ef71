from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from eventqr.core.database import get_db
from eventqr.core.exceptions import ForbiddenError, InvalidOperationError, UnauthorizedError
from eventqr.core.logging_config import logger, set_user_id
from eventqr.models.user import User, UserRole
from eventqr.modules.auth.session_cookie import get_session_token
from eventqr.services.session_store import session_store
from eventqr.services.storage_service import storage_service


async def require_auth(
    request: Request,
    token: Optional[str] = Depends(get_session_token),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Get the user bound to the request's session.

    Runs on every gated request. A banned user's session is destroyed on
    the spot and the request is refused, even though the session itself
    was valid when issued.
    """
    user_id = await session_store.load(db, token)
    if user_id is None:
        raise UnauthorizedError()

    user = await storage_service.get_user(db, user_id)
    if user is None:
        await session_store.destroy(db, token)
        raise UnauthorizedError()

    if user.banned:
        await session_store.destroy(db, token)
        # Picked up by the error handler, which then clears the cookie
        request.state.session_revoked = True
        logger.log_auth_event("session_revoked", success=False, username=user.username,
                              reason="account banned", account_id=user.id)
        raise ForbiddenError()

    set_user_id(str(user.id))
    request.state.user = user
    return user


async def require_admin(
    current_user: User = Depends(require_auth)
) -> User:
    """Get current user and verify admin role"""
    if current_user.role != UserRole.ADMIN:
        raise ForbiddenError("Admin access required")
    return current_user


def ensure_not_self(actor: User, target_user_id: str, action: str) -> None:
    """Admins may not ban, unban or delete their own account"""
    if str(actor.id) == str(target_user_id):
        raise InvalidOperationError(f"Cannot {action} yourself")


def ensure_owner_or_admin(actor: User, owner_id: str) -> None:
    if actor.role != UserRole.ADMIN and str(actor.id) != str(owner_id):
        raise ForbiddenError()
