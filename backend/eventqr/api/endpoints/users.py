"""
Admin user management: list, ban, unban, delete.

Every route requires an admin session. An admin can never target their own
account here, whatever the request looks like.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from eventqr.core.database import get_db
from eventqr.core.exceptions import UserNotFoundError
from eventqr.core.logging_config import logger
from eventqr.models.user import User
from eventqr.modules.auth.dependencies import ensure_not_self, require_admin
from eventqr.schemas.auth import UserResponse
from eventqr.services.storage_service import storage_service

router = APIRouter()


def log_admin_action(admin: User, action: str, target_id: str) -> None:
    logger.info(
        f"[Admin] {admin.username} {action} user {target_id}",
        extra={
            "event_type": "admin_action",
            "admin_action": action,
            "admin_id": admin.id,
            "target_user_id": target_id,
        }
    )


@router.get("", response_model=List[UserResponse])
async def list_users(
    current_admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All users, newest first, sanitized"""
    return await storage_service.list_users(db)


@router.patch("/{user_id}/ban", response_model=UserResponse)
async def ban_user(
    user_id: str,
    current_admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Ban a user.

    Existing sessions of the banned user are not touched here; they are
    revoked the next time they are presented.
    """
    ensure_not_self(current_admin, user_id, "ban")

    user = await storage_service.update_user(db, user_id, {"banned": True})
    if user is None:
        raise UserNotFoundError(user_id)

    log_admin_action(current_admin, "banned", user_id)
    return user


@router.patch("/{user_id}/unban", response_model=UserResponse)
async def unban_user(
    user_id: str,
    current_admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Lift a ban"""
    ensure_not_self(current_admin, user_id, "unban")

    user = await storage_service.update_user(db, user_id, {"banned": False})
    if user is None:
        raise UserNotFoundError(user_id)

    log_admin_action(current_admin, "unbanned", user_id)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    current_admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a user together with their sessions and events"""
    ensure_not_self(current_admin, user_id, "delete")

    if not await storage_service.delete_user(db, user_id):
        raise UserNotFoundError(user_id)

    log_admin_action(current_admin, "deleted", user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
