"""
Authentication Service - registration, login and logout

A session moves Anonymous -> Authenticated through register/login (always
on a freshly issued session id) and back to Anonymous through logout.
Ban enforcement on live sessions happens in the request dependencies.

Credential checking is a plain coroutine injected at construction time;
``verify_local_credentials`` (username + password against the stored
scrypt credential) is the only one in use.
"""

import functools

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Awaitable, Callable, Optional, Tuple

from eventqr.core.exceptions import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    MalformedCredentialError,
    StorageUnavailableError,
)
from eventqr.core.logging_config import logger
from eventqr.core.security import hash_password_async, verify_dummy_password_async, verify_password_async
from eventqr.models.user import User, UserRole
from eventqr.schemas.auth import UserLogin, UserRegister
from eventqr.services.session_store import SessionStore, session_store
from eventqr.services.storage_service import StorageService, storage_service

CredentialVerifier = Callable[[AsyncSession, str, str], Awaitable[Optional[User]]]


async def verify_local_credentials(
    db: AsyncSession,
    username: str,
    password: str,
    storage: Optional[StorageService] = None,
) -> Optional[User]:
    """
    Return the user whose stored credential matches, else None.

    An unknown username still costs one scrypt derivation so response
    timing does not reveal which usernames exist. Banned users are returned
    like any other; the caller decides what a ban means.
    """
    storage = storage or storage_service
    user = await storage.get_user_by_username(db, username)
    if user is None:
        await verify_dummy_password_async(password)
        return None

    if not await verify_password_async(password, user.password):
        return None
    return user


class AuthService:
    """Registration, login and logout on top of storage and the session store"""

    def __init__(
        self,
        storage: StorageService,
        sessions: SessionStore,
        verify_credentials: Optional[CredentialVerifier] = None,
    ):
        self.storage = storage
        self.sessions = sessions
        # Default: local username/password check against this instance's storage
        self.verify_credentials = verify_credentials or functools.partial(
            verify_local_credentials, storage=storage
        )

    async def register(
        self,
        db: AsyncSession,
        user_data: UserRegister,
        current_token: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Tuple[User, str]:
        """
        Create a regular account and sign it in on a new session.

        Role and ban state are fixed here (user, not banned); the request
        schema does not even carry them.

        Returns:
            (user, session token)
        """
        if await self.storage.get_user_by_username(db, user_data.username) is not None:
            logger.log_auth_event("register", success=False, username=user_data.username,
                                  reason="username taken")
            raise DuplicateUsernameError()

        if await self.storage.get_user_by_email(db, user_data.email) is not None:
            logger.log_auth_event("register", success=False, username=user_data.username,
                                  reason="email taken")
            raise DuplicateEmailError()

        password_hash = await hash_password_async(user_data.password)
        try:
            user = await self.storage.create_user(
                db,
                username=user_data.username,
                email=user_data.email,
                password_hash=password_hash,
                role=UserRole.USER,
                banned=False,
            )
        except (DuplicateUsernameError, DuplicateEmailError) as e:
            logger.log_auth_event("register", success=False, username=user_data.username,
                                  reason=f"lost insert race: {e.code}")
            raise

        token = await self.sessions.regenerate(
            db, current_token, user_id=user.id, user_agent=user_agent, ip_address=ip_address
        )
        logger.log_auth_event("register", success=True, username=user.username, account_id=user.id)
        return user, token

    async def login(
        self,
        db: AsyncSession,
        credentials: UserLogin,
        current_token: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Tuple[User, str]:
        """
        Verify credentials and bind a new session to the user.

        Unknown username, wrong password, banned account and an unreadable
        stored credential all raise the same InvalidCredentialsError. Only
        the log records which one it was.
        """
        try:
            user = await self.verify_credentials(db, credentials.username, credentials.password)
        except MalformedCredentialError:
            logger.error(
                f"Stored credential for '{credentials.username}' is malformed",
                extra={"event_type": "data_integrity", "auth_username": credentials.username},
            )
            logger.log_auth_event("login", success=False, username=credentials.username,
                                  reason="malformed stored credential")
            raise InvalidCredentialsError()

        if user is None:
            logger.log_auth_event("login", success=False, username=credentials.username,
                                  reason="unknown user or wrong password")
            raise InvalidCredentialsError()

        if user.banned:
            logger.log_auth_event("login", success=False, username=user.username,
                                  reason="account banned", account_id=user.id)
            raise InvalidCredentialsError()

        token = await self.sessions.regenerate(
            db, current_token, user_id=user.id, user_agent=user_agent, ip_address=ip_address
        )
        logger.log_auth_event("login", success=True, username=user.username, account_id=user.id)
        return user, token

    async def logout(self, db: AsyncSession, token: Optional[str]) -> None:
        """Destroy the session if any. Never fails; the cookie is cleared regardless."""
        try:
            await self.sessions.destroy(db, token)
        except StorageUnavailableError:
            logger.warning("Logout could not reach the session store; clearing cookie only")
        logger.log_auth_event("logout", success=True)


def get_auth_service() -> AuthService:
    """FastAPI dependency. Override in tests to swap the credential verifier."""
    return AuthService(storage_service, session_store)
