"""
Server-side session store backed by the ``sessions`` table.

The client cookie carries a random token; rows are keyed by its HMAC
(see ``hash_session_token``) so a leaked table does not yield usable
cookies. Lifetime is fixed at issuance; using a session never extends it.
"""
import asyncio
from datetime import timedelta
from typing import Callable, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventqr.core.config import settings
from eventqr.core.database import get_session_local
from eventqr.core.exceptions import UnauthorizedError
from eventqr.core.logging_config import logger
from eventqr.core.security import generate_session_token, hash_session_token
from eventqr.core.types import utcnow
from eventqr.models.session import Session
from eventqr.services.storage_errors import translate_storage_errors


class SessionStore:
    """create / load / destroy / regenerate over persisted session rows"""

    def __init__(self, ttl_seconds: Optional[int] = None):
        self.ttl_seconds = ttl_seconds or settings.SESSION_TTL_SECONDS

    def _new_session(
        self,
        user_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Tuple[str, Session]:
        token = generate_session_token()
        now = utcnow()
        row = Session(
            id=hash_session_token(token),
            user_id=user_id,
            created_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
            user_agent=user_agent[:512] if user_agent else None,
            ip_address=ip_address,
        )
        return token, row

    async def _get_row(self, db: AsyncSession, token: str) -> Optional[Session]:
        result = await db.execute(
            select(Session)
            .where(Session.id == hash_session_token(token))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @translate_storage_errors("session_create")
    async def create(
        self,
        db: AsyncSession,
        user_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> str:
        """Persist a new session for user_id and return the client token"""
        token, row = self._new_session(user_id, user_agent, ip_address)
        db.add(row)
        await db.commit()
        return token

    @translate_storage_errors("session_load")
    async def load(self, db: AsyncSession, token: Optional[str]) -> Optional[str]:
        """Return the bound user id, or None for an unknown or expired token"""
        if not token:
            return None
        row = await self._get_row(db, token)
        if row is None or row.is_expired():
            return None
        return row.user_id

    @translate_storage_errors("session_destroy")
    async def destroy(self, db: AsyncSession, token: Optional[str]) -> None:
        """Delete the session if it exists. Unknown tokens are ignored."""
        if not token:
            return
        await db.execute(delete(Session).where(Session.id == hash_session_token(token)))
        await db.commit()

    @translate_storage_errors("session_regenerate")
    async def regenerate(
        self,
        db: AsyncSession,
        old_token: Optional[str],
        user_id: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> str:
        """
        Invalidate old_token and issue a fresh token in one transaction.

        Without user_id the new session is bound to the old session's user,
        which then has to be valid. With user_id (login, registration) the
        old token may be absent, foreign or expired; it is dropped either way.
        """
        if user_id is None:
            row = await self._get_row(db, old_token) if old_token else None
            if row is None or row.is_expired():
                raise UnauthorizedError()
            user_id = row.user_id

        if old_token:
            await db.execute(delete(Session).where(Session.id == hash_session_token(old_token)))

        token, new_row = self._new_session(user_id, user_agent, ip_address)
        db.add(new_row)
        await db.commit()
        return token

    @translate_storage_errors("session_purge")
    async def purge_expired(self, db: AsyncSession) -> int:
        """Delete expired rows. Returns how many were removed."""
        result = await db.execute(delete(Session).where(Session.expires_at <= utcnow()))
        await db.commit()
        return result.rowcount or 0


class SessionSweeper:
    """Background task that periodically purges expired session rows"""

    def __init__(
        self,
        store: SessionStore,
        session_factory: Optional[Callable[[], AsyncSession]] = None,
        interval_seconds: Optional[int] = None,
    ):
        self.store = store
        self._session_factory = session_factory
        self.interval_seconds = (
            settings.SESSION_CLEANUP_INTERVAL_SECONDS if interval_seconds is None else interval_seconds
        )
        self._task: Optional[asyncio.Task] = None

    def _open_session(self) -> AsyncSession:
        if self._session_factory is None:
            self._session_factory = get_session_local()
        return self._session_factory()

    async def sweep_once(self) -> int:
        async with self._open_session() as db:
            removed = await self.store.purge_expired(db)
        if removed:
            logger.info(f"Purged {removed} expired sessions")
        return removed

    def start(self) -> None:
        """Start background cleanup task"""
        if self.interval_seconds <= 0:
            logger.info("Session sweeper disabled")
            return

        async def cleanup_loop():
            while True:
                await asyncio.sleep(self.interval_seconds)
                try:
                    await self.sweep_once()
                except Exception as e:
                    logger.error(f"Session sweep error: {e}")

        self._task = asyncio.create_task(cleanup_loop())
        logger.info("Started session cleanup background task")

    async def stop(self) -> None:
        """Stop background cleanup task"""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()


# Singleton instance
session_store = SessionStore()
