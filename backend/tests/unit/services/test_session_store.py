"""
Unit Tests for the session store
Tests for: create/load/destroy, regeneration, fixed expiry, sweeping
"""
from datetime import timedelta

import pytest
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import async_sessionmaker

from eventqr.core.exceptions import UnauthorizedError
from eventqr.core.security import hash_session_token
from eventqr.core.types import utcnow
from eventqr.models.session import Session
from eventqr.services.session_store import SessionStore, SessionSweeper, session_store


async def _expire(db_session, token):
    await db_session.execute(
        update(Session)
        .where(Session.id == hash_session_token(token))
        .values(expires_at=utcnow() - timedelta(seconds=1))
    )
    await db_session.commit()


class TestSessionLifecycle:
    async def test_create_and_load(self, db_session, test_user):
        token = await session_store.create(db_session, test_user.id)

        assert await session_store.load(db_session, token) == test_user.id

    async def test_raw_token_is_not_stored(self, db_session, test_user):
        token = await session_store.create(db_session, test_user.id)

        result = await db_session.execute(select(Session.id))
        stored = [row[0] for row in result.all()]
        assert token not in stored
        assert hash_session_token(token) in stored

    async def test_load_unknown_token(self, db_session):
        assert await session_store.load(db_session, "not-a-session") is None
        assert await session_store.load(db_session, None) is None

    async def test_destroy(self, db_session, test_user):
        token = await session_store.create(db_session, test_user.id)
        await session_store.destroy(db_session, token)

        assert await session_store.load(db_session, token) is None

    async def test_destroy_unknown_token_is_noop(self, db_session):
        await session_store.destroy(db_session, "never-issued")
        await session_store.destroy(db_session, None)

    async def test_expiry_is_fixed_from_issuance(self, db_session, test_user):
        store = SessionStore(ttl_seconds=3600)
        token = await store.create(db_session, test_user.id)

        row = (await db_session.execute(
            select(Session).where(Session.id == hash_session_token(token))
        )).scalar_one()
        lifetime = row.expires_at - row.created_at
        assert lifetime == timedelta(seconds=3600)

        # Loading does not push the expiry out
        await store.load(db_session, token)
        await db_session.refresh(row)
        assert row.expires_at - row.created_at == timedelta(seconds=3600)

    async def test_expired_session_not_found(self, db_session, test_user):
        token = await session_store.create(db_session, test_user.id)
        await _expire(db_session, token)

        assert await session_store.load(db_session, token) is None


class TestRegenerate:
    async def test_regenerate_issues_new_token_and_kills_old(self, db_session, test_user):
        old = await session_store.create(db_session, test_user.id)
        new = await session_store.regenerate(db_session, old)

        assert new != old
        assert await session_store.load(db_session, old) is None
        assert await session_store.load(db_session, new) == test_user.id

    async def test_regenerate_binds_given_user(self, db_session, test_user, other_user):
        old = await session_store.create(db_session, other_user.id)
        new = await session_store.regenerate(db_session, old, user_id=test_user.id)

        assert await session_store.load(db_session, old) is None
        assert await session_store.load(db_session, new) == test_user.id

    async def test_regenerate_without_previous_session(self, db_session, test_user):
        token = await session_store.regenerate(db_session, None, user_id=test_user.id)
        assert await session_store.load(db_session, token) == test_user.id

    async def test_regenerate_unknown_session_without_user(self, db_session):
        with pytest.raises(UnauthorizedError):
            await session_store.regenerate(db_session, "never-issued")

    async def test_regenerate_expired_session_without_user(self, db_session, test_user):
        token = await session_store.create(db_session, test_user.id)
        await _expire(db_session, token)

        with pytest.raises(UnauthorizedError):
            await session_store.regenerate(db_session, token)


class TestSweeper:
    async def test_purge_expired_only(self, db_session, test_user):
        live = await session_store.create(db_session, test_user.id)
        stale = await session_store.create(db_session, test_user.id)
        await _expire(db_session, stale)

        removed = await session_store.purge_expired(db_session)

        assert removed == 1
        assert await session_store.load(db_session, live) == test_user.id

    async def test_sweep_once(self, db_session, test_user):
        stale = await session_store.create(db_session, test_user.id)
        await _expire(db_session, stale)
        factory = async_sessionmaker(db_session.bind, expire_on_commit=False)

        sweeper = SessionSweeper(session_store, session_factory=factory, interval_seconds=60)

        assert await sweeper.sweep_once() == 1
        assert await sweeper.sweep_once() == 0

    async def test_start_and_stop(self, db_session):
        factory = async_sessionmaker(db_session.bind, expire_on_commit=False)
        sweeper = SessionSweeper(session_store, session_factory=factory, interval_seconds=3600)

        sweeper.start()
        assert sweeper.running is True
        await sweeper.stop()
        assert sweeper.running is False

    async def test_disabled_when_interval_zero(self):
        sweeper = SessionSweeper(session_store, interval_seconds=0)
        sweeper.start()
        assert sweeper.running is False
        await sweeper.stop()
