"""
Unit Tests for the authentication service
Tests for: register, login, logout, injected credential verifier
"""
import pytest

from eventqr.core.exceptions import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    MalformedCredentialError,
    StorageUnavailableError,
)
from eventqr.models.user import UserRole
from eventqr.schemas.auth import UserLogin, UserRegister
from eventqr.services.auth_service import AuthService, get_auth_service, verify_local_credentials
from eventqr.services.session_store import session_store
from eventqr.services.storage_service import StorageService, storage_service

TEST_PASSWORD = "testpassword123"  # matches the conftest user fixtures


@pytest.fixture
def auth_service() -> AuthService:
    return get_auth_service()


class TestRegister:
    async def test_register_creates_regular_user_and_session(self, db_session, auth_service):
        user, token = await auth_service.register(
            db_session, UserRegister(username="alice", email="alice@x.com", password="secret1")
        )

        assert user.role == UserRole.USER
        assert user.banned is False
        assert user.password != "secret1"
        assert await session_store.load(db_session, token) == user.id

    async def test_register_replaces_previous_session(self, db_session, auth_service, test_user):
        old = await session_store.create(db_session, test_user.id)

        user, token = await auth_service.register(
            db_session,
            UserRegister(username="alice", email="alice@x.com", password="secret1"),
            current_token=old,
        )

        assert token != old
        assert await session_store.load(db_session, old) is None

    async def test_duplicate_username(self, db_session, auth_service, test_user):
        with pytest.raises(DuplicateUsernameError):
            await auth_service.register(
                db_session, UserRegister(username=test_user.username, email="new@x.com", password="secret1")
            )
        assert len(await storage_service.list_users(db_session)) == 1

    async def test_duplicate_email(self, db_session, auth_service, test_user):
        with pytest.raises(DuplicateEmailError):
            await auth_service.register(
                db_session, UserRegister(username="brand-new", email=test_user.email, password="secret1")
            )


class TestLogin:
    async def test_login_success(self, db_session, auth_service, test_user):
        user, token = await auth_service.login(
            db_session, UserLogin(username=test_user.username, password=TEST_PASSWORD)
        )

        assert user.id == test_user.id
        assert await session_store.load(db_session, token) == test_user.id

    async def test_login_regenerates_session(self, db_session, auth_service, test_user):
        old = await session_store.create(db_session, test_user.id)

        _, token = await auth_service.login(
            db_session, UserLogin(username=test_user.username, password=TEST_PASSWORD), current_token=old
        )

        assert token != old
        assert await session_store.load(db_session, old) is None

    async def test_failures_are_indistinguishable(self, db_session, auth_service, test_user, banned_user):
        attempts = [
            UserLogin(username=test_user.username, password="wrong-password"),
            UserLogin(username="nobody-has-this-name", password=TEST_PASSWORD),
            UserLogin(username=banned_user.username, password=TEST_PASSWORD),
        ]
        bodies = []
        for credentials in attempts:
            with pytest.raises(InvalidCredentialsError) as exc_info:
                await auth_service.login(db_session, credentials)
            bodies.append(exc_info.value.to_dict())

        assert bodies[0] == bodies[1] == bodies[2]

    async def test_malformed_stored_credential(self, db_session, auth_service, test_user):
        await storage_service.update_user(db_session, test_user.id, {"password": "corrupted"})

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(db_session, UserLogin(username=test_user.username, password=TEST_PASSWORD))

    async def test_injected_verifier(self, db_session, test_user):
        calls = []

        async def always_accept(db, username, password):
            calls.append(username)
            return await storage_service.get_user_by_username(db, username)

        service = AuthService(storage_service, session_store, verify_credentials=always_accept)
        user, _ = await service.login(db_session, UserLogin(username=test_user.username, password="anything"))

        assert user.id == test_user.id
        assert calls == [test_user.username]

    async def test_default_verifier_uses_injected_storage(self, db_session, test_user):
        class RecordingStorage(StorageService):
            def __init__(self):
                super().__init__()
                self.lookups = []

            async def get_user_by_username(self, db, username):
                self.lookups.append(username)
                return await super().get_user_by_username(db, username)

        storage = RecordingStorage()
        service = AuthService(storage, session_store)
        user, _ = await service.login(db_session, UserLogin(username=test_user.username, password=TEST_PASSWORD))

        assert user.id == test_user.id
        assert storage.lookups == [test_user.username]

    async def test_verifier_errors_map_to_invalid_credentials(self, db_session):
        async def corrupt(db, username, password):
            raise MalformedCredentialError()

        service = AuthService(storage_service, session_store, verify_credentials=corrupt)
        with pytest.raises(InvalidCredentialsError):
            await service.login(db_session, UserLogin(username="x", password="y"))


class TestVerifyLocalCredentials:
    async def test_match(self, db_session, test_user):
        user = await verify_local_credentials(db_session, test_user.username, TEST_PASSWORD)
        assert user.id == test_user.id

    async def test_mismatch(self, db_session, test_user):
        assert await verify_local_credentials(db_session, test_user.username, "nope") is None

    async def test_unknown_user(self, db_session):
        assert await verify_local_credentials(db_session, "ghost", "whatever") is None

    async def test_banned_user_is_returned(self, db_session, banned_user):
        """Ban policy belongs to the caller"""
        user = await verify_local_credentials(db_session, banned_user.username, TEST_PASSWORD)
        assert user.banned is True


class TestLogout:
    async def test_logout_destroys_session(self, db_session, auth_service, test_user):
        token = await session_store.create(db_session, test_user.id)
        await auth_service.logout(db_session, token)

        assert await session_store.load(db_session, token) is None

    async def test_logout_is_idempotent(self, db_session, auth_service):
        await auth_service.logout(db_session, None)
        await auth_service.logout(db_session, "never-issued")

    async def test_logout_survives_storage_outage(self, db_session):
        class DownSessions:
            async def destroy(self, db, token):
                raise StorageUnavailableError("session_destroy")

        service = AuthService(storage_service, DownSessions())
        await service.logout(db_session, "whatever")
