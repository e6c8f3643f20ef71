"""
Unit Tests for Security Module
Tests for: password hashing, constant-time verification, session tokens
"""
import pytest

from eventqr.core.exceptions import MalformedCredentialError
from eventqr.core.security import (
    CREDENTIAL_SEPARATOR,
    SALT_BYTES,
    SCRYPT_KEY_LENGTH,
    dummy_password_hash,
    generate_session_token,
    get_password_hash,
    hash_password_async,
    hash_session_token,
    verify_dummy_password_async,
    verify_password,
    verify_password_async,
)


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password_returns_different_value(self):
        """Test that hashing returns a different value than input"""
        password = "testpassword123"
        hashed = get_password_hash(password)

        assert hashed != password
        assert password not in hashed

    def test_credential_format(self):
        """Derived key and salt are hex, joined by a single dot"""
        hashed = get_password_hash("secret1")
        derived, salt = hashed.split(CREDENTIAL_SEPARATOR)

        assert len(bytes.fromhex(derived)) == SCRYPT_KEY_LENGTH
        assert len(bytes.fromhex(salt)) == SALT_BYTES

    def test_hash_password_different_each_time(self):
        """Same password, fresh salt each time, both verify"""
        password = "testpassword123"
        hash1 = get_password_hash(password)
        hash2 = get_password_hash(password)

        assert hash1 != hash2
        assert verify_password(password, hash1) is True
        assert verify_password(password, hash2) is True

    def test_verify_password_correct(self):
        password = "testpassword123"
        assert verify_password(password, get_password_hash(password)) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("testpassword123")
        assert verify_password("wrongpassword", hashed) is False

    def test_verify_password_empty_credential(self):
        """An empty stored credential is a mismatch, not an error"""
        assert verify_password("anything", "") is False
        assert verify_password("anything", None) is False

    def test_verify_empty_password(self):
        hashed = get_password_hash("testpassword123")
        assert verify_password("", hashed) is False

    def test_unicode_password(self):
        password = "pässwörd-密码"
        hashed = get_password_hash(password)
        assert verify_password(password, hashed) is True
        assert verify_password("passwort", hashed) is False

    @pytest.mark.parametrize("credential", [
        "no-separator-here",
        "abc.def.123",
        ".abcdef",
        "abcdef.",
        "zzzz.abcd",
        "abcd.not-hex",
    ])
    def test_malformed_credential_raises(self, credential):
        with pytest.raises(MalformedCredentialError):
            verify_password("secret1", credential)

    def test_dummy_hash_is_stable_and_valid(self):
        assert dummy_password_hash() == dummy_password_hash()
        assert CREDENTIAL_SEPARATOR in dummy_password_hash()


class TestAsyncHashing:
    """Hashing off the event loop"""

    async def test_hash_and_verify_async(self):
        hashed = await hash_password_async("secret1")

        assert await verify_password_async("secret1", hashed) is True
        assert await verify_password_async("secret2", hashed) is False

    async def test_dummy_verification_always_false(self):
        assert await verify_dummy_password_async("anything") is False


class TestSessionTokens:
    """Opaque session ids and their stored form"""

    def test_tokens_are_unique(self):
        tokens = {generate_session_token() for _ in range(50)}
        assert len(tokens) == 50

    def test_token_length(self):
        # 32 random bytes, URL-safe base64 without padding
        assert len(generate_session_token()) >= 43

    def test_token_hash_is_deterministic(self):
        token = generate_session_token()
        assert hash_session_token(token) == hash_session_token(token)
        assert hash_session_token(token) != token
        assert len(hash_session_token(token)) == 64

    def test_token_hash_depends_on_secret(self):
        token = generate_session_token()
        assert hash_session_token(token, "secret-a") != hash_session_token(token, "secret-b")
