"""
Credential hashing and session token helpers.

Password credentials are scrypt-derived keys stored as
``<hex derived key>.<hex salt>``; the salt is 16 random bytes, hex-encoded,
and fed to scrypt as that hex text. Cost parameters are fixed:
N=16384, r=8, p=1, 64-byte key.

Session ids handed to clients are random URL-safe tokens. Only an
HMAC-SHA256 of the token, keyed with SECRET_KEY, is ever persisted.
"""
from functools import lru_cache
from typing import Optional, Tuple
import hashlib
import hmac
import secrets

from starlette.concurrency import run_in_threadpool

from eventqr.core.config import settings
from eventqr.core.exceptions import MalformedCredentialError

SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_KEY_LENGTH = 64
SALT_BYTES = 16
CREDENTIAL_SEPARATOR = "."

SESSION_TOKEN_BYTES = 32


def _derive_key(password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_KEY_LENGTH,
    )


def _split_credential(credential: str) -> Tuple[bytes, str]:
    parts = credential.split(CREDENTIAL_SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise MalformedCredentialError()
    derived_hex, salt = parts
    try:
        derived = bytes.fromhex(derived_hex)
        bytes.fromhex(salt)
    except ValueError:
        raise MalformedCredentialError()
    return derived, salt


def get_password_hash(password: str) -> str:
    """Hash password with a fresh random salt"""
    # secrets draws from the OS entropy source; a failure there is not recoverable
    salt = secrets.token_hex(SALT_BYTES)
    derived = _derive_key(password, salt)
    return f"{derived.hex()}{CREDENTIAL_SEPARATOR}{salt}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify password against a stored credential in constant time.

    Returns False for a mismatch or an empty credential. Raises
    MalformedCredentialError when the stored value cannot be parsed at all.
    """
    if not hashed_password:
        return False
    expected, salt = _split_credential(hashed_password)
    supplied = _derive_key(plain_password or "", salt)
    return hmac.compare_digest(expected, supplied)


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Credential checked against when the username is unknown, so timing matches a real miss."""
    return get_password_hash(secrets.token_urlsafe(16))


async def hash_password_async(password: str) -> str:
    """Hash off the event loop; scrypt is deliberately slow."""
    return await run_in_threadpool(get_password_hash, password)


async def verify_password_async(plain_password: str, hashed_password: Optional[str]) -> bool:
    return await run_in_threadpool(verify_password, plain_password, hashed_password)


def _verify_against_dummy(plain_password: str) -> bool:
    verify_password(plain_password, dummy_password_hash())
    return False


async def verify_dummy_password_async(plain_password: str) -> bool:
    """Spend one verification's worth of work and report a mismatch"""
    return await run_in_threadpool(_verify_against_dummy, plain_password)


def generate_session_token() -> str:
    """Generate an opaque session id for the client cookie"""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


def hash_session_token(token: str, secret_key: Optional[str] = None) -> str:
    """Key under which a session row is stored"""
    key = (secret_key or settings.SECRET_KEY).encode("utf-8")
    return hmac.new(key, token.encode("utf-8"), hashlib.sha256).hexdigest()
