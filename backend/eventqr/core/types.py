"""Custom SQLAlchemy types and column defaults shared by the models"""
from datetime import datetime, timezone
import uuid

from sqlalchemy import JSON, String, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB


def generate_uuid() -> str:
    """Generate a UUID string"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class GUID(TypeDecorator):
    """Platform-independent GUID type that stores UUIDs as VARCHAR(36)"""
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return str(value)
        return value


# Opaque JSON document: JSONB on PostgreSQL, plain JSON elsewhere.
JSONDocument = JSON().with_variant(JSONB(), "postgresql")
