"""
Storage Service - the data access layer

Handles:
- Users, events, registrations, QR settings and form schemas
- Dashboard statistics and the export counter

Contracts shared by every entity:
- list_* return newest first
- delete_* return True only when a row was removed; absent ids give False
- update_* apply supplied fields only, refresh updated_at, and return None
  for an absent id
- connectivity failures surface as StorageUnavailableError
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, delete, func
from typing import Any, Dict, List, Optional, Type
import threading

from eventqr.core.exceptions import DuplicateEmailError, DuplicateUsernameError
from eventqr.core.types import generate_uuid, utcnow
from eventqr.models import Event, FormSchema, QrSettings, Registration, User, UserRole
from eventqr.schemas.event import EventCreate, EventUpdate
from eventqr.schemas.form_schema import FormSchemaCreate, FormSchemaUpdate
from eventqr.schemas.qr_settings import QrSettingsCreate, QrSettingsUpdate
from eventqr.schemas.registration import RegistrationCreate, RegistrationUpdate
from eventqr.services.storage_errors import translate_storage_errors


def registration_url_for(event_id: str) -> str:
    """Public attendee form for an event"""
    return f"/register/{event_id}"


class ExportCounter:
    """
    Number of spreadsheet exports since process start.

    Lives in memory only: it resets to zero on restart and each worker
    process keeps its own count.
    """

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0


class StorageService:
    """Sole reader and writer of persistent state"""

    def __init__(self, export_counter: Optional[ExportCounter] = None):
        self.export_counter = export_counter or ExportCounter()

    # ==================== HELPERS ====================

    async def _get(self, db: AsyncSession, model: Type[Any], obj_id: str) -> Optional[Any]:
        result = await db.execute(
            select(model).where(model.id == obj_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _delete(self, db: AsyncSession, model: Type[Any], obj_id: str) -> bool:
        result = await db.execute(delete(model).where(model.id == obj_id))
        await db.commit()
        return (result.rowcount or 0) > 0

    async def _apply_update(
        self,
        db: AsyncSession,
        obj: Any,
        changes: Dict[str, Any],
        touch: bool = True,
    ) -> Any:
        for field, value in changes.items():
            setattr(obj, field, value)
        if touch:
            obj.updated_at = utcnow()
        await db.commit()
        await db.refresh(obj)
        return obj

    async def _count(self, db: AsyncSession, model: Type[Any], *criteria: Any) -> int:
        query = select(func.count()).select_from(model)
        if criteria:
            query = query.where(*criteria)
        result = await db.execute(query)
        return int(result.scalar() or 0)

    # ==================== USERS ====================

    @translate_storage_errors("get_user")
    async def get_user(self, db: AsyncSession, user_id: str) -> Optional[User]:
        return await self._get(db, User, user_id)

    @translate_storage_errors("get_user_by_username")
    async def get_user_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        """Exact, case-sensitive match"""
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    @translate_storage_errors("get_user_by_email")
    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """Exact, case-sensitive match"""
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    @translate_storage_errors("list_users")
    async def list_users(self, db: AsyncSession) -> List[User]:
        result = await db.execute(select(User).order_by(User.created_at.desc()))
        return list(result.scalars().all())

    @translate_storage_errors("create_user")
    async def create_user(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
        banned: bool = False,
    ) -> User:
        """
        Insert a user with an already-hashed credential.

        A unique-constraint violation (a concurrent registration won the race)
        is reported as DuplicateUsernameError / DuplicateEmailError.
        """
        now = utcnow()
        user = User(
            id=generate_uuid(),
            username=username,
            email=email,
            password=password_hash,
            role=role,
            banned=banned,
            created_at=now,
            updated_at=now,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            raise await self._duplicate_user_error(db, exc, username)
        await db.refresh(user)
        return user

    async def _duplicate_user_error(self, db: AsyncSession, exc: IntegrityError, username: str):
        detail = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
        if "username" in detail:
            return DuplicateUsernameError()
        if "email" in detail:
            return DuplicateEmailError()
        # Constraint name not in the driver message; ask the store which one clashed
        if await self.get_user_by_username(db, username) is not None:
            return DuplicateUsernameError()
        return DuplicateEmailError()

    @translate_storage_errors("update_user")
    async def update_user(self, db: AsyncSession, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        """
        Partial update of a user record.

        Only called by trusted code (admin endpoints, bootstrap scripts);
        the public API never passes client input straight through here.
        """
        user = await self._get(db, User, user_id)
        if user is None:
            return None
        username = changes.get("username", user.username)
        try:
            return await self._apply_update(db, user, changes)
        except IntegrityError as exc:
            await db.rollback()
            raise await self._duplicate_user_error(db, exc, username)

    @translate_storage_errors("delete_user")
    async def delete_user(self, db: AsyncSession, user_id: str) -> bool:
        """Sessions and owned events go with the user (ON DELETE CASCADE)"""
        return await self._delete(db, User, user_id)

    # ==================== EVENTS ====================

    @translate_storage_errors("list_events")
    async def list_events(self, db: AsyncSession) -> List[Event]:
        result = await db.execute(select(Event).order_by(Event.created_at.desc()))
        return list(result.scalars().all())

    @translate_storage_errors("get_events_by_user")
    async def get_events_by_user(self, db: AsyncSession, user_id: str) -> List[Event]:
        result = await db.execute(
            select(Event)
            .where(Event.user_id == user_id)
            .order_by(Event.created_at.desc())
        )
        return list(result.scalars().all())

    @translate_storage_errors("get_event")
    async def get_event(self, db: AsyncSession, event_id: str) -> Optional[Event]:
        return await self._get(db, Event, event_id)

    @translate_storage_errors("create_event")
    async def create_event(self, db: AsyncSession, event_data: EventCreate, user_id: str) -> Event:
        """
        Create an event owned by user_id.

        registration_url is derived from the new id here and never taken
        from the caller.
        """
        event_id = generate_uuid()
        now = utcnow()
        event = Event(
            id=event_id,
            user_id=user_id,
            name=event_data.name,
            description=event_data.description,
            event_date=event_data.event_date,
            event_time=event_data.event_time,
            is_active=event_data.is_active,
            qr_code_url=None,
            registration_url=registration_url_for(event_id),
            created_at=now,
            updated_at=now,
        )
        db.add(event)
        await db.commit()
        await db.refresh(event)
        return event

    @translate_storage_errors("update_event")
    async def update_event(self, db: AsyncSession, event_id: str, event_data: EventUpdate) -> Optional[Event]:
        event = await self._get(db, Event, event_id)
        if event is None:
            return None
        return await self._apply_update(db, event, event_data.model_dump(exclude_unset=True))

    @translate_storage_errors("delete_event")
    async def delete_event(self, db: AsyncSession, event_id: str) -> bool:
        """Registrations, QR settings and form schemas go with the event"""
        return await self._delete(db, Event, event_id)

    # ==================== QR SETTINGS ====================

    @translate_storage_errors("get_qr_settings")
    async def get_qr_settings(self, db: AsyncSession, event_id: str) -> Optional[QrSettings]:
        """Settings for an event. One per event by convention; the newest wins."""
        result = await db.execute(
            select(QrSettings)
            .where(QrSettings.event_id == event_id)
            .order_by(QrSettings.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @translate_storage_errors("create_qr_settings")
    async def create_qr_settings(self, db: AsyncSession, settings_data: QrSettingsCreate) -> QrSettings:
        now = utcnow()
        qr_settings = QrSettings(
            id=generate_uuid(),
            **settings_data.model_dump(),
            created_at=now,
            updated_at=now,
        )
        db.add(qr_settings)
        await db.commit()
        await db.refresh(qr_settings)
        return qr_settings

    @translate_storage_errors("update_qr_settings")
    async def update_qr_settings(
        self,
        db: AsyncSession,
        settings_id: str,
        settings_data: QrSettingsUpdate,
    ) -> Optional[QrSettings]:
        qr_settings = await self._get(db, QrSettings, settings_id)
        if qr_settings is None:
            return None
        return await self._apply_update(db, qr_settings, settings_data.model_dump(exclude_unset=True))

    @translate_storage_errors("delete_qr_settings")
    async def delete_qr_settings(self, db: AsyncSession, settings_id: str) -> bool:
        return await self._delete(db, QrSettings, settings_id)

    # ==================== FORM SCHEMAS ====================

    @translate_storage_errors("get_form_schema")
    async def get_form_schema(self, db: AsyncSession, event_id: str) -> Optional[FormSchema]:
        """Form schema for an event. One per event by convention; the newest wins."""
        result = await db.execute(
            select(FormSchema)
            .where(FormSchema.event_id == event_id)
            .order_by(FormSchema.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    @translate_storage_errors("create_form_schema")
    async def create_form_schema(self, db: AsyncSession, schema_data: FormSchemaCreate) -> FormSchema:
        now = utcnow()
        form_schema = FormSchema(
            id=generate_uuid(),
            **schema_data.model_dump(),
            created_at=now,
            updated_at=now,
        )
        db.add(form_schema)
        await db.commit()
        await db.refresh(form_schema)
        return form_schema

    @translate_storage_errors("update_form_schema")
    async def update_form_schema(
        self,
        db: AsyncSession,
        schema_id: str,
        schema_data: FormSchemaUpdate,
    ) -> Optional[FormSchema]:
        form_schema = await self._get(db, FormSchema, schema_id)
        if form_schema is None:
            return None
        return await self._apply_update(db, form_schema, schema_data.model_dump(exclude_unset=True))

    @translate_storage_errors("delete_form_schema")
    async def delete_form_schema(self, db: AsyncSession, schema_id: str) -> bool:
        return await self._delete(db, FormSchema, schema_id)

    # ==================== REGISTRATIONS ====================

    @translate_storage_errors("list_registrations")
    async def list_registrations(self, db: AsyncSession, event_id: Optional[str] = None) -> List[Registration]:
        query = select(Registration)
        if event_id:
            query = query.where(Registration.event_id == event_id)
        result = await db.execute(query.order_by(Registration.registered_at.desc()))
        return list(result.scalars().all())

    @translate_storage_errors("get_registration")
    async def get_registration(self, db: AsyncSession, registration_id: str) -> Optional[Registration]:
        return await self._get(db, Registration, registration_id)

    @translate_storage_errors("create_registration")
    async def create_registration(
        self,
        db: AsyncSession,
        registration_data: RegistrationCreate,
    ) -> Registration:
        """No dedup: the same attendee may register any number of times"""
        registration = Registration(
            id=generate_uuid(),
            **registration_data.model_dump(),
            registered_at=utcnow(),
        )
        db.add(registration)
        await db.commit()
        await db.refresh(registration)
        return registration

    @translate_storage_errors("update_registration")
    async def update_registration(
        self,
        db: AsyncSession,
        registration_id: str,
        registration_data: RegistrationUpdate,
    ) -> Optional[Registration]:
        registration = await self._get(db, Registration, registration_id)
        if registration is None:
            return None
        # registrations carry no updated_at column
        return await self._apply_update(
            db, registration, registration_data.model_dump(exclude_unset=True), touch=False
        )

    @translate_storage_errors("delete_registration")
    async def delete_registration(self, db: AsyncSession, registration_id: str) -> bool:
        return await self._delete(db, Registration, registration_id)

    # ==================== STATS ====================

    @translate_storage_errors("get_stats")
    async def get_stats(self, db: AsyncSession) -> Dict[str, int]:
        """Dashboard counters. exports comes from the in-memory counter."""
        return {
            "total_events": await self._count(db, Event),
            "total_registrations": await self._count(db, Registration),
            "total_users": await self._count(db, User),
            "active_qrs": await self._count(db, Event, Event.is_active.is_(True)),
            "exports": self.export_counter.value,
        }

    def record_export(self) -> int:
        return self.export_counter.increment()


# Singleton instance
storage_service = StorageService()
