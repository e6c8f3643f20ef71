from fastapi import APIRouter
from eventqr.api.endpoints import auth, users, events, registrations, qr_settings, form_schemas, stats, health

api_router = APIRouter()

api_router.include_router(health.router)

# Include endpoint routers
api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Admin Users"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(registrations.router, prefix="/registrations", tags=["Registrations"])
api_router.include_router(qr_settings.router, prefix="/qr-settings", tags=["QR Settings"])
api_router.include_router(form_schemas.router, prefix="/form-schemas", tags=["Form Schemas"])
api_router.include_router(stats.router, tags=["Stats"])
