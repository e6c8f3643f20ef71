from pydantic_settings import BaseSettings
from typing import List, Any, Optional
import json


# Placeholder shipped for local development; refused at startup in production.
DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "EventQR"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str = DEFAULT_SECRET_KEY

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./eventqr.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_CONNECT_TIMEOUT: int = 10  # seconds
    DB_COMMAND_TIMEOUT: int = 30  # seconds

    # ==========================================
    # Sessions
    # ==========================================
    SESSION_COOKIE_NAME: str = "eventqr.sid"
    SESSION_TTL_SECONDS: int = 86400  # 24 hours, fixed from issuance
    SESSION_COOKIE_SECURE: Optional[bool] = None  # unset -> secure in production
    SESSION_CLEANUP_INTERVAL_SECONDS: int = 3600  # 0 disables the sweeper

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:5000,http://localhost:5173,http://127.0.0.1:5000,http://127.0.0.1:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    LOGIN_RATE_LIMIT: str = "5/minute"
    REGISTER_RATE_LIMIT: str = "3/minute"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""  # empty -> console only

    # ==========================================
    # Admin bootstrap (scripts/create_admin.py)
    # ==========================================
    BOOTSTRAP_ADMIN_USERNAME: str = ""
    BOOTSTRAP_ADMIN_EMAIL: str = ""
    BOOTSTRAP_ADMIN_PASSWORD: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def session_cookie_secure(self) -> bool:
        """Secure cookies by default in production; SESSION_COOKIE_SECURE overrides."""
        if self.SESSION_COOKIE_SECURE is not None:
            return self.SESSION_COOKIE_SECURE
        return self.is_production

    def uses_default_secret(self) -> bool:
        return not self.SECRET_KEY.strip() or self.SECRET_KEY == DEFAULT_SECRET_KEY


settings = Settings()
