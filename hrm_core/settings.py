# hrm_core/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
import logging
from pathlib import Path

# Configure logging for settings module
logger = logging.getLogger(__name__)
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s SETTINGS.PY - [%(levelname)s] - %(message)s'
    )

# settings.py lives at <project>/hrm_core/settings.py, two parents up is the project root
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
DOTENV_PATH = PROJECT_ROOT / ".env"

if DOTENV_PATH.exists():
    logger.info(f"SETTINGS.PY: .env file FOUND at explicit path: {DOTENV_PATH}")
else:
    logger.info(
        f"SETTINGS.PY: .env file NOT FOUND at explicit path: {DOTENV_PATH}. "
        "Will rely on OS env vars or defaults."
    )

_DEV_JWT_SECRET = "dev-only-hrm-core-signing-secret-change-me-0123456789"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    app_name: str = "HRM Core"
    debug_mode: bool = False

    # SQLite configuration
    sqlite_db_path: str = "./hrm_core_data.sqlite3"

    # Session token configuration
    jwt_secret: str = Field(
        default=_DEV_JWT_SECRET,
        description="HS256 signing secret for session tokens. MUST be set for production."
    )
    jwt_issuer: str = "hrm-core"
    session_ttl_hours: int = Field(default=24, ge=1)
    session_cookie_name: str = "hrm_session"
    session_cookie_secure: bool = False

    # Upper bound for login and tenant lifecycle operations
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    # "log" writes events to the application log, "redis" publishes them
    notifications_backend: str = "log"
    # "none" keeps logout advisory, "redis" maintains a revocation list
    session_revocation_backend: str = "none"

    # Redis configuration (notifications and session revocation)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None
    redis_ssl: bool = False

    # First superadmin, created at startup when absent
    bootstrap_superadmin_email: Optional[str] = None
    bootstrap_superadmin_password: Optional[str] = None
    bootstrap_superadmin_name: str = "Platform Superadmin"

    default_page_limit: int = Field(default=100, ge=1, le=500)

    model_config = SettingsConfigDict(
        env_file=DOTENV_PATH if DOTENV_PATH.exists() else None,
        extra="ignore",
        env_file_encoding='utf-8'
    )


# Initialize settings instance
settings = Settings()

# Sensitive values are masked
logger.info(
    f"SETTINGS.PY: debug_mode={settings.debug_mode}, "
    f"sqlite_db_path='{settings.sqlite_db_path}', "
    f"session_ttl_hours={settings.session_ttl_hours}"
)
logger.info(
    f"SETTINGS.PY: notifications_backend='{settings.notifications_backend}', "
    f"session_revocation_backend='{settings.session_revocation_backend}'"
)
if settings.jwt_secret == _DEV_JWT_SECRET:
    logger.warning("SETTINGS.PY: JWT_SECRET is using the development default. Set it for production.")
