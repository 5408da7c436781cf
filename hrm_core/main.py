# hrm_core/main.py
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
from dotenv import load_dotenv
load_dotenv()

from .settings import settings
from .errors import HRMError
from .storage.sqlite_base import close_sqlite_db_connection, get_sqlite_db_connection
from .accounts.sqlite_account_store import get_sqlite_account_store
from .tenants.sqlite_tenant_store import get_sqlite_tenant_store
from .profiles.sqlite_profile_store import get_sqlite_profile_store
from .sessions.revocation_store import close_session_revocation_store, get_session_revocation_store
from .notifications.publisher import close_event_publisher, get_event_publisher
from .auth.service import bootstrap_superadmin
from .auth.endpoints import auth_router
from .registration.endpoints import registration_admin_router, registration_router
from .tenants.endpoints import tenant_members_router, tenants_admin_router
from .accounts.endpoints import accounts_router
from .profiles.endpoints import employees_router

# Configure logging based on debug mode setting
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level="DEBUG" if settings.debug_mode else "INFO",
        format='%(asctime)s - %(name)s [%(levelname)s] - %(message)s'
    )

logger = logging.getLogger(__name__)
logger.setLevel(logging.DEBUG if settings.debug_mode else logging.INFO)


@asynccontextmanager
async def hrm_app_lifespan(app_instance: FastAPI):
    """
    Application lifespan manager: opens the SQLite connection, initializes
    the stores and side channels, bootstraps the first superadmin when
    configured, and releases everything on shutdown.
    """
    logger.info("Application startup initiated.")
    try:
        await get_sqlite_db_connection()
        logger.info("SQLite connection initialized.")

        account_store = await get_sqlite_account_store()
        await get_sqlite_tenant_store()
        await get_sqlite_profile_store()
        logger.info("Credential store, tenant registry and profile store initialized.")

        await get_session_revocation_store()
        await get_event_publisher()
        logger.info(
            f"Side channels ready (revocation: '{settings.session_revocation_backend}', "
            f"notifications: '{settings.notifications_backend}')."
        )

        if settings.bootstrap_superadmin_email and settings.bootstrap_superadmin_password:
            await bootstrap_superadmin(
                account_store,
                settings.bootstrap_superadmin_email,
                settings.bootstrap_superadmin_password,
                settings.bootstrap_superadmin_name,
            )
        else:
            logger.info("No bootstrap superadmin configured.")
    except Exception as e:
        logger.error(f"Error during application startup: {e}", exc_info=True)
        raise

    yield

    logger.info("Application shutdown initiated.")
    await close_event_publisher()
    await close_session_revocation_store()
    await close_sqlite_db_connection()
    logger.info("Application shutdown complete.")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug_mode,
    lifespan=hrm_app_lifespan,
)


@app.exception_handler(HRMError)
async def hrm_error_handler(request: Request, exc: HRMError) -> JSONResponse:
    """Renders domain errors as ``{"error": kind, "message": ...}``."""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.kind}")
    return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "InternalError", "message": "An unexpected error occurred."},
    )


api_router = APIRouter(prefix="/api")


@api_router.get("/health", tags=["Health"])
async def health_check():
    return {"status": "ok", "app": settings.app_name}


api_router.include_router(auth_router)
api_router.include_router(registration_router)
# Registered before the tenant routers so /tenants/pending is not captured by /tenants/{tenant_id}
api_router.include_router(registration_admin_router)
api_router.include_router(tenants_admin_router)
api_router.include_router(tenant_members_router)
api_router.include_router(accounts_router)
api_router.include_router(employees_router)
app.include_router(api_router)

logger.info(f"{settings.app_name} application configured with routes under /api.")
