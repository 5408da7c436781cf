# hrm_core/dependencies.py
"""
Store and collaborator providers for FastAPI dependency injection.

Routers depend on these factories rather than on concrete singletons, so
tests can swap any of them through ``app.dependency_overrides``.
"""
import logging

from .accounts.sqlite_account_store import get_sqlite_account_store
from .accounts.storage_interfaces import AbstractAccountStore
from .notifications.publisher import AbstractEventPublisher, get_event_publisher
from .profiles.sqlite_profile_store import get_sqlite_profile_store
from .profiles.storage_interfaces import AbstractProfileStore
from .sessions.revocation_store import AbstractSessionRevocationStore, get_session_revocation_store
from .tenants.sqlite_tenant_store import get_sqlite_tenant_store
from .tenants.storage_interfaces import AbstractTenantStore

logger = logging.getLogger(__name__)


async def get_account_store_dependency() -> AbstractAccountStore:
    return await get_sqlite_account_store()


async def get_tenant_store_dependency() -> AbstractTenantStore:
    return await get_sqlite_tenant_store()


async def get_profile_store_dependency() -> AbstractProfileStore:
    return await get_sqlite_profile_store()


async def get_event_publisher_dependency() -> AbstractEventPublisher:
    return await get_event_publisher()


async def get_revocation_store_dependency() -> AbstractSessionRevocationStore:
    return await get_session_revocation_store()
