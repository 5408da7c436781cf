# tests/conftest.py
import asyncio
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

from hrm_core.accounts.models import AccountInDB, Role, TenantAccountCreate
from hrm_core.accounts.service import AccountService
from hrm_core.accounts.sqlite_account_store import SQLiteAccountStore
from hrm_core.auth.service import SessionService, bootstrap_superadmin
from hrm_core.auth.token_manager import DefaultSessionTokenManager
from hrm_core.authz.policy import Identity, resolve
from hrm_core.notifications.publisher import AbstractEventPublisher
from hrm_core.profiles.sqlite_profile_store import SQLiteProfileStore
from hrm_core.registration.models import RegistrationRequest
from hrm_core.registration.service import RegistrationService
from hrm_core.sessions.revocation_store import AbstractSessionRevocationStore
from hrm_core.settings import settings
from hrm_core.storage.sqlite_base import close_sqlite_db_connection, get_sqlite_db_connection
from hrm_core.tenants.models import Plan, TenantInDB
from hrm_core.tenants.service import TenantLifecycleService
from hrm_core.tenants.sqlite_tenant_store import SQLiteTenantStore

TEST_JWT_SECRET = "test-signing-secret-for-hrm-core-suite-0123456789"
DEFAULT_PASSWORD = "s3cret-pass"


class RecordingEventPublisher(AbstractEventPublisher):
    """In-memory publisher that records every event."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []

    async def initialize(self) -> None:
        pass

    async def teardown(self) -> None:
        pass

    async def publish(self, channel: str, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
        self.events.append((channel, event, payload or {}))

    def names(self) -> List[str]:
        return [event for _, event, _ in self.events]


class InMemoryRevocationStore(AbstractSessionRevocationStore):
    def __init__(self) -> None:
        self.revoked: Set[str] = set()

    async def initialize(self) -> None:
        pass

    async def teardown(self) -> None:
        pass

    async def revoke(self, jti: str, ttl_seconds: int) -> None:
        if ttl_seconds > 0:
            self.revoked.add(jti)

    async def is_revoked(self, jti: str) -> bool:
        return jti in self.revoked


async def drain_events() -> None:
    """Let fire-and-forget publish tasks run."""
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
async def sqlite_db(tmp_path, monkeypatch):
    """Fresh SQLite database for every test."""
    await close_sqlite_db_connection()
    monkeypatch.setattr(settings, "sqlite_db_path", str(tmp_path / "hrm_test.sqlite3"))
    monkeypatch.setattr(settings, "jwt_secret", TEST_JWT_SECRET)
    await get_sqlite_db_connection()
    yield
    await close_sqlite_db_connection()


@pytest.fixture
def account_store() -> SQLiteAccountStore:
    return SQLiteAccountStore()


@pytest.fixture
def tenant_store() -> SQLiteTenantStore:
    return SQLiteTenantStore()


@pytest.fixture
def profile_store() -> SQLiteProfileStore:
    return SQLiteProfileStore()


@pytest.fixture
def publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
def revocation_store() -> InMemoryRevocationStore:
    return InMemoryRevocationStore()


@pytest.fixture
def token_manager() -> DefaultSessionTokenManager:
    return DefaultSessionTokenManager(secret=TEST_JWT_SECRET, issuer="hrm-core-test")


@pytest.fixture
def registration_service(account_store, tenant_store, publisher) -> RegistrationService:
    return RegistrationService(account_store, tenant_store, publisher)


@pytest.fixture
def tenant_service(tenant_store, account_store, profile_store, publisher) -> TenantLifecycleService:
    return TenantLifecycleService(tenant_store, account_store, profile_store, publisher)


@pytest.fixture
def session_service(account_store, tenant_store, profile_store, token_manager, revocation_store) -> SessionService:
    return SessionService(account_store, tenant_store, profile_store, token_manager, revocation_store)


@pytest.fixture
def account_service(account_store, tenant_store) -> AccountService:
    return AccountService(account_store, tenant_store)


@pytest.fixture
async def superadmin(account_store) -> AccountInDB:
    return await bootstrap_superadmin(account_store, "root@platform.example.com", DEFAULT_PASSWORD, "Platform Root")


@pytest.fixture
def superadmin_identity(superadmin) -> Identity:
    return resolve(superadmin)


@pytest.fixture
def onboard_tenant(registration_service, account_store):
    """Register and approve an organization; returns (tenant, admin account)."""

    async def _onboard(
        email: str,
        company: Optional[str],
        name: str = "Admin",
        plan: Plan = Plan.BASIC,
    ) -> Tuple[TenantInDB, AccountInDB]:
        pending = await registration_service.submit_registration(
            RegistrationRequest(name=name, email=email, password=DEFAULT_PASSWORD, company=company)
        )
        tenant = await registration_service.approve(pending.account.account_id, plan)
        admin = await account_store.get_account_by_id(pending.account.account_id)
        return tenant, admin

    return _onboard


@pytest.fixture
def add_member(tenant_service, superadmin_identity):
    """Add an account with the given role to a tenant, acting as superadmin."""

    async def _add(tenant_id: str, email: str, role: Role, name: str = "Member") -> AccountInDB:
        return await tenant_service.add_tenant_account(
            superadmin_identity,
            tenant_id,
            TenantAccountCreate(name=name, email=email, password=DEFAULT_PASSWORD, role=role),
        )

    return _add
