# hrm_core/tenants/service.py
import logging
from datetime import datetime, timezone
from typing import List

from fastapi.concurrency import run_in_threadpool

from .models import (
    TenantCreate,
    TenantGrowthPoint,
    TenantInDB,
    TenantRecordCreate,
    TenantStats,
    TenantStatus,
    TenantUpdate,
    TenantUsage,
)
from .storage_interfaces import AbstractTenantStore
from ..accounts.models import AccountCreate, AccountInDB, Role, TenantAccountCreate
from ..accounts.storage_interfaces import AbstractAccountStore
from ..authz.policy import (
    Identity,
    TenantScopedFilters,
    TenantScopedResource,
    authorize_list,
    authorize_mutation,
    enforce,
)
from ..errors import DuplicateEmailError, NotFoundError
from ..notifications.publisher import ADMIN_CHANNEL, AbstractEventPublisher, publish_after_commit
from ..profiles.storage_interfaces import AbstractProfileStore
from ..storage.sqlite_base import sqlite_transaction
from ..utils.security import hash_password

logger = logging.getLogger(__name__)


class TenantLifecycleService:
    """
    Service layer for tenant management operations.

    Every state transition that touches member accounts runs as one SQLite
    unit of work, so a tenant is never left half-suspended or half-deleted.
    All transitions are idempotent: a failed or timed-out call is retried
    by issuing it again.
    """

    def __init__(
        self,
        tenant_store: AbstractTenantStore,
        account_store: AbstractAccountStore,
        profile_store: AbstractProfileStore,
        publisher: AbstractEventPublisher,
    ):
        """Initialize the service with its stores and the notification publisher."""
        self.tenant_store = tenant_store
        self.account_store = account_store
        self.profile_store = profile_store
        self.publisher = publisher

    async def _require_tenant(self, tenant_id: str) -> TenantInDB:
        tenant = await self.tenant_store.get_tenant(tenant_id)
        if tenant is None:
            logger.info(f"Service: Tenant {tenant_id} not found.")
            raise NotFoundError("Tenant not found.")
        return tenant

    async def create_tenant(self, tenant_create: TenantCreate) -> TenantInDB:
        """
        Create an Active tenant together with its approved administrator account.

        Raises DuplicateEmailError when the admin email is already registered.
        """
        admin_email = tenant_create.admin_email.strip().lower()
        logger.info(f"Service: Attempting to create tenant '{tenant_create.name}'.")
        admin_password_hash = await run_in_threadpool(hash_password, tenant_create.admin_password.get_secret_value())

        async with sqlite_transaction():
            if await self.account_store.get_account_by_email(admin_email):
                logger.warning(f"Service: Tenant creation failed for '{tenant_create.name}': admin email taken.")
                raise DuplicateEmailError()

            try:
                admin = await self.account_store.create_account(
                    AccountCreate(
                        email=admin_email,
                        password_hash=admin_password_hash,
                        name=tenant_create.admin_name,
                        role=Role.ADMIN,
                        tenant_id=None,
                        is_approved=True,
                        is_active=True,
                        company=tenant_create.company,
                        phone=tenant_create.phone,
                    )
                )
            except ValueError as ve:
                raise DuplicateEmailError() from ve

            tenant = await self.tenant_store.create_tenant(
                TenantRecordCreate(
                    name=tenant_create.name,
                    company=tenant_create.company,
                    email=tenant_create.email,
                    phone=tenant_create.phone,
                    address=tenant_create.address,
                    industry=tenant_create.industry,
                    plan=tenant_create.plan,
                    status=TenantStatus.ACTIVE,
                    admin_account_id=admin.account_id,
                )
            )
            await self.account_store.bind_to_tenant(admin.account_id, tenant.tenant_id, is_approved=True)

        publish_after_commit(self.publisher, ADMIN_CHANNEL, "tenant.created", {"tenant_id": tenant.tenant_id})
        return tenant

    async def get_tenant(self, tenant_id: str) -> TenantInDB:
        """Retrieve a specific tenant by its identifier."""
        logger.info(f"Service: Getting tenant {tenant_id}")
        return await self._require_tenant(tenant_id)

    async def list_tenants(self, skip: int = 0, limit: int = 100) -> List[TenantInDB]:
        logger.info(f"Service: Listing tenants with skip: {skip}, limit: {limit}")
        return await self.tenant_store.list_tenants(skip=skip, limit=limit)

    async def update_tenant(self, tenant_id: str, tenant_update: TenantUpdate) -> TenantInDB:
        """
        Partial update of tenant fields.

        A ``status`` change here is a plain field write; use activate() or
        suspend() to cascade onto member accounts.
        """
        logger.info(f"Service: Updating tenant {tenant_id}")
        updated = await self.tenant_store.update_tenant(tenant_id, tenant_update)
        if updated is None:
            raise NotFoundError("Tenant not found.")
        if tenant_update.status is not None:
            logger.info(f"Service: Tenant {tenant_id} status set to '{tenant_update.status.value}' without cascade.")
        return updated

    async def activate_tenant(self, tenant_id: str) -> TenantInDB:
        logger.info(f"Service: Activating tenant {tenant_id}")
        async with sqlite_transaction():
            await self._require_tenant(tenant_id)
            approved = await self.account_store.set_approval_for_tenant(tenant_id, True)
            await self.tenant_store.set_status(tenant_id, TenantStatus.ACTIVE)
            tenant = await self._require_tenant(tenant_id)

        logger.info(f"Service: Tenant {tenant_id} activated; {approved} accounts approved.")
        publish_after_commit(self.publisher, ADMIN_CHANNEL, "tenant.activated", {"tenant_id": tenant_id})
        return tenant

    async def suspend_tenant(self, tenant_id: str) -> TenantInDB:
        logger.info(f"Service: Suspending tenant {tenant_id}")
        async with sqlite_transaction():
            await self._require_tenant(tenant_id)
            unapproved = await self.account_store.set_approval_for_tenant(tenant_id, False)
            await self.tenant_store.set_status(tenant_id, TenantStatus.SUSPENDED)
            tenant = await self._require_tenant(tenant_id)

        logger.info(f"Service: Tenant {tenant_id} suspended; {unapproved} accounts unapproved.")
        publish_after_commit(self.publisher, ADMIN_CHANNEL, "tenant.suspended", {"tenant_id": tenant_id})
        return tenant

    async def delete_tenant(self, tenant_id: str) -> None:
        """
        Remove a tenant with its member accounts and linked employee profiles.

        Superadmin accounts are never deleted by the cascade.
        """
        logger.info(f"Service: Deleting tenant {tenant_id}")
        async with sqlite_transaction():
            tenant = await self._require_tenant(tenant_id)
            removed = await self.account_store.delete_accounts_for_tenant(tenant_id)
            admin = await self.account_store.get_account_by_id(tenant.admin_account_id)
            if admin is not None and not admin.is_superadmin:
                await self.account_store.delete_account(admin.account_id)
            await self.profile_store.delete_profiles_for_tenant(tenant_id)
            await self.tenant_store.delete_tenant(tenant_id)

        logger.info(f"Service: Tenant {tenant_id} deleted with {removed} member accounts.")
        publish_after_commit(self.publisher, ADMIN_CHANNEL, "tenant.deleted", {"tenant_id": tenant_id})

    async def tenant_stats(self) -> TenantStats:
        counts = await self.tenant_store.count_by_status()
        pending = await self.account_store.count_pending_registrations()
        return TenantStats(
            total=sum(counts.values()),
            active=counts[TenantStatus.ACTIVE],
            suspended=counts[TenantStatus.SUSPENDED],
            pending=pending,
        )

    async def tenant_usage(self, skip: int = 0, limit: int = 100) -> List[TenantUsage]:
        """Active and inactive account counts for each tenant."""
        tenants = await self.tenant_store.list_tenants(skip=skip, limit=limit)
        counts = await self.account_store.count_accounts_by_tenant()
        logger.info(f"Service: Reporting usage for {len(tenants)} tenants.")
        usage = []
        for tenant in tenants:
            active, inactive = counts.get(tenant.tenant_id, (0, 0))
            usage.append(TenantUsage(tenant_id=tenant.tenant_id, name=tenant.name, active=active, inactive=inactive))
        return usage

    async def tenant_growth(self, months: int = 6) -> List[TenantGrowthPoint]:
        """
        Tenants created per calendar month, oldest first.

        Covers the current month and the ``months - 1`` before it; months
        without signups are reported with a zero count.
        """
        now = datetime.now(timezone.utc)
        keys = []
        year, month = now.year, now.month
        for _ in range(months):
            keys.append(f"{year:04d}-{month:02d}")
            year, month = (year - 1, 12) if month == 1 else (year, month - 1)
        keys.reverse()

        first_year, first_month = (int(part) for part in keys[0].split("-"))
        since = datetime(first_year, first_month, 1, tzinfo=timezone.utc)
        counts = await self.tenant_store.count_created_by_month(since)
        return [TenantGrowthPoint(month=key, count=counts.get(key, 0)) for key in keys]

    async def list_tenant_accounts(
        self,
        identity: Identity,
        tenant_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> List[AccountInDB]:
        """Accounts of a tenant; members of other tenants are rescoped to their own."""
        filters = authorize_list(
            identity,
            TenantScopedFilters(tenant_id=tenant_id, skip=skip, limit=limit),
            TenantScopedResource.ACCOUNTS,
        )
        if identity.is_superadmin:
            await self._require_tenant(tenant_id)
        return await self.account_store.list_accounts(
            tenant_id=filters.tenant_id, skip=filters.skip, limit=filters.limit
        )

    async def add_tenant_account(
        self,
        identity: Identity,
        tenant_id: str,
        payload: TenantAccountCreate,
    ) -> AccountInDB:
        """Create an approved teammate account bound to the tenant."""
        enforce(
            authorize_mutation(identity, tenant_id, changes={"role": payload.role}),
            identity,
        )
        email = payload.email.strip().lower()
        password_hash = await run_in_threadpool(hash_password, payload.password.get_secret_value())

        async with sqlite_transaction():
            tenant = await self._require_tenant(tenant_id)
            if await self.account_store.get_account_by_email(email):
                raise DuplicateEmailError()
            try:
                account = await self.account_store.create_account(
                    AccountCreate(
                        email=email,
                        password_hash=password_hash,
                        name=payload.name,
                        role=payload.role,
                        tenant_id=tenant.tenant_id,
                        is_approved=tenant.status == TenantStatus.ACTIVE,
                        is_active=True,
                        company=tenant.company,
                        phone=payload.phone,
                    )
                )
            except ValueError as ve:
                raise DuplicateEmailError() from ve

        logger.info(
            f"Service: Account {account.account_id} with role '{account.role.value}' added to tenant {tenant_id}."
        )
        return account
