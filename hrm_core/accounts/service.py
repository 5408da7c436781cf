# hrm_core/accounts/service.py
import logging
from typing import List, Optional

from .models import AccountInDB, AccountUpdate, Role
from .storage_interfaces import AbstractAccountStore
from ..authz.policy import (
    Identity,
    TenantScopedFilters,
    TenantScopedResource,
    authorize_list,
    authorize_mutation,
    enforce,
)
from ..errors import ForbiddenError, InvariantViolationError, NotFoundError
from ..storage.sqlite_base import sqlite_transaction
from ..tenants.storage_interfaces import AbstractTenantStore

logger = logging.getLogger(__name__)


class AccountFilters(TenantScopedFilters):
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    is_approved: Optional[bool] = None


class AccountService:
    """
    Account management on behalf of an authenticated caller.

    Every read is scoped and every write is decided by the authorization
    engine before the credential store is touched.
    """

    def __init__(self, account_store: AbstractAccountStore, tenant_store: AbstractTenantStore):
        self.account_store = account_store
        self.tenant_store = tenant_store

    async def _require_account(self, account_id: str) -> AccountInDB:
        account = await self.account_store.get_account_by_id(account_id)
        if account is None:
            raise NotFoundError("Account not found.")
        return account

    async def _is_last_active_admin(self, account: AccountInDB) -> bool:
        if not account.is_active:
            return False
        if account.is_superadmin:
            return await self.account_store.count_active_superadmins() <= 1
        if account.role != Role.ADMIN or not account.tenant_id:
            return False
        return await self.account_store.count_active_admins(account.tenant_id) <= 1

    async def list_accounts(self, identity: Identity, filters: AccountFilters) -> List[AccountInDB]:
        scoped = authorize_list(identity, filters, TenantScopedResource.ACCOUNTS)
        logger.info(f"Service: Listing accounts for {identity.account_id} (tenant filter applied: {scoped.tenant_id is not None}).")
        return await self.account_store.list_accounts(
            tenant_id=scoped.tenant_id,
            role=scoped.role,
            is_approved=scoped.is_approved,
            is_active=scoped.is_active,
            skip=scoped.skip,
            limit=scoped.limit,
        )

    async def get_account(self, identity: Identity, account_id: str) -> AccountInDB:
        account = await self._require_account(account_id)
        if not identity.is_superadmin and account.tenant_id != identity.tenant_scope:
            logger.warning(f"Service: Account {identity.account_id} denied read of account {account_id} in another tenant.")
            raise ForbiddenError()
        return account

    async def update_account(self, identity: Identity, account_id: str, update: AccountUpdate) -> AccountInDB:
        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        logger.info(f"Service: Updating account {account_id} fields {sorted(changes)}.")

        async with sqlite_transaction():
            target = await self._require_account(account_id)
            decision = authorize_mutation(
                identity,
                target.tenant_id,
                target.role,
                target_account_id=target.account_id,
                changes=changes,
                target_is_last_admin=await self._is_last_active_admin(target),
            )
            enforce(decision, identity)
            updated = await self.account_store.update_account(account_id, changes)

        if updated is None:
            raise NotFoundError("Account not found.")
        return updated

    async def delete_account(self, identity: Identity, account_id: str) -> None:
        async with sqlite_transaction():
            target = await self._require_account(account_id)
            decision = authorize_mutation(
                identity,
                target.tenant_id,
                target.role,
                target_account_id=target.account_id,
                deleting=True,
                target_is_last_admin=await self._is_last_active_admin(target),
            )
            enforce(decision, identity)

            if target.tenant_id:
                tenant = await self.tenant_store.get_tenant(target.tenant_id)
                if tenant is not None and tenant.admin_account_id == target.account_id:
                    raise InvariantViolationError("The tenant's administrator account cannot be deleted.")

            await self.account_store.delete_account(account_id)
        logger.info(f"Service: Account {account_id} deleted by {identity.account_id}.")
