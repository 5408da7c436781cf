# hrm_core/accounts/endpoints.py
import logging
from fastapi import APIRouter, Depends, Path, Query
from typing import Annotated, List, Optional

from .models import Account, AccountUpdate, Role
from .service import AccountFilters, AccountService
from .storage_interfaces import AbstractAccountStore
from ..auth.dependencies import get_current_identity
from ..auth.models import MessageResponse
from ..authz.policy import Identity
from ..dependencies import get_account_store_dependency, get_tenant_store_dependency
from ..tenants.storage_interfaces import AbstractTenantStore

logger = logging.getLogger(__name__)

accounts_router = APIRouter(prefix="/accounts", tags=["Accounts"])

AccountIdPath = Annotated[str, Path(description="The ID of the account")]


async def get_account_service(
    account_store: Annotated[AbstractAccountStore, Depends(get_account_store_dependency)],
    tenant_store: Annotated[AbstractTenantStore, Depends(get_tenant_store_dependency)],
) -> AccountService:
    return AccountService(account_store, tenant_store)


@accounts_router.get("", response_model=List[Account])
async def list_accounts_endpoint(
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[AccountService, Depends(get_account_service)],
    tenant_id: Annotated[Optional[str], Query(description="Honoured for superadmins only.")] = None,
    role: Optional[Role] = None,
    is_active: Optional[bool] = None,
    is_approved: Optional[bool] = None,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
):
    """List accounts. Non-superadmin callers always get their own tenant's accounts."""
    filters = AccountFilters(
        tenant_id=tenant_id,
        role=role,
        is_active=is_active,
        is_approved=is_approved,
        skip=skip,
        limit=limit,
    )
    accounts = await service.list_accounts(identity, filters)
    return [Account.from_db(a) for a in accounts]


@accounts_router.get("/{account_id}", response_model=Account)
async def get_account_endpoint(
    account_id: AccountIdPath,
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[AccountService, Depends(get_account_service)],
):
    return Account.from_db(await service.get_account(identity, account_id))


@accounts_router.patch("/{account_id}", response_model=Account)
async def update_account_endpoint(
    account_id: AccountIdPath,
    update: AccountUpdate,
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[AccountService, Depends(get_account_service)],
):
    logger.info(f"API: Received update for account {account_id}.")
    return Account.from_db(await service.update_account(identity, account_id, update))


@accounts_router.delete("/{account_id}", response_model=MessageResponse)
async def delete_account_endpoint(
    account_id: AccountIdPath,
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[AccountService, Depends(get_account_service)],
):
    logger.info(f"API: Received delete for account {account_id}.")
    await service.delete_account(identity, account_id)
    return MessageResponse(message="Account deleted successfully.")
