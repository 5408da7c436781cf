# hrm_core/tenants/endpoints.py
import logging
from fastapi import APIRouter, Depends, Path, Query, status
from typing import List, Annotated

from .models import Tenant, TenantCreate, TenantGrowthPoint, TenantStats, TenantUpdate, TenantUsage
from .service import TenantLifecycleService
from .storage_interfaces import AbstractTenantStore
from ..accounts.models import Account, TenantAccountCreate
from ..accounts.storage_interfaces import AbstractAccountStore
from ..auth.dependencies import get_current_identity, require_superadmin
from ..auth.models import MessageResponse
from ..authz.policy import Identity
from ..dependencies import (
    get_account_store_dependency,
    get_event_publisher_dependency,
    get_profile_store_dependency,
    get_tenant_store_dependency,
)
from ..notifications.publisher import AbstractEventPublisher
from ..profiles.storage_interfaces import AbstractProfileStore
from ..utils.timeouts import run_bounded

logger = logging.getLogger(__name__)

# Tenant lifecycle management - superadmin only
tenants_admin_router = APIRouter(
    prefix="/tenants",
    tags=["Tenants"],
    dependencies=[Depends(require_superadmin)],
)

# Tenant membership - any authenticated caller, scoped by the authorization engine
tenant_members_router = APIRouter(prefix="/tenants", tags=["Tenants - Members"])

TenantIdPath = Annotated[str, Path(description="The ID of the tenant")]


async def get_tenant_service(
    tenant_store: Annotated[AbstractTenantStore, Depends(get_tenant_store_dependency)],
    account_store: Annotated[AbstractAccountStore, Depends(get_account_store_dependency)],
    profile_store: Annotated[AbstractProfileStore, Depends(get_profile_store_dependency)],
    publisher: Annotated[AbstractEventPublisher, Depends(get_event_publisher_dependency)],
) -> TenantLifecycleService:
    """Factory function to create TenantLifecycleService with injected dependencies."""
    return TenantLifecycleService(tenant_store, account_store, profile_store, publisher)


@tenants_admin_router.get("/stats", response_model=TenantStats)
async def tenant_stats_endpoint(
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
):
    return await service.tenant_stats()


@tenants_admin_router.get("/usage", response_model=List[TenantUsage])
async def tenant_usage_endpoint(
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
    skip: Annotated[int, Query(ge=0, description="Number of tenants to skip.")] = 0,
    limit: Annotated[int, Query(ge=1, le=500, description="Maximum number of tenants to report.")] = 100,
):
    """Active and inactive account counts per tenant."""
    return await service.tenant_usage(skip=skip, limit=limit)


@tenants_admin_router.get("/growth", response_model=List[TenantGrowthPoint])
async def tenant_growth_endpoint(
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
    months: Annotated[int, Query(ge=1, le=24, description="Number of calendar months to report.")] = 6,
):
    """Tenants created per month, oldest month first."""
    return await service.tenant_growth(months=months)


@tenants_admin_router.post("", response_model=Tenant, status_code=status.HTTP_201_CREATED)
async def create_tenant_endpoint(
    tenant_create: TenantCreate,
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
):
    """Create a new tenant with its administrator. Returns 409 if the admin email is taken."""
    logger.info(f"API: Received request to create tenant '{tenant_create.name}'.")
    created = await run_bounded(service.create_tenant(tenant_create), "create_tenant")
    return Tenant.model_validate(created)


@tenants_admin_router.get("", response_model=List[Tenant])
async def list_tenants_endpoint(
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
    skip: Annotated[int, Query(ge=0, description="Number of tenants to skip.")] = 0,
    limit: Annotated[int, Query(ge=1, le=500, description="Maximum number of tenants to return.")] = 100,
):
    tenants_in_db = await service.list_tenants(skip=skip, limit=limit)
    return [Tenant.model_validate(t) for t in tenants_in_db]


@tenants_admin_router.get("/{tenant_id}", response_model=Tenant)
async def get_tenant_endpoint(
    tenant_id: TenantIdPath,
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
):
    return Tenant.model_validate(await service.get_tenant(tenant_id))


@tenants_admin_router.put("/{tenant_id}", response_model=Tenant)
async def update_tenant_endpoint(
    tenant_id: TenantIdPath,
    tenant_update: TenantUpdate,
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
):
    """Update tenant fields. Does not cascade to member accounts."""
    updated = await service.update_tenant(tenant_id, tenant_update)
    return Tenant.model_validate(updated)


@tenants_admin_router.patch("/{tenant_id}/activate", response_model=Tenant)
async def activate_tenant_endpoint(
    tenant_id: TenantIdPath,
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
):
    logger.info(f"API: Received request to activate tenant {tenant_id}.")
    tenant = await run_bounded(service.activate_tenant(tenant_id), "activate_tenant")
    return Tenant.model_validate(tenant)


@tenants_admin_router.patch("/{tenant_id}/suspend", response_model=Tenant)
async def suspend_tenant_endpoint(
    tenant_id: TenantIdPath,
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
):
    logger.info(f"API: Received request to suspend tenant {tenant_id}.")
    tenant = await run_bounded(service.suspend_tenant(tenant_id), "suspend_tenant")
    return Tenant.model_validate(tenant)


@tenants_admin_router.delete("/{tenant_id}", response_model=MessageResponse)
async def delete_tenant_endpoint(
    tenant_id: TenantIdPath,
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
):
    """Delete a tenant with its accounts and employee profiles. Returns 404 if it does not exist."""
    logger.info(f"API: Received request to delete tenant {tenant_id}.")
    await run_bounded(service.delete_tenant(tenant_id), "delete_tenant")
    return MessageResponse(message="Tenant deleted successfully.")


@tenant_members_router.get("/{tenant_id}/users", response_model=List[Account])
async def list_tenant_users_endpoint(
    tenant_id: TenantIdPath,
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
):
    accounts = await service.list_tenant_accounts(identity, tenant_id, skip=skip, limit=limit)
    return [Account.from_db(a) for a in accounts]


@tenant_members_router.post("/{tenant_id}/users", response_model=Account, status_code=status.HTTP_201_CREATED)
async def add_tenant_user_endpoint(
    tenant_id: TenantIdPath,
    payload: TenantAccountCreate,
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[TenantLifecycleService, Depends(get_tenant_service)],
):
    logger.info(f"API: Received request to add a '{payload.role.value}' account to tenant {tenant_id}.")
    account = await service.add_tenant_account(identity, tenant_id, payload)
    return Account.from_db(account)
