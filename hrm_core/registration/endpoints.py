# hrm_core/registration/endpoints.py
import logging
from fastapi import APIRouter, Depends, status
from typing import Annotated, List

from .models import (
    ApproveRegistrationRequest,
    ApproveRegistrationResponse,
    PendingRegistration,
    RegistrationRequest,
    RejectRegistrationRequest,
)
from .service import RegistrationService
from ..accounts.models import Account
from ..accounts.storage_interfaces import AbstractAccountStore
from ..auth.dependencies import require_superadmin
from ..auth.models import MessageResponse
from ..dependencies import (
    get_account_store_dependency,
    get_event_publisher_dependency,
    get_tenant_store_dependency,
)
from ..notifications.publisher import AbstractEventPublisher
from ..tenants.models import Tenant
from ..tenants.storage_interfaces import AbstractTenantStore
from ..utils.timeouts import run_bounded

logger = logging.getLogger(__name__)

# Public signup
registration_router = APIRouter(prefix="/auth", tags=["Registration"])

# Review of pending registrations - superadmin only
registration_admin_router = APIRouter(
    prefix="/tenants",
    tags=["Registration - Review"],
    dependencies=[Depends(require_superadmin)],
)


async def get_registration_service(
    account_store: Annotated[AbstractAccountStore, Depends(get_account_store_dependency)],
    tenant_store: Annotated[AbstractTenantStore, Depends(get_tenant_store_dependency)],
    publisher: Annotated[AbstractEventPublisher, Depends(get_event_publisher_dependency)],
) -> RegistrationService:
    """Factory function to create RegistrationService with injected dependencies."""
    return RegistrationService(account_store, tenant_store, publisher)


@registration_router.post("/register", response_model=PendingRegistration, status_code=status.HTTP_201_CREATED)
async def register_endpoint(
    request_data: RegistrationRequest,
    service: Annotated[RegistrationService, Depends(get_registration_service)],
):
    """Submit an organization registration. The account stays pending until a superadmin approves it."""
    logger.info("API: Received registration request.")
    return await service.submit_registration(request_data)


@registration_admin_router.get("/pending", response_model=List[Account])
async def list_pending_endpoint(
    service: Annotated[RegistrationService, Depends(get_registration_service)],
):
    pending = await service.list_pending()
    return [Account.from_db(a) for a in pending]


@registration_admin_router.post("/approve", response_model=ApproveRegistrationResponse)
async def approve_endpoint(
    request_data: ApproveRegistrationRequest,
    service: Annotated[RegistrationService, Depends(get_registration_service)],
):
    """Approve a pending registration, creating its tenant. Safe to retry after a timeout."""
    logger.info(f"API: Received approval for account {request_data.account_id}.")
    tenant = await run_bounded(service.approve(request_data.account_id, request_data.plan), "approve_registration")
    return ApproveRegistrationResponse(tenant=Tenant.model_validate(tenant, from_attributes=True))


@registration_admin_router.post("/reject", response_model=MessageResponse)
async def reject_endpoint(
    request_data: RejectRegistrationRequest,
    service: Annotated[RegistrationService, Depends(get_registration_service)],
):
    logger.info(f"API: Received rejection for account {request_data.account_id}.")
    await service.reject(request_data.account_id, request_data.reason)
    return MessageResponse(message="Tenant registration rejected successfully.")
