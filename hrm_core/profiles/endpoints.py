# hrm_core/profiles/endpoints.py
import logging
from fastapi import APIRouter, Depends, Query
from typing import Annotated, List, Optional

from .models import EmployeeFilters, EmployeeProfile
from .storage_interfaces import AbstractProfileStore
from ..auth.dependencies import get_current_identity
from ..authz.policy import Identity, TenantScopedResource, authorize_list
from ..dependencies import get_profile_store_dependency

logger = logging.getLogger(__name__)

employees_router = APIRouter(prefix="/employees", tags=["Employees"])


@employees_router.get("", response_model=List[EmployeeProfile])
async def list_employees_endpoint(
    identity: Annotated[Identity, Depends(get_current_identity)],
    profile_store: Annotated[AbstractProfileStore, Depends(get_profile_store_dependency)],
    tenant_id: Annotated[Optional[str], Query(description="Honoured for superadmins only.")] = None,
    department: Optional[str] = None,
    status: Optional[str] = None,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
):
    """List employee records, scoped to the caller's tenant unless the caller is a superadmin."""
    filters = authorize_list(
        identity,
        EmployeeFilters(tenant_id=tenant_id, department=department, status=status, skip=skip, limit=limit),
        TenantScopedResource.EMPLOYEES,
    )
    return await profile_store.list_profiles(filters)
