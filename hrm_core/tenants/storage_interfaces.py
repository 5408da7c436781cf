# hrm_core/tenants/storage_interfaces.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional
from .models import TenantInDB, TenantRecordCreate, TenantStatus, TenantUpdate


class AbstractTenantStore(ABC):
    """
    Abstract base class defining the interface for the tenant registry.

    Implementations only persist tenant records; cascades onto member
    accounts are orchestrated by the lifecycle service.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the storage backend and prepare it for operations."""
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """Clean up resources and properly close the storage backend."""
        pass

    @abstractmethod
    async def create_tenant(self, tenant_create: TenantRecordCreate) -> TenantInDB:
        """
        Create a new tenant record.

        Args:
            tenant_create: Tenant data including the admin account reference

        Returns:
            The created tenant with generated ID and timestamps
        """
        pass

    @abstractmethod
    async def get_tenant(self, tenant_id: str) -> Optional[TenantInDB]:
        """
        Retrieve a tenant by its identifier.

        Returns:
            The tenant if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_tenants(self, skip: int = 0, limit: int = 100) -> List[TenantInDB]:
        """
        Retrieve a paginated list of tenants, newest first.

        Args:
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return
        """
        pass

    @abstractmethod
    async def update_tenant(self, tenant_id: str, tenant_update: TenantUpdate) -> Optional[TenantInDB]:
        """
        Apply a partial update.

        Returns:
            The updated tenant, None if the tenant doesn't exist
        """
        pass

    @abstractmethod
    async def set_status(self, tenant_id: str, status: TenantStatus) -> bool:
        """Write the tenant status. Returns False when the tenant does not exist."""
        pass

    @abstractmethod
    async def delete_tenant(self, tenant_id: str) -> bool:
        """
        Remove a tenant record.

        Returns:
            True if the tenant was deleted, False if not found
        """
        pass

    @abstractmethod
    async def count_by_status(self) -> Dict[TenantStatus, int]:
        """Number of tenants per status; every status is present in the result."""
        pass

    @abstractmethod
    async def count_created_by_month(self, since: datetime) -> Dict[str, int]:
        """Map "YYYY-MM" to the number of tenants created in that month, from ``since`` on."""
        pass
