# hrm_core/tenants/__init__.py
"""
Tenant registry and lifecycle.

Models and the storage layer are exported here. The lifecycle service
(``tenants.service``) and the routers (``tenants.endpoints``) are imported
from their modules directly.
"""

from .models import (
    Plan,
    Tenant,
    TenantCreate,
    TenantInDB,
    TenantRecordCreate,
    TenantStats,
    TenantStatus,
    TenantUpdate,
)
from .storage_interfaces import AbstractTenantStore
from .sqlite_tenant_store import SQLiteTenantStore, get_sqlite_tenant_store

# Export all public components for external use
__all__ = [
    # Data models for tenant operations
    "Plan",
    "Tenant",
    "TenantCreate",
    "TenantInDB",
    "TenantRecordCreate",
    "TenantStats",
    "TenantStatus",
    "TenantUpdate",
    # Storage layer abstractions and implementations
    "AbstractTenantStore",
    "SQLiteTenantStore",
    "get_sqlite_tenant_store",
]
