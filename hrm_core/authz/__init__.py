"""
Authorization engine.

A single policy module used by every tenant-scoped handler: list queries are
rescoped to the caller's tenant and mutations are allowed or denied.
"""

from .policy import (
    Decision,
    Identity,
    TenantScopedFilters,
    TenantScopedResource,
    authorize_list,
    authorize_mutation,
    enforce,
    resolve,
)

__all__ = [
    "Decision",
    "Identity",
    "TenantScopedFilters",
    "TenantScopedResource",
    "authorize_list",
    "authorize_mutation",
    "enforce",
    "resolve",
]
