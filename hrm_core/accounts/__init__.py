"""
Credential store.

Account records with hashed passwords, roles, tenant bindings and the
approval/activation flags. The service and router live in
``accounts.service`` and ``accounts.endpoints`` and are imported from
there directly.
"""

from .models import (
    Account,
    AccountCreate,
    AccountInDB,
    AccountUpdate,
    Bound,
    PasswordChangeRequest,
    Role,
    TenantAccountCreate,
    Unbound,
    binding_for,
    role_rank,
)
from .storage_interfaces import AbstractAccountStore
from .sqlite_account_store import SQLiteAccountStore, get_sqlite_account_store

__all__ = [
    # Data models
    "Account",
    "AccountCreate",
    "AccountInDB",
    "AccountUpdate",
    "Bound",
    "PasswordChangeRequest",
    "Role",
    "TenantAccountCreate",
    "Unbound",
    "binding_for",
    "role_rank",
    # Storage layer
    "AbstractAccountStore",
    "SQLiteAccountStore",
    "get_sqlite_account_store",
]
