"""
Linked employee profiles.

Operational employee records attached to accounts. The core reads them at
login, lists them through the authorization engine and deletes them with
their tenant.
"""

from .models import EmployeeFilters, EmployeeProfile, EmployeeProfileCreate
from .storage_interfaces import AbstractProfileStore
from .sqlite_profile_store import SQLiteProfileStore, get_sqlite_profile_store

__all__ = [
    "EmployeeFilters",
    "EmployeeProfile",
    "EmployeeProfileCreate",
    "AbstractProfileStore",
    "SQLiteProfileStore",
    "get_sqlite_profile_store",
]
