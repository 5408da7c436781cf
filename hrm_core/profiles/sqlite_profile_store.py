# hrm_core/profiles/sqlite_profile_store.py
import sqlite3
import logging
from datetime import date
from typing import Any, List, Optional
from uuid import uuid4

from .models import EmployeeFilters, EmployeeProfile, EmployeeProfileCreate
from .storage_interfaces import AbstractProfileStore
from ..storage.sqlite_store_base import SQLiteStoreBase

logger = logging.getLogger(__name__)

_PROFILE_COLUMNS = "profile_id, account_id, tenant_id, name, department, position, status, join_date"


class SQLiteProfileStore(SQLiteStoreBase, AbstractProfileStore):
    """SQLite implementation of the linked employee profile store."""

    def _row_to_profile(self, row: Optional[sqlite3.Row]) -> Optional[EmployeeProfile]:
        if not row:
            return None
        join_date = row["join_date"]
        return EmployeeProfile(
            profile_id=row["profile_id"],
            account_id=row["account_id"],
            tenant_id=row["tenant_id"],
            name=row["name"],
            department=row["department"],
            position=row["position"],
            status=row["status"],
            join_date=date.fromisoformat(join_date) if join_date else None,
        )

    async def create_profile(self, profile_create: EmployeeProfileCreate) -> EmployeeProfile:
        profile_id = uuid4().hex
        query = f"INSERT INTO employee_profiles ({_PROFILE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
        params = (
            profile_id,
            profile_create.account_id,
            profile_create.tenant_id,
            profile_create.name,
            profile_create.department,
            profile_create.position,
            profile_create.status,
            profile_create.join_date.isoformat() if profile_create.join_date else None,
        )
        try:
            await self._execute_query(query, params)
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Account '{profile_create.account_id}' already has a linked profile.") from e
        logger.info(f"Created employee profile {profile_id} for account {profile_create.account_id}.")
        return EmployeeProfile(profile_id=profile_id, **profile_create.model_dump())

    async def get_profile_by_account(self, account_id: str) -> Optional[EmployeeProfile]:
        query = f"SELECT {_PROFILE_COLUMNS} FROM employee_profiles WHERE account_id = ?"
        row = await self._fetchone(query, (account_id,))
        return self._row_to_profile(row)

    async def list_profiles(self, filters: EmployeeFilters) -> List[EmployeeProfile]:
        clauses: List[str] = []
        params: List[Any] = []
        if filters.tenant_id is not None:
            clauses.append("tenant_id = ?")
            params.append(filters.tenant_id)
        if filters.department is not None:
            clauses.append("department = ?")
            params.append(filters.department)
        if filters.status is not None:
            clauses.append("status = ?")
            params.append(filters.status)

        where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        query = f"SELECT {_PROFILE_COLUMNS} FROM employee_profiles {where_sql} ORDER BY name LIMIT ? OFFSET ?"
        params.extend([filters.limit, filters.skip])
        rows = await self._fetchall(query, tuple(params))
        return [self._row_to_profile(row) for row in rows]

    async def delete_profiles_for_tenant(self, tenant_id: str) -> int:
        cursor = await self._execute_query("DELETE FROM employee_profiles WHERE tenant_id = ?", (tenant_id,))
        logger.info(f"Deleted {cursor.rowcount} employee profiles of tenant {tenant_id}.")
        return cursor.rowcount


# Singleton instance management
_sqlite_profile_store_instance: Optional[SQLiteProfileStore] = None


async def get_sqlite_profile_store() -> SQLiteProfileStore:
    """Get or create the singleton SQLiteProfileStore instance."""
    global _sqlite_profile_store_instance
    if _sqlite_profile_store_instance is None:
        _sqlite_profile_store_instance = SQLiteProfileStore()
        await _sqlite_profile_store_instance.initialize()
    return _sqlite_profile_store_instance
