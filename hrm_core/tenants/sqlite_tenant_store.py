# hrm_core/tenants/sqlite_tenant_store.py
import sqlite3
import logging
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from uuid import uuid4

from .storage_interfaces import AbstractTenantStore
from .models import Plan, TenantInDB, TenantRecordCreate, TenantStatus, TenantUpdate
from ..storage.sqlite_store_base import SQLiteStoreBase, parse_timestamp

logger = logging.getLogger(__name__)

_TENANT_COLUMNS = """
    tenant_id, name, company, email, phone, address, industry, plan, status,
    admin_account_id, created_at, updated_at
"""


class SQLiteTenantStore(SQLiteStoreBase, AbstractTenantStore):
    """SQLite implementation of the tenant registry."""

    def _row_to_tenant_in_db(self, row: Optional[sqlite3.Row]) -> Optional[TenantInDB]:
        if not row:
            return None
        return TenantInDB(
            tenant_id=row["tenant_id"],
            name=row["name"],
            company=row["company"],
            email=row["email"],
            phone=row["phone"],
            address=row["address"],
            industry=row["industry"],
            plan=Plan(row["plan"]),
            status=TenantStatus(row["status"]),
            admin_account_id=row["admin_account_id"],
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )

    async def create_tenant(self, tenant_create: TenantRecordCreate) -> TenantInDB:
        now = datetime.now(timezone.utc)
        tenant_id = uuid4().hex
        query = f"""
            INSERT INTO tenants ({_TENANT_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            tenant_id,
            tenant_create.name,
            tenant_create.company,
            tenant_create.email,
            tenant_create.phone,
            tenant_create.address,
            tenant_create.industry,
            tenant_create.plan.value,
            tenant_create.status.value,
            tenant_create.admin_account_id,
            now.isoformat(),
            now.isoformat(),
        )
        await self._execute_query(query, params)
        logger.info(f"Created tenant {tenant_id} ('{tenant_create.name}').")
        return TenantInDB(
            tenant_id=tenant_id,
            created_at=now,
            updated_at=now,
            **tenant_create.model_dump(),
        )

    async def get_tenant(self, tenant_id: str) -> Optional[TenantInDB]:
        query = f"SELECT {_TENANT_COLUMNS} FROM tenants WHERE tenant_id = ?"
        row = await self._fetchone(query, (tenant_id,))
        return self._row_to_tenant_in_db(row)

    async def list_tenants(self, skip: int = 0, limit: int = 100) -> List[TenantInDB]:
        query = f"SELECT {_TENANT_COLUMNS} FROM tenants ORDER BY created_at DESC LIMIT ? OFFSET ?"
        rows = await self._fetchall(query, (limit, skip))
        return [self._row_to_tenant_in_db(row) for row in rows]

    async def update_tenant(self, tenant_id: str, tenant_update: TenantUpdate) -> Optional[TenantInDB]:
        """
        Update an existing tenant with partial data.

        Only fields explicitly set in the update are written.
        """
        current = await self.get_tenant(tenant_id)
        if not current:
            return None

        update_data = tenant_update.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            return current

        set_clauses = []
        params: List[Any] = []
        for key, value in update_data.items():
            set_clauses.append(f"{key} = ?")
            params.append(value.value if isinstance(value, (Plan, TenantStatus)) else value)
        set_clauses.append("updated_at = ?")
        params.append(datetime.now(timezone.utc).isoformat())
        params.append(tenant_id)

        query = f"UPDATE tenants SET {', '.join(set_clauses)} WHERE tenant_id = ?"
        await self._execute_query(query, tuple(params))
        return await self.get_tenant(tenant_id)

    async def set_status(self, tenant_id: str, status: TenantStatus) -> bool:
        query = "UPDATE tenants SET status = ?, updated_at = ? WHERE tenant_id = ?"
        now_iso = datetime.now(timezone.utc).isoformat()
        cursor = await self._execute_query(query, (status.value, now_iso, tenant_id))
        return cursor.rowcount > 0

    async def delete_tenant(self, tenant_id: str) -> bool:
        cursor = await self._execute_query("DELETE FROM tenants WHERE tenant_id = ?", (tenant_id,))
        return cursor.rowcount > 0

    async def count_by_status(self) -> Dict[TenantStatus, int]:
        rows = await self._fetchall("SELECT status, COUNT(*) AS n FROM tenants GROUP BY status")
        counts = {status: 0 for status in TenantStatus}
        for row in rows:
            counts[TenantStatus(row["status"])] = int(row["n"])
        return counts

    async def count_created_by_month(self, since: datetime) -> Dict[str, int]:
        query = """
            SELECT substr(created_at, 1, 7) AS month, COUNT(*) AS n
            FROM tenants
            WHERE created_at >= ?
            GROUP BY month
        """
        rows = await self._fetchall(query, (since.isoformat(),))
        return {row["month"]: int(row["n"]) for row in rows}


# Singleton instance management
_sqlite_tenant_store_instance: Optional[SQLiteTenantStore] = None


async def get_sqlite_tenant_store() -> SQLiteTenantStore:
    """Get or create the singleton SQLiteTenantStore instance."""
    global _sqlite_tenant_store_instance
    if _sqlite_tenant_store_instance is None:
        _sqlite_tenant_store_instance = SQLiteTenantStore()
        await _sqlite_tenant_store_instance.initialize()
    return _sqlite_tenant_store_instance
