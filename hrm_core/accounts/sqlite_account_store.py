# hrm_core/accounts/sqlite_account_store.py
import sqlite3
import logging
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime, timezone
from uuid import uuid4

from .storage_interfaces import AbstractAccountStore
from .models import AccountCreate, AccountInDB, Role, binding_for
from ..storage.sqlite_store_base import SQLiteStoreBase, parse_timestamp

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = """
    account_id, email, password_hash, name, role, tenant_id, is_approved, is_active,
    company, phone, address, industry, last_login, created_at, updated_at
"""

# Columns update_account() may touch
_UPDATABLE_COLUMNS = {
    "name", "phone", "role", "is_active", "is_approved", "password_hash",
    "company", "address", "industry",
}


class SQLiteAccountStore(SQLiteStoreBase, AbstractAccountStore):
    """SQLite implementation of the credential store."""

    def _row_to_account_in_db(self, row: Optional[sqlite3.Row]) -> Optional[AccountInDB]:
        if not row:
            return None
        return AccountInDB(
            account_id=row["account_id"],
            email=row["email"],
            password_hash=row["password_hash"],
            name=row["name"],
            role=Role(row["role"]),
            tenant_binding=binding_for(row["tenant_id"]),
            is_approved=bool(row["is_approved"]),
            is_active=bool(row["is_active"]),
            company=row["company"],
            phone=row["phone"],
            address=row["address"],
            industry=row["industry"],
            last_login=parse_timestamp(row["last_login"]),
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )

    async def create_account(self, account_create: AccountCreate) -> AccountInDB:
        """
        Create a new account.

        Raises:
            ValueError: If an account with the same email already exists
        """
        email = account_create.email.strip().lower()
        if await self.get_account_by_email(email):
            raise ValueError(f"Account with email '{email}' already exists.")

        now = datetime.now(timezone.utc)
        account_id = uuid4().hex
        query = f"""
            INSERT INTO accounts ({_ACCOUNT_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        params = (
            account_id,
            email,
            account_create.password_hash,
            account_create.name,
            account_create.role.value,
            account_create.tenant_id,
            int(account_create.is_approved),
            int(account_create.is_active),
            account_create.company,
            account_create.phone,
            account_create.address,
            account_create.industry,
            None,
            now.isoformat(),
            now.isoformat(),
        )
        try:
            await self._execute_query(query, params)
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Account with email '{email}' already exists.") from e

        logger.info(f"Created account {account_id} with role '{account_create.role.value}'.")
        return AccountInDB(
            account_id=account_id,
            email=email,
            password_hash=account_create.password_hash,
            name=account_create.name,
            role=account_create.role,
            tenant_binding=binding_for(account_create.tenant_id),
            is_approved=account_create.is_approved,
            is_active=account_create.is_active,
            company=account_create.company,
            phone=account_create.phone,
            address=account_create.address,
            industry=account_create.industry,
            created_at=now,
            updated_at=now,
        )

    async def get_account_by_id(self, account_id: str) -> Optional[AccountInDB]:
        query = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_id = ?"
        row = await self._fetchone(query, (account_id,))
        return self._row_to_account_in_db(row)

    async def get_account_by_email(self, email: str) -> Optional[AccountInDB]:
        query = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = ?"
        row = await self._fetchone(query, (email.strip().lower(),))
        return self._row_to_account_in_db(row)

    async def list_accounts(
        self,
        tenant_id: Optional[str] = None,
        role: Optional[Role] = None,
        is_approved: Optional[bool] = None,
        is_active: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[AccountInDB]:
        clauses: List[str] = []
        params: List[Any] = []
        if tenant_id is not None:
            clauses.append("tenant_id = ?")
            params.append(tenant_id)
        if role is not None:
            clauses.append("role = ?")
            params.append(Role(role).value)
        if is_approved is not None:
            clauses.append("is_approved = ?")
            params.append(int(is_approved))
        if is_active is not None:
            clauses.append("is_active = ?")
            params.append(int(is_active))

        where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        query = f"""
            SELECT {_ACCOUNT_COLUMNS} FROM accounts
            {where_sql}
            ORDER BY created_at DESC
            LIMIT ? OFFSET ?
        """
        params.extend([limit, skip])
        rows = await self._fetchall(query, tuple(params))
        return [self._row_to_account_in_db(row) for row in rows]

    async def list_pending_registrations(self) -> List[AccountInDB]:
        query = f"""
            SELECT {_ACCOUNT_COLUMNS} FROM accounts
            WHERE role = ? AND is_approved = 0 AND tenant_id IS NULL
            ORDER BY created_at ASC
        """
        rows = await self._fetchall(query, (Role.ADMIN.value,))
        return [self._row_to_account_in_db(row) for row in rows]

    async def count_pending_registrations(self) -> int:
        query = "SELECT COUNT(*) FROM accounts WHERE role = ? AND is_approved = 0 AND tenant_id IS NULL"
        row = await self._fetchone(query, (Role.ADMIN.value,))
        return int(row[0])

    async def update_account(self, account_id: str, fields: Dict[str, Any]) -> Optional[AccountInDB]:
        """
        Update an existing account with partial data.

        Returns:
            Updated AccountInDB or None if the account was not found
        """
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update account fields: {sorted(unknown)}")

        current = await self.get_account_by_id(account_id)
        if not current:
            return None
        if not fields:
            return current

        set_clauses = []
        params: List[Any] = []
        for key, value in fields.items():
            set_clauses.append(f"{key} = ?")
            if key in ("is_active", "is_approved"):
                params.append(int(bool(value)))
            elif key == "role":
                params.append(Role(value).value)
            else:
                params.append(value)
        set_clauses.append("updated_at = ?")
        params.append(datetime.now(timezone.utc).isoformat())
        params.append(account_id)

        query = f"UPDATE accounts SET {', '.join(set_clauses)} WHERE account_id = ?"
        await self._execute_query(query, tuple(params))
        return await self.get_account_by_id(account_id)

    async def bind_to_tenant(self, account_id: str, tenant_id: str, is_approved: bool = True) -> bool:
        query = "UPDATE accounts SET tenant_id = ?, is_approved = ?, updated_at = ? WHERE account_id = ?"
        now_iso = datetime.now(timezone.utc).isoformat()
        cursor = await self._execute_query(query, (tenant_id, int(is_approved), now_iso, account_id))
        return cursor.rowcount > 0

    async def set_approval_for_tenant(self, tenant_id: str, is_approved: bool) -> int:
        query = """
            UPDATE accounts SET is_approved = ?, updated_at = ?
            WHERE tenant_id = ? AND role != ?
        """
        now_iso = datetime.now(timezone.utc).isoformat()
        cursor = await self._execute_query(
            query, (int(is_approved), now_iso, tenant_id, Role.SUPERADMIN.value)
        )
        logger.info(f"Set is_approved={is_approved} on {cursor.rowcount} accounts of tenant {tenant_id}.")
        return cursor.rowcount

    async def record_login(self, account_id: str, when: datetime) -> None:
        query = "UPDATE accounts SET last_login = ? WHERE account_id = ?"
        await self._execute_query(query, (when.isoformat(), account_id))

    async def delete_account(self, account_id: str) -> bool:
        cursor = await self._execute_query("DELETE FROM accounts WHERE account_id = ?", (account_id,))
        return cursor.rowcount > 0

    async def delete_accounts_for_tenant(self, tenant_id: str) -> int:
        query = "DELETE FROM accounts WHERE tenant_id = ? AND role != ?"
        cursor = await self._execute_query(query, (tenant_id, Role.SUPERADMIN.value))
        logger.info(f"Deleted {cursor.rowcount} accounts of tenant {tenant_id}.")
        return cursor.rowcount

    async def count_active_admins(self, tenant_id: str) -> int:
        query = "SELECT COUNT(*) FROM accounts WHERE tenant_id = ? AND role = ? AND is_active = 1"
        row = await self._fetchone(query, (tenant_id, Role.ADMIN.value))
        return int(row[0])

    async def count_active_superadmins(self) -> int:
        query = "SELECT COUNT(*) FROM accounts WHERE role = ? AND is_active = 1"
        row = await self._fetchone(query, (Role.SUPERADMIN.value,))
        return int(row[0])

    async def count_accounts_by_tenant(self) -> Dict[str, Tuple[int, int]]:
        query = """
            SELECT tenant_id,
                   SUM(CASE WHEN is_active = 1 THEN 1 ELSE 0 END) AS active,
                   SUM(CASE WHEN is_active = 0 THEN 1 ELSE 0 END) AS inactive
            FROM accounts
            WHERE tenant_id IS NOT NULL AND role != ?
            GROUP BY tenant_id
        """
        rows = await self._fetchall(query, (Role.SUPERADMIN.value,))
        return {row["tenant_id"]: (int(row["active"]), int(row["inactive"])) for row in rows}


# Singleton instance management
_sqlite_account_store_instance: Optional[SQLiteAccountStore] = None


async def get_sqlite_account_store() -> SQLiteAccountStore:
    """Get or create the singleton SQLiteAccountStore instance."""
    global _sqlite_account_store_instance
    if _sqlite_account_store_instance is None:
        _sqlite_account_store_instance = SQLiteAccountStore()
        await _sqlite_account_store_instance.initialize()
    return _sqlite_account_store_instance
