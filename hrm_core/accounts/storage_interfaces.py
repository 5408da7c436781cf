# hrm_core/accounts/storage_interfaces.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .models import AccountCreate, AccountInDB, Role


class AbstractAccountStore(ABC):
    """
    Interface of the credential store.

    Holds account records: hashed password, role, tenant binding and the
    approval/activation flags. The bulk methods operate on every account of
    one tenant and are the building blocks of the tenant lifecycle cascades;
    they are idempotent by construction.
    """

    @abstractmethod
    async def initialize(self) -> None:
        pass

    @abstractmethod
    async def teardown(self) -> None:
        pass

    @abstractmethod
    async def create_account(self, account_create: AccountCreate) -> AccountInDB:
        """
        Persist a new account.

        Raises:
            ValueError: If the email is already registered
        """
        pass

    @abstractmethod
    async def get_account_by_id(self, account_id: str) -> Optional[AccountInDB]:
        pass

    @abstractmethod
    async def get_account_by_email(self, email: str) -> Optional[AccountInDB]:
        """Lookup is case-insensitive."""
        pass

    @abstractmethod
    async def list_accounts(
        self,
        tenant_id: Optional[str] = None,
        role: Optional[Role] = None,
        is_approved: Optional[bool] = None,
        is_active: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[AccountInDB]:
        """List accounts, newest first. ``tenant_id=None`` means no tenant filter."""
        pass

    @abstractmethod
    async def list_pending_registrations(self) -> List[AccountInDB]:
        """Accounts with role admin, not approved and bound to no tenant."""
        pass

    @abstractmethod
    async def count_pending_registrations(self) -> int:
        pass

    @abstractmethod
    async def update_account(self, account_id: str, fields: Dict[str, Any]) -> Optional[AccountInDB]:
        """Apply a partial update; returns None when the account does not exist."""
        pass

    @abstractmethod
    async def bind_to_tenant(self, account_id: str, tenant_id: str, is_approved: bool = True) -> bool:
        pass

    @abstractmethod
    async def set_approval_for_tenant(self, tenant_id: str, is_approved: bool) -> int:
        """Set is_approved on every non-superadmin account of the tenant. Returns the row count."""
        pass

    @abstractmethod
    async def record_login(self, account_id: str, when: datetime) -> None:
        pass

    @abstractmethod
    async def delete_account(self, account_id: str) -> bool:
        pass

    @abstractmethod
    async def delete_accounts_for_tenant(self, tenant_id: str) -> int:
        """Delete every non-superadmin account of the tenant. Returns the row count."""
        pass

    @abstractmethod
    async def count_active_admins(self, tenant_id: str) -> int:
        pass

    @abstractmethod
    async def count_active_superadmins(self) -> int:
        pass

    @abstractmethod
    async def count_accounts_by_tenant(self) -> Dict[str, Tuple[int, int]]:
        """Map tenant_id to (active, inactive) counts of its non-superadmin accounts."""
        pass
