# hrm_core/profiles/storage_interfaces.py
from abc import ABC, abstractmethod
from typing import List, Optional

from .models import EmployeeFilters, EmployeeProfile, EmployeeProfileCreate


class AbstractProfileStore(ABC):
    """Interface of the linked employee profile store."""

    @abstractmethod
    async def initialize(self) -> None:
        pass

    @abstractmethod
    async def teardown(self) -> None:
        pass

    @abstractmethod
    async def create_profile(self, profile_create: EmployeeProfileCreate) -> EmployeeProfile:
        """
        Raises:
            ValueError: If the account already has a linked profile
        """
        pass

    @abstractmethod
    async def get_profile_by_account(self, account_id: str) -> Optional[EmployeeProfile]:
        pass

    @abstractmethod
    async def list_profiles(self, filters: EmployeeFilters) -> List[EmployeeProfile]:
        """List profiles matching already-authorized filters."""
        pass

    @abstractmethod
    async def delete_profiles_for_tenant(self, tenant_id: str) -> int:
        pass
