# hrm_core/profiles/models.py
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import date

from ..authz.policy import TenantScopedFilters


class EmployeeProfileBase(BaseModel):
    name: str
    department: Optional[str] = None
    position: Optional[str] = None
    status: str = "Active"
    join_date: Optional[date] = None


class EmployeeProfileCreate(EmployeeProfileBase):
    """Links an operational employee record to an account of the same tenant."""
    account_id: str
    tenant_id: str


class EmployeeProfile(EmployeeProfileBase):
    """Employee record as returned by the API and attached to a login result."""
    profile_id: str
    account_id: str
    tenant_id: str

    model_config = ConfigDict(from_attributes=True)


class EmployeeFilters(TenantScopedFilters):
    department: Optional[str] = None
    status: Optional[str] = None
