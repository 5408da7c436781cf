# hrm_core/tenants/models.py
from enum import Enum
from pydantic import BaseModel, ConfigDict, EmailStr, Field, SecretStr, field_validator
from typing import Optional
from datetime import datetime

from ..accounts.models import check_password_length


class TenantStatus(str, Enum):
    ACTIVE = "Active"
    SUSPENDED = "Suspended"


class Plan(str, Enum):
    BASIC = "Basic"
    PROFESSIONAL = "Professional"
    ENTERPRISE = "Enterprise"


class TenantBase(BaseModel):
    """Base model containing common tenant fields shared across operations."""
    name: str = Field(min_length=1)
    company: str = Field(min_length=1)
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    industry: Optional[str] = None
    plan: Plan = Plan.BASIC


class TenantCreate(TenantBase):
    """
    Model for tenant creation by a superadmin.

    The tenant's administrator account is created together with the tenant.
    """
    email: EmailStr
    admin_name: str = Field(min_length=1)
    admin_email: EmailStr
    admin_password: SecretStr

    @field_validator("admin_password")
    @classmethod
    def validate_password_length(cls, value: SecretStr) -> SecretStr:
        return check_password_length(value)


class TenantRecordCreate(TenantBase):
    """Internal payload for the tenant store; the admin account already exists."""
    status: TenantStatus = TenantStatus.ACTIVE
    admin_account_id: str


class TenantUpdate(BaseModel):
    """Model for partial tenant updates - all fields are optional."""
    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    industry: Optional[str] = None
    plan: Optional[Plan] = None
    status: Optional[TenantStatus] = None


class TenantInDB(TenantBase):
    """Model for tenant data as stored in database."""
    tenant_id: str
    status: TenantStatus
    admin_account_id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Tenant(TenantInDB):
    """Model for tenant data in API responses."""
    pass


class TenantStats(BaseModel):
    total: int
    active: int
    suspended: int
    pending: int = Field(description="Registrations waiting for approval.")


class TenantUsage(BaseModel):
    """Account activity of one tenant."""
    tenant_id: str
    name: str
    active: int = 0
    inactive: int = 0


class TenantGrowthPoint(BaseModel):
    month: str = Field(description="Calendar month as YYYY-MM (UTC).")
    count: int
