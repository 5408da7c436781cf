# hrm_core/accounts/models.py
from enum import Enum
from pydantic import BaseModel, ConfigDict, EmailStr, Field, SecretStr, field_validator
from typing import Annotated, Literal, Optional, Union
from datetime import datetime


class Role(str, Enum):
    """Fixed role set, highest privilege first."""
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"


ROLE_RANK = {
    Role.SUPERADMIN: 100,
    Role.ADMIN: 80,
    Role.HR: 60,
    Role.MANAGER: 40,
    Role.EMPLOYEE: 20,
}


def role_rank(role: Role) -> int:
    return ROLE_RANK[Role(role)]


MIN_PASSWORD_LENGTH = 6


def check_password_length(value: Optional[SecretStr]) -> Optional[SecretStr]:
    if value is not None and len(value.get_secret_value()) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    return value


class Unbound(BaseModel):
    """Account not attached to any tenant: a superadmin or a pending registration."""
    kind: Literal["unbound"] = "unbound"


class Bound(BaseModel):
    """Account attached to exactly one tenant."""
    kind: Literal["bound"] = "bound"
    tenant_id: str


TenantBinding = Annotated[Union[Unbound, Bound], Field(discriminator="kind")]


def binding_for(tenant_id: Optional[str]) -> Union[Unbound, Bound]:
    return Bound(tenant_id=tenant_id) if tenant_id else Unbound()


class AccountProfile(BaseModel):
    """Contact fields; on a pending registration they carry the prospective company."""
    company: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    industry: Optional[str] = None


class AccountInDB(AccountProfile):
    """Account record as stored in the credential store."""
    account_id: str
    email: str
    password_hash: str
    name: str
    role: Role
    tenant_binding: TenantBinding = Field(default_factory=Unbound)
    is_approved: bool = False
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @property
    def tenant_id(self) -> Optional[str]:
        if isinstance(self.tenant_binding, Bound):
            return self.tenant_binding.tenant_id
        return None

    @property
    def is_superadmin(self) -> bool:
        return self.role == Role.SUPERADMIN

    @property
    def is_pending_registration(self) -> bool:
        return (
            self.role == Role.ADMIN
            and not self.is_approved
            and isinstance(self.tenant_binding, Unbound)
        )


class Account(AccountProfile):
    """Model for account data in API responses. Never carries the password hash."""
    account_id: str
    email: str
    name: str
    role: Role
    tenant_id: Optional[str] = None
    is_approved: bool
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_db(cls, account: AccountInDB) -> "Account":
        return cls(
            account_id=account.account_id,
            email=account.email,
            name=account.name,
            role=account.role,
            tenant_id=account.tenant_id,
            is_approved=account.is_approved,
            is_active=account.is_active,
            company=account.company,
            phone=account.phone,
            address=account.address,
            industry=account.industry,
            last_login=account.last_login,
            created_at=account.created_at,
        )


class AccountCreate(AccountProfile):
    """Internal creation payload; the password is already hashed."""
    email: str
    password_hash: str
    name: str
    role: Role
    tenant_id: Optional[str] = None
    is_approved: bool = False
    is_active: bool = True


class TenantAccountCreate(BaseModel):
    """Payload for adding a teammate to an existing tenant."""
    name: str = Field(min_length=1)
    email: EmailStr
    password: SecretStr
    role: Role = Role.EMPLOYEE
    phone: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, value: SecretStr) -> SecretStr:
        return check_password_length(value)


class AccountUpdate(BaseModel):
    """Partial account update - all fields are optional."""
    name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None


class PasswordChangeRequest(BaseModel):
    current_password: SecretStr
    new_password: SecretStr

    @field_validator("new_password")
    @classmethod
    def validate_password_length(cls, value: SecretStr) -> SecretStr:
        return check_password_length(value)
