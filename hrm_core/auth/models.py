# hrm_core/auth/models.py
from pydantic import BaseModel, Field, SecretStr
from typing import Optional
from datetime import datetime

from ..accounts.models import Account
from ..profiles.models import EmployeeProfile
from ..tenants.models import Tenant


class LoginRequest(BaseModel):
    """Credentials for a login. The email is matched case-insensitively."""
    email: str = Field(min_length=1)
    password: SecretStr


class LoginResult(BaseModel):
    """Outcome of a successful login."""
    token: str = Field(description="Signed session token; also set as an http-only cookie.")
    expires_at: datetime
    account: Account
    profile: Optional[EmployeeProfile] = Field(
        default=None,
        description="Linked employee record, when the account has one."
    )


class CurrentAccountResponse(BaseModel):
    """Response model for the caller's own identity."""
    account: Account
    tenant: Optional[Tenant] = None


class MessageResponse(BaseModel):
    message: str
