# hrm_core/registration/models.py
from pydantic import BaseModel, EmailStr, Field, SecretStr, field_validator
from typing import Optional

from ..accounts.models import Account, check_password_length
from ..tenants.models import Plan, Tenant


class RegistrationRequest(BaseModel):
    """
    Public signup for a new organization.

    Any ``role`` sent by the client is ignored; registrants always become
    the administrator of their future tenant. When ``password`` is omitted
    one is generated and returned once in the response.
    """
    name: str = Field(min_length=1)
    email: EmailStr
    password: Optional[SecretStr] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    industry: Optional[str] = None
    role: Optional[str] = Field(default=None, description="Ignored.")

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, value: Optional[SecretStr]) -> Optional[SecretStr]:
        return check_password_length(value)


class PendingRegistration(BaseModel):
    account: Account
    generated_password: Optional[str] = Field(
        default=None,
        description="Only present when the server generated the password."
    )
    message: str = "Registration submitted. An administrator will review it shortly."


class ApproveRegistrationRequest(BaseModel):
    account_id: str
    plan: Plan = Plan.BASIC


class ApproveRegistrationResponse(BaseModel):
    message: str = "Tenant registration approved successfully."
    tenant: Tenant


class RejectRegistrationRequest(BaseModel):
    account_id: str
    reason: Optional[str] = None
