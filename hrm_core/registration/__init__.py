"""
Registration and approval workflow: public signup, review of pending
registrations and their promotion into tenants.
"""

from .models import (
    ApproveRegistrationRequest,
    ApproveRegistrationResponse,
    PendingRegistration,
    RegistrationRequest,
    RejectRegistrationRequest,
)

__all__ = [
    "ApproveRegistrationRequest",
    "ApproveRegistrationResponse",
    "PendingRegistration",
    "RegistrationRequest",
    "RejectRegistrationRequest",
]
