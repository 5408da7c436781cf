# hrm_core/auth/__init__.py
"""
Session issuer.

Verifies credentials, gates access on account flags and tenant health,
and signs the session tokens every other route authenticates with.
"""

# Request and response models
from .models import CurrentAccountResponse, LoginRequest, LoginResult, MessageResponse

# Token signing and verification
from .token_manager import (
    DefaultSessionTokenManager,
    IssuedToken,
    SessionClaims,
    SessionTokenManagerProtocol,
)

# Login, per-request resolution and superadmin bootstrap
from .service import AuthenticatedSession, SessionService, bootstrap_superadmin

__all__ = [
    # Data models
    "CurrentAccountResponse",
    "LoginRequest",
    "LoginResult",
    "MessageResponse",

    # Token management
    "DefaultSessionTokenManager",
    "IssuedToken",
    "SessionClaims",
    "SessionTokenManagerProtocol",

    # Service layer
    "AuthenticatedSession",
    "SessionService",
    "bootstrap_superadmin",
]
