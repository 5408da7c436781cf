# hrm_core/auth/dependencies.py
import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, Request as FastAPIRequest

from .service import AuthenticatedSession, SessionService
from .token_manager import DefaultSessionTokenManager, SessionTokenManagerProtocol
from ..accounts.storage_interfaces import AbstractAccountStore
from ..authz.policy import Identity
from ..dependencies import (
    get_account_store_dependency,
    get_profile_store_dependency,
    get_revocation_store_dependency,
    get_tenant_store_dependency,
)
from ..errors import ForbiddenError, InvalidCredentialsError
from ..profiles.storage_interfaces import AbstractProfileStore
from ..sessions.revocation_store import AbstractSessionRevocationStore
from ..settings import settings
from ..tenants.storage_interfaces import AbstractTenantStore

logger = logging.getLogger(__name__)


def get_session_token_manager_dependency() -> SessionTokenManagerProtocol:
    """Dependency provider for the session token manager."""
    return DefaultSessionTokenManager()


async def get_session_service(
    account_store: Annotated[AbstractAccountStore, Depends(get_account_store_dependency)],
    tenant_store: Annotated[AbstractTenantStore, Depends(get_tenant_store_dependency)],
    profile_store: Annotated[AbstractProfileStore, Depends(get_profile_store_dependency)],
    token_manager: Annotated[SessionTokenManagerProtocol, Depends(get_session_token_manager_dependency)],
    revocation_store: Annotated[AbstractSessionRevocationStore, Depends(get_revocation_store_dependency)],
) -> SessionService:
    """Factory function to create SessionService with injected dependencies."""
    return SessionService(account_store, tenant_store, profile_store, token_manager, revocation_store)


def extract_session_token(request: FastAPIRequest, authorization: Optional[str]) -> Optional[str]:
    """
    Find the session token on a request.

    The ``Authorization: Bearer`` header wins over the session cookie when
    both are present.
    """
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return request.cookies.get(settings.session_cookie_name) or None


async def get_current_session(
    request: FastAPIRequest,
    service: Annotated[SessionService, Depends(get_session_service)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> AuthenticatedSession:
    """Authenticates the caller from a Bearer header or the session cookie."""
    token = extract_session_token(request, authorization)
    if not token:
        logger.info(f"Auth: No session token on {request.method} {request.url.path}.")
        raise InvalidCredentialsError("Not authenticated.")
    return await service.authenticate(token)


async def get_current_identity(
    session: Annotated[AuthenticatedSession, Depends(get_current_session)],
) -> Identity:
    return session.identity


async def require_superadmin(
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> Identity:
    """Restricts a route to platform superadmins."""
    if not identity.is_superadmin:
        logger.warning(f"Auth: Account {identity.account_id} denied superadmin-only route.")
        raise ForbiddenError()
    return identity
