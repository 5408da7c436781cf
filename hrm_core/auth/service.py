# hrm_core/auth/service.py
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from .models import LoginResult
from .token_manager import SessionClaims, SessionTokenManagerProtocol
from ..accounts.models import Account, AccountCreate, AccountInDB, Role
from ..accounts.storage_interfaces import AbstractAccountStore
from ..authz.policy import Identity, resolve
from ..errors import (
    AccountInactiveError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    TenantInactiveError,
)
from ..profiles.models import EmployeeProfile
from ..profiles.storage_interfaces import AbstractProfileStore
from ..sessions.revocation_store import AbstractSessionRevocationStore
from ..tenants.models import TenantInDB, TenantStatus
from ..tenants.storage_interfaces import AbstractTenantStore
from ..utils.security import generate_password, hash_password, verify_password

logger = logging.getLogger(__name__)

# verified against on unknown emails so both failure paths cost one hash check
_UNKNOWN_ACCOUNT_HASH = hash_password(generate_password())


@dataclass(frozen=True)
class AuthenticatedSession:
    """A verified session token together with the freshly loaded account."""
    account: AccountInDB
    identity: Identity
    claims: SessionClaims


class SessionService:
    """
    Session issuer.

    Verifies credentials, gates access on the account flags and on the
    health of the account's tenant, and signs session tokens. Every
    request re-resolves the account from the credential store; nothing
    about role, tenant or approval is cached between calls.
    """

    def __init__(
        self,
        account_store: AbstractAccountStore,
        tenant_store: AbstractTenantStore,
        profile_store: AbstractProfileStore,
        token_manager: SessionTokenManagerProtocol,
        revocation_store: AbstractSessionRevocationStore,
    ):
        self.account_store = account_store
        self.tenant_store = tenant_store
        self.profile_store = profile_store
        self.token_manager = token_manager
        self.revocation_store = revocation_store

    async def _require_active_tenant(self, account: AccountInDB) -> Optional[TenantInDB]:
        if account.is_superadmin:
            return None
        tenant = await self.tenant_store.get_tenant(account.tenant_id) if account.tenant_id else None
        if tenant is None or tenant.status != TenantStatus.ACTIVE:
            logger.info(f"Service: Access denied for account {account.account_id}: tenant missing or not active.")
            raise TenantInactiveError()
        return tenant

    async def _check_access_gates(self, account: AccountInDB) -> None:
        """Activation, then tenant health, then approval."""
        if not account.is_active:
            logger.info(f"Service: Access denied for account {account.account_id}: account deactivated.")
            raise AccountInactiveError("Account has been deactivated.")
        await self._require_active_tenant(account)
        if not account.is_approved:
            logger.info(f"Service: Access denied for account {account.account_id}: pending approval.")
            raise AccountInactiveError("Account is pending approval.")

    async def _find_profile(self, account_id: str) -> Optional[EmployeeProfile]:
        try:
            return await self.profile_store.get_profile_by_account(account_id)
        except Exception as e:
            logger.error(f"Service: Linked profile lookup failed for account {account_id}: {e}", exc_info=True)
            return None

    async def login(self, email: str, password: str) -> LoginResult:
        normalized_email = email.strip().lower()
        logger.info("Service: Login attempt.")

        account = await self.account_store.get_account_by_email(normalized_email)
        if account is None:
            await run_in_threadpool(verify_password, password, _UNKNOWN_ACCOUNT_HASH)
            logger.info("Service: Login failed: unknown email.")
            raise InvalidCredentialsError()

        if not account.is_active:
            logger.info(f"Service: Login failed for account {account.account_id}: account deactivated.")
            raise AccountInactiveError("Account has been deactivated.")

        if not await run_in_threadpool(verify_password, password, account.password_hash):
            logger.info(f"Service: Login failed for account {account.account_id}: password mismatch.")
            raise InvalidCredentialsError()

        await self._require_active_tenant(account)

        if not account.is_approved:
            logger.info(f"Service: Login failed for account {account.account_id}: pending approval.")
            raise AccountInactiveError("Account is pending approval.")

        now = datetime.now(timezone.utc)
        await self.account_store.record_login(account.account_id, now)
        account = account.model_copy(update={"last_login": now})

        issued = self.token_manager.issue(account.account_id)
        profile = await self._find_profile(account.account_id)

        logger.info(f"Service: Login succeeded for account {account.account_id} (role '{account.role.value}').")
        return LoginResult(
            token=issued.token,
            expires_at=issued.expires_at,
            account=Account.from_db(account),
            profile=profile,
        )

    async def authenticate(self, token: str) -> AuthenticatedSession:
        """Verify a session token and re-resolve its account from the credential store."""
        claims = self.token_manager.decode(token)

        if await self.revocation_store.is_revoked(claims.jti):
            logger.info(f"Service: Rejected revoked session token {claims.jti}.")
            raise InvalidCredentialsError("Session has been revoked. Please log in again.")

        account = await self.account_store.get_account_by_id(claims.account_id)
        if account is None:
            logger.info(f"Service: Session token references missing account {claims.account_id}.")
            raise InvalidCredentialsError("Invalid session token.")

        await self._check_access_gates(account)
        return AuthenticatedSession(account=account, identity=resolve(account), claims=claims)

    async def current_identity(self, token: str) -> Identity:
        return (await self.authenticate(token)).identity

    async def logout(self, token: Optional[str]) -> None:
        """
        End a session.

        With a revocation backend the token's ``jti`` is listed until the
        token would have expired; otherwise logout is advisory and only
        the client-side cookie is cleared. Invalid tokens are ignored.
        """
        if not token:
            return
        try:
            claims = self.token_manager.decode(token)
        except InvalidCredentialsError:
            logger.debug("Service: Logout with an invalid or expired token; nothing to revoke.")
            return
        remaining = int((claims.expires_at - datetime.now(timezone.utc)).total_seconds())
        await self.revocation_store.revoke(claims.jti, remaining)
        logger.info(f"Service: Logged out account {claims.account_id}.")

    async def change_password(self, identity: Identity, current_password: str, new_password: str) -> None:
        account = await self.account_store.get_account_by_id(identity.account_id)
        if account is None:
            raise NotFoundError("Account not found.")
        if not await run_in_threadpool(verify_password, current_password, account.password_hash):
            logger.info(f"Service: Password change rejected for account {account.account_id}: wrong current password.")
            raise InvalidCredentialsError("Current password is incorrect.")
        password_hash = await run_in_threadpool(hash_password, new_password)
        await self.account_store.update_account(account.account_id, {"password_hash": password_hash})
        logger.info(f"Service: Password changed for account {account.account_id}.")

    async def get_tenant_for(self, account: AccountInDB) -> Optional[TenantInDB]:
        if not account.tenant_id:
            return None
        return await self.tenant_store.get_tenant(account.tenant_id)


async def bootstrap_superadmin(
    account_store: AbstractAccountStore,
    email: str,
    password: str,
    name: str,
) -> AccountInDB:
    """
    Create the first platform superadmin.

    Idempotent for an existing superadmin with the same email. Raises
    DuplicateEmailError when the email belongs to any other account.
    """
    normalized_email = email.strip().lower()
    existing = await account_store.get_account_by_email(normalized_email)
    if existing is not None:
        if existing.is_superadmin:
            logger.info(f"Bootstrap: Superadmin {existing.account_id} already exists.")
            return existing
        raise DuplicateEmailError()

    account = await account_store.create_account(
        AccountCreate(
            email=normalized_email,
            password_hash=await run_in_threadpool(hash_password, password),
            name=name,
            role=Role.SUPERADMIN,
            tenant_id=None,
            is_approved=True,
            is_active=True,
        )
    )
    logger.info(f"Bootstrap: Created superadmin account {account.account_id}.")
    return account
