# hrm_core/authz/policy.py
"""
Role- and tenant-scoped authorization.

Every handler that lists or mutates tenant-scoped data asks this module for
a decision before touching its store. The functions are pure: they only look
at the caller's resolved identity and the facts the caller passes in, and
never cache anything between requests.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, TypeVar

from pydantic import BaseModel, Field

from ..accounts.models import AccountInDB, Role, role_rank
from ..errors import ForbiddenError

logger = logging.getLogger(__name__)


class TenantScopedResource(str, Enum):
    """Resources whose rows belong to exactly one tenant."""
    ACCOUNTS = "accounts"
    EMPLOYEES = "employees"
    ATTENDANCE = "attendance"
    LEAVE = "leave"
    PAYROLL = "payroll"


@dataclass(frozen=True)
class Identity:
    """Caller identity re-resolved from the credential store on every request."""
    account_id: str
    role: Role
    tenant_scope: Optional[str]

    @property
    def is_superadmin(self) -> bool:
        return self.role == Role.SUPERADMIN


class TenantScopedFilters(BaseModel):
    """Base for list filters of tenant-scoped resources."""
    tenant_id: Optional[str] = None
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=100, ge=1, le=500)


FiltersT = TypeVar("FiltersT", bound=TenantScopedFilters)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(allowed=False, reason=reason)


def resolve(account: AccountInDB) -> Identity:
    """Superadmins are unrestricted; everyone else is scoped to their own tenant."""
    tenant_scope = None if account.is_superadmin else account.tenant_id
    return Identity(account_id=account.account_id, role=account.role, tenant_scope=tenant_scope)


def authorize_list(
    identity: Identity,
    filters: FiltersT,
    resource: TenantScopedResource = TenantScopedResource.ACCOUNTS,
) -> FiltersT:
    """
    Produce the effective filter for a list/search query.

    Superadmin filters pass through unchanged. For anyone else the caller's
    tenant is forced into the filter, silently replacing any tenant the
    client asked for.
    """
    if identity.is_superadmin:
        return filters

    if identity.tenant_scope is None:
        logger.warning(
            f"Authz: account {identity.account_id} has no tenant scope; denying list of {resource.value}."
        )
        raise ForbiddenError()

    if filters.tenant_id and filters.tenant_id != identity.tenant_scope:
        logger.info(
            f"Authz: rescoping {resource.value} list for account {identity.account_id} "
            f"from requested tenant to caller tenant."
        )
    return filters.model_copy(update={"tenant_id": identity.tenant_scope})


def authorize_mutation(
    identity: Identity,
    target_tenant_id: Optional[str],
    target_role: Optional[Role] = None,
    *,
    target_account_id: Optional[str] = None,
    changes: Optional[Mapping[str, Any]] = None,
    deleting: bool = False,
    target_is_last_admin: bool = False,
) -> Decision:
    """
    Decide whether the caller may mutate a resource owned by ``target_tenant_id``.

    ``target_role`` and ``target_account_id`` describe the target when it is
    an account. ``changes`` maps field names to their new values; ``role``
    and ``is_active`` are the privileged fields. ``target_is_last_admin`` is
    supplied by the caller, which has store access: for a tenant admin it
    means the last active admin of that tenant, for a superadmin the last
    active superadmin of the platform.
    """
    changes = changes or {}
    new_role = Role(changes["role"]) if changes.get("role") is not None else None
    privileged = deleting or "is_active" in changes or new_role is not None
    is_self = target_account_id is not None and target_account_id == identity.account_id

    if is_self and privileged:
        return Decision.deny("cannot change own role or activation")

    if not identity.is_superadmin:
        if identity.tenant_scope is None or target_tenant_id != identity.tenant_scope:
            return Decision.deny("target belongs to another tenant")

        if target_role == Role.SUPERADMIN and privileged:
            return Decision.deny("non-superadmin cannot change a superadmin account")

        if new_role is not None and role_rank(new_role) >= role_rank(identity.role):
            return Decision.deny("cannot grant a role at or above the caller's own")

        if not is_self and target_role is not None and role_rank(target_role) >= role_rank(identity.role):
            return Decision.deny("target role is at or above the caller's own")

    # superadmins carry no tenant, so the role never moves in either direction
    if target_role == Role.SUPERADMIN and new_role is not None and new_role != Role.SUPERADMIN:
        return Decision.deny("superadmin accounts cannot be demoted")

    if new_role == Role.SUPERADMIN and (target_role != Role.SUPERADMIN or target_tenant_id is not None):
        return Decision.deny("tenant accounts cannot be superadmins")

    if target_role in (Role.ADMIN, Role.SUPERADMIN) and target_is_last_admin:
        demoting = new_role is not None and new_role != target_role
        deactivating = changes.get("is_active") is False
        if deleting or demoting or deactivating:
            return Decision.deny(f"cannot remove the last active {target_role.value}")

    return Decision.allow()


def enforce(decision: Decision, identity: Optional[Identity] = None) -> None:
    """Raise a generic Forbidden for a deny; the reason is only logged."""
    if decision.allowed:
        return
    who = identity.account_id if identity else "unknown"
    logger.warning(f"Authz: denied mutation for account {who}: {decision.reason}")
    raise ForbiddenError()
