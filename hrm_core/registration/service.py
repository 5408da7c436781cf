# hrm_core/registration/service.py
import logging
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool

from .models import PendingRegistration, RegistrationRequest
from ..accounts.models import Account, AccountCreate, AccountInDB, Role
from ..accounts.storage_interfaces import AbstractAccountStore
from ..errors import DuplicateEmailError, InvariantViolationError, NotFoundError
from ..notifications.publisher import (
    SUPERADMIN_CHANNEL,
    AbstractEventPublisher,
    account_channel,
    publish_after_commit,
)
from ..storage.sqlite_base import sqlite_transaction
from ..tenants.models import Plan, TenantInDB, TenantRecordCreate, TenantStatus
from ..tenants.storage_interfaces import AbstractTenantStore
from ..utils.security import generate_password, hash_password

logger = logging.getLogger(__name__)


class RegistrationService:
    """
    Registration and approval workflow.

    A registration creates an unapproved ``admin`` account bound to no
    tenant. Approval creates the tenant and binds the account to it as one
    unit of work; rejection deletes the pending account.
    """

    def __init__(
        self,
        account_store: AbstractAccountStore,
        tenant_store: AbstractTenantStore,
        publisher: AbstractEventPublisher,
    ):
        self.account_store = account_store
        self.tenant_store = tenant_store
        self.publisher = publisher

    async def submit_registration(self, request: RegistrationRequest) -> PendingRegistration:
        email = request.email.strip().lower()
        logger.info(f"Service: Registration submitted for company '{request.company}'.")

        if request.role and request.role != Role.ADMIN.value:
            logger.info(f"Service: Ignoring requested role '{request.role}' on registration.")

        if await self.account_store.get_account_by_email(email):
            logger.info("Service: Registration rejected: email already registered.")
            raise DuplicateEmailError()

        generated_password: Optional[str] = None
        if request.password is None:
            generated_password = generate_password()
            plain_password = generated_password
        else:
            plain_password = request.password.get_secret_value()
        password_hash = await run_in_threadpool(hash_password, plain_password)

        try:
            account = await self.account_store.create_account(
                AccountCreate(
                    email=email,
                    password_hash=password_hash,
                    name=request.name,
                    role=Role.ADMIN,
                    tenant_id=None,
                    is_approved=False,
                    is_active=True,
                    company=request.company,
                    phone=request.phone,
                    address=request.address,
                    industry=request.industry,
                )
            )
        except ValueError as ve:
            logger.warning(f"Service: Registration failed: {ve}")
            raise DuplicateEmailError() from ve

        publish_after_commit(
            self.publisher,
            SUPERADMIN_CHANNEL,
            "registration.submitted",
            {"account_id": account.account_id, "email": account.email, "company": account.company},
        )
        return PendingRegistration(account=Account.from_db(account), generated_password=generated_password)

    async def list_pending(self) -> List[AccountInDB]:
        logger.info("Service: Listing pending registrations.")
        return await self.account_store.list_pending_registrations()

    async def _get_pending(self, account_id: str) -> AccountInDB:
        account = await self.account_store.get_account_by_id(account_id)
        if account is None:
            raise NotFoundError("Account not found.")
        if not account.is_pending_registration:
            logger.info(f"Service: Account {account_id} is not a pending registration.")
            raise InvariantViolationError("Account is not a pending registration.")
        return account

    async def approve(self, account_id: str, plan: Plan = Plan.BASIC) -> TenantInDB:
        """
        Approve a pending registration.

        Creates an Active tenant administered by the registrant and binds
        the account to it. Both writes commit together or not at all.
        """
        logger.info(f"Service: Approving registration {account_id} with plan '{plan.value}'.")
        async with sqlite_transaction():
            account = await self._get_pending(account_id)
            tenant_name = account.company or f"{account.name}'s Organization"
            tenant = await self.tenant_store.create_tenant(
                TenantRecordCreate(
                    name=tenant_name,
                    company=tenant_name,
                    email=account.email,
                    phone=account.phone,
                    address=account.address,
                    industry=account.industry,
                    plan=plan,
                    status=TenantStatus.ACTIVE,
                    admin_account_id=account.account_id,
                )
            )
            if not await self.account_store.bind_to_tenant(account.account_id, tenant.tenant_id, is_approved=True):
                raise NotFoundError("Account not found.")

        logger.info(f"Service: Registration {account_id} approved into tenant {tenant.tenant_id}.")
        publish_after_commit(
            self.publisher,
            account_channel(account_id),
            "registration.approved",
            {"tenant_id": tenant.tenant_id, "tenant_name": tenant.name, "plan": plan.value},
        )
        return tenant

    async def reject(self, account_id: str, reason: Optional[str] = None) -> None:
        async with sqlite_transaction():
            account = await self._get_pending(account_id)
            await self.account_store.delete_account(account.account_id)
        logger.info(f"Service: Registration {account_id} rejected. Reason: {reason or 'Not specified'}")
        publish_after_commit(
            self.publisher,
            SUPERADMIN_CHANNEL,
            "registration.rejected",
            {"account_id": account_id},
        )
