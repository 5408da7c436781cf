# tests/test_registration.py
import threading

import pytest
from pydantic import ValidationError

from hrm_core.accounts.models import Role
from hrm_core.errors import DuplicateEmailError, InvariantViolationError, NotFoundError
from hrm_core.notifications.publisher import SUPERADMIN_CHANNEL, account_channel
from hrm_core.registration import service as registration_module
from hrm_core.registration.models import RegistrationRequest
from hrm_core.tenants.models import Plan, TenantStatus
from hrm_core.utils.security import verify_password

from .conftest import DEFAULT_PASSWORD, drain_events


def _request(email="owner@acme.example.com", company="Acme", **kwargs) -> RegistrationRequest:
    data = {"name": "Ada Owner", "email": email, "password": DEFAULT_PASSWORD, "company": company}
    data.update(kwargs)
    return RegistrationRequest(**data)


async def test_submit_creates_unbound_unapproved_admin(registration_service, account_store, publisher):
    pending = await registration_service.submit_registration(_request(role="employee"))

    stored = await account_store.get_account_by_id(pending.account.account_id)
    assert stored.role == Role.ADMIN
    assert stored.is_approved is False
    assert stored.is_active is True
    assert stored.tenant_id is None
    assert stored.is_pending_registration
    assert stored.company == "Acme"
    assert pending.generated_password is None
    assert verify_password(DEFAULT_PASSWORD, stored.password_hash)

    await drain_events()
    assert publisher.events[0][0] == SUPERADMIN_CHANNEL
    assert publisher.names() == ["registration.submitted"]


async def test_submit_without_password_generates_one(registration_service, account_store):
    pending = await registration_service.submit_registration(_request(password=None))

    assert pending.generated_password
    assert len(pending.generated_password) >= 12
    stored = await account_store.get_account_by_id(pending.account.account_id)
    assert verify_password(pending.generated_password, stored.password_hash)


async def test_submit_rejects_email_in_use_case_insensitively(registration_service, account_store):
    await registration_service.submit_registration(_request(email="owner@acme.example.com"))

    with pytest.raises(DuplicateEmailError):
        await registration_service.submit_registration(_request(email="Owner@ACME.example.com"))

    assert len(await account_store.list_pending_registrations()) == 1


def test_short_password_is_rejected_by_the_model():
    with pytest.raises(ValidationError):
        _request(password="abc")


async def test_approve_creates_active_tenant_and_binds_admin(registration_service, account_store, publisher):
    pending = await registration_service.submit_registration(_request())
    account_id = pending.account.account_id

    tenant = await registration_service.approve(account_id, Plan.PROFESSIONAL)

    assert tenant.status == TenantStatus.ACTIVE
    assert tenant.plan == Plan.PROFESSIONAL
    assert tenant.name == "Acme"
    assert tenant.admin_account_id == account_id

    admin = await account_store.get_account_by_id(account_id)
    assert admin.tenant_id == tenant.tenant_id
    assert admin.is_approved is True
    assert admin.role == Role.ADMIN
    assert await registration_service.list_pending() == []

    await drain_events()
    assert (account_channel(account_id), "registration.approved") in [(c, e) for c, e, _ in publisher.events]


async def test_approve_without_company_uses_fallback_name(registration_service):
    pending = await registration_service.submit_registration(_request(company=None, name="Grace"))

    tenant = await registration_service.approve(pending.account.account_id)

    assert tenant.name == "Grace's Organization"
    assert tenant.plan == Plan.BASIC


async def test_approve_twice_is_an_invariant_violation(registration_service, tenant_store):
    pending = await registration_service.submit_registration(_request())
    await registration_service.approve(pending.account.account_id)

    with pytest.raises(InvariantViolationError):
        await registration_service.approve(pending.account.account_id)

    assert len(await tenant_store.list_tenants()) == 1


async def test_approve_unknown_account_is_not_found(registration_service):
    with pytest.raises(NotFoundError):
        await registration_service.approve("missing")


async def test_approve_of_non_pending_account_is_refused(registration_service, superadmin):
    with pytest.raises(InvariantViolationError):
        await registration_service.approve(superadmin.account_id)


async def test_approve_rolls_back_when_binding_fails(registration_service, account_store, tenant_store, monkeypatch, publisher):
    pending = await registration_service.submit_registration(_request())
    await drain_events()
    publisher.events.clear()

    async def broken_bind(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(account_store, "bind_to_tenant", broken_bind)

    with pytest.raises(RuntimeError):
        await registration_service.approve(pending.account.account_id)

    assert await tenant_store.list_tenants() == []
    still_pending = await account_store.get_account_by_id(pending.account.account_id)
    assert still_pending.is_pending_registration

    await drain_events()
    assert publisher.events == []


async def test_reject_deletes_pending_account(registration_service, account_store, publisher):
    pending = await registration_service.submit_registration(_request())

    await registration_service.reject(pending.account.account_id, "Incomplete details")

    assert await account_store.get_account_by_id(pending.account.account_id) is None
    await drain_events()
    assert "registration.rejected" in publisher.names()


async def test_reject_of_approved_account_is_refused(registration_service, account_store):
    pending = await registration_service.submit_registration(_request())
    await registration_service.approve(pending.account.account_id)

    with pytest.raises(InvariantViolationError):
        await registration_service.reject(pending.account.account_id)

    assert await account_store.get_account_by_id(pending.account.account_id) is not None


async def test_reject_unknown_account_is_not_found(registration_service):
    with pytest.raises(NotFoundError):
        await registration_service.reject("missing")


async def test_password_hashing_runs_off_the_event_loop_thread(registration_service, monkeypatch):
    threads = []
    real_hash = registration_module.hash_password

    def recording_hash(plain):
        threads.append(threading.get_ident())
        return real_hash(plain)

    monkeypatch.setattr(registration_module, "hash_password", recording_hash)

    await registration_service.submit_registration(_request())

    assert len(threads) == 1
    assert threads[0] != threading.get_ident()
