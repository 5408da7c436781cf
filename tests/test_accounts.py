# tests/test_accounts.py
import pytest

from hrm_core.accounts.models import AccountUpdate, Role
from hrm_core.accounts.service import AccountFilters
from hrm_core.auth.service import bootstrap_superadmin
from hrm_core.authz.policy import resolve
from hrm_core.errors import ForbiddenError, InvariantViolationError, NotFoundError

from .conftest import DEFAULT_PASSWORD


async def test_member_listing_ignores_foreign_tenant_filter(account_service, onboard_tenant, add_member):
    tenant_a, admin_a = await onboard_tenant("owner@acme.example.com", "Acme")
    tenant_b, _ = await onboard_tenant("owner@initech.example.com", "Initech")
    hr_a = await add_member(tenant_a.tenant_id, "hr@acme.example.com", Role.HR)
    await add_member(tenant_b.tenant_id, "e@initech.example.com", Role.EMPLOYEE)

    accounts = await account_service.list_accounts(resolve(hr_a), AccountFilters(tenant_id=tenant_b.tenant_id))

    assert {a.account_id for a in accounts} == {admin_a.account_id, hr_a.account_id}


async def test_superadmin_listing_honours_filters(account_service, onboard_tenant, add_member, superadmin_identity):
    tenant_a, _ = await onboard_tenant("owner@acme.example.com", "Acme")
    tenant_b, _ = await onboard_tenant("owner@initech.example.com", "Initech")
    employee_b = await add_member(tenant_b.tenant_id, "e@initech.example.com", Role.EMPLOYEE)

    only_b = await account_service.list_accounts(superadmin_identity, AccountFilters(tenant_id=tenant_b.tenant_id))
    employees = await account_service.list_accounts(superadmin_identity, AccountFilters(role=Role.EMPLOYEE))
    everyone = await account_service.list_accounts(superadmin_identity, AccountFilters())

    assert len(only_b) == 2
    assert [a.account_id for a in employees] == [employee_b.account_id]
    # two admins, one employee, and the superadmin itself
    assert len(everyone) == 4


async def test_get_account_in_other_tenant_is_forbidden(account_service, onboard_tenant):
    _, admin_a = await onboard_tenant("owner@acme.example.com", "Acme")
    _, admin_b = await onboard_tenant("owner@initech.example.com", "Initech")

    with pytest.raises(ForbiddenError):
        await account_service.get_account(resolve(admin_a), admin_b.account_id)

    assert (await account_service.get_account(resolve(admin_a), admin_a.account_id)).email == "owner@acme.example.com"


async def test_get_unknown_account_is_not_found(account_service, superadmin_identity):
    with pytest.raises(NotFoundError):
        await account_service.get_account(superadmin_identity, "missing")


async def test_admin_promotes_and_deactivates_member(account_service, onboard_tenant, add_member):
    tenant, admin = await onboard_tenant("owner@acme.example.com", "Acme")
    member = await add_member(tenant.tenant_id, "e@acme.example.com", Role.EMPLOYEE)

    promoted = await account_service.update_account(resolve(admin), member.account_id, AccountUpdate(role=Role.MANAGER))
    assert promoted.role == Role.MANAGER

    deactivated = await account_service.update_account(resolve(admin), member.account_id, AccountUpdate(is_active=False))
    assert deactivated.is_active is False


async def test_member_cannot_escalate_own_role(account_service, account_store, onboard_tenant, add_member):
    tenant, _ = await onboard_tenant("owner@acme.example.com", "Acme")
    hr = await add_member(tenant.tenant_id, "hr@acme.example.com", Role.HR)

    with pytest.raises(ForbiddenError):
        await account_service.update_account(resolve(hr), hr.account_id, AccountUpdate(role=Role.ADMIN))

    assert (await account_store.get_account_by_id(hr.account_id)).role == Role.HR

    renamed = await account_service.update_account(resolve(hr), hr.account_id, AccountUpdate(name="Hilda"))
    assert renamed.name == "Hilda"


async def test_hr_cannot_modify_admin(account_service, onboard_tenant, add_member):
    tenant, admin = await onboard_tenant("owner@acme.example.com", "Acme")
    hr = await add_member(tenant.tenant_id, "hr@acme.example.com", Role.HR)

    with pytest.raises(ForbiddenError):
        await account_service.update_account(resolve(hr), admin.account_id, AccountUpdate(is_active=False))


async def test_cross_tenant_update_is_forbidden(account_service, onboard_tenant, add_member):
    _, admin_a = await onboard_tenant("owner@acme.example.com", "Acme")
    tenant_b, _ = await onboard_tenant("owner@initech.example.com", "Initech")
    employee_b = await add_member(tenant_b.tenant_id, "e@initech.example.com", Role.EMPLOYEE)

    with pytest.raises(ForbiddenError):
        await account_service.update_account(resolve(admin_a), employee_b.account_id, AccountUpdate(name="X"))


async def test_last_active_admin_is_protected(account_service, account_store, onboard_tenant, add_member, superadmin_identity):
    tenant, admin = await onboard_tenant("owner@acme.example.com", "Acme")

    with pytest.raises(ForbiddenError):
        await account_service.update_account(superadmin_identity, admin.account_id, AccountUpdate(is_active=False))
    with pytest.raises(ForbiddenError):
        await account_service.update_account(superadmin_identity, admin.account_id, AccountUpdate(role=Role.HR))

    second_admin = await add_member(tenant.tenant_id, "second@acme.example.com", Role.ADMIN)
    demoted = await account_service.update_account(superadmin_identity, second_admin.account_id, AccountUpdate(role=Role.HR))
    assert demoted.role == Role.HR
    assert (await account_store.get_account_by_id(admin.account_id)).is_active is True


async def test_delete_member(account_service, account_store, onboard_tenant, add_member):
    tenant, admin = await onboard_tenant("owner@acme.example.com", "Acme")
    member = await add_member(tenant.tenant_id, "e@acme.example.com", Role.EMPLOYEE)

    await account_service.delete_account(resolve(admin), member.account_id)

    assert await account_store.get_account_by_id(member.account_id) is None


async def test_tenant_admin_reference_cannot_be_deleted(account_service, account_store, onboard_tenant, add_member, superadmin_identity):
    tenant, admin = await onboard_tenant("owner@acme.example.com", "Acme")
    await add_member(tenant.tenant_id, "second@acme.example.com", Role.ADMIN)

    with pytest.raises(InvariantViolationError):
        await account_service.delete_account(superadmin_identity, admin.account_id)

    assert await account_store.get_account_by_id(admin.account_id) is not None


async def test_superadmin_cannot_demote_another_superadmin(account_service, account_store, superadmin_identity):
    other_root = await bootstrap_superadmin(account_store, "ops@platform.example.com", DEFAULT_PASSWORD, "Ops Root")

    for role in (Role.ADMIN, Role.EMPLOYEE):
        with pytest.raises(ForbiddenError):
            await account_service.update_account(superadmin_identity, other_root.account_id, AccountUpdate(role=role))

    stored = await account_store.get_account_by_id(other_root.account_id)
    assert stored.is_superadmin
    assert stored.tenant_id is None


async def test_superadmin_cannot_deactivate_or_delete_self(account_service, account_store, superadmin, superadmin_identity):
    await bootstrap_superadmin(account_store, "ops@platform.example.com", DEFAULT_PASSWORD, "Ops Root")

    with pytest.raises(ForbiddenError):
        await account_service.update_account(superadmin_identity, superadmin.account_id, AccountUpdate(is_active=False))
    with pytest.raises(ForbiddenError):
        await account_service.delete_account(superadmin_identity, superadmin.account_id)

    assert (await account_store.get_account_by_id(superadmin.account_id)).is_active is True


async def test_second_superadmin_may_be_deactivated_and_restored(account_service, account_store, superadmin_identity):
    other_root = await bootstrap_superadmin(account_store, "ops@platform.example.com", DEFAULT_PASSWORD, "Ops Root")

    deactivated = await account_service.update_account(
        superadmin_identity, other_root.account_id, AccountUpdate(is_active=False)
    )
    assert deactivated.is_active is False
    assert await account_store.count_active_superadmins() == 1

    restored = await account_service.update_account(
        superadmin_identity, other_root.account_id, AccountUpdate(is_active=True)
    )
    assert restored.is_active is True


async def test_last_active_superadmin_cannot_be_removed(account_service, account_store, superadmin_identity):
    other_root = await bootstrap_superadmin(account_store, "ops@platform.example.com", DEFAULT_PASSWORD, "Ops Root")
    await account_store.update_account(superadmin_identity.account_id, {"is_active": False})

    with pytest.raises(ForbiddenError):
        await account_service.delete_account(superadmin_identity, other_root.account_id)
    with pytest.raises(ForbiddenError):
        await account_service.update_account(superadmin_identity, other_root.account_id, AccountUpdate(is_active=False))

    assert await account_store.get_account_by_id(other_root.account_id) is not None
