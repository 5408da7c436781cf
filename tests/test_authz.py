# tests/test_authz.py
import pytest

from hrm_core.accounts.models import Role
from hrm_core.authz.policy import (
    Identity,
    TenantScopedFilters,
    authorize_list,
    authorize_mutation,
    enforce,
)
from hrm_core.errors import ForbiddenError
from hrm_core.profiles.models import EmployeeFilters

ROOT = Identity(account_id="root", role=Role.SUPERADMIN, tenant_scope=None)
ADMIN_A = Identity(account_id="admin-a", role=Role.ADMIN, tenant_scope="tenant-a")
HR_A = Identity(account_id="hr-a", role=Role.HR, tenant_scope="tenant-a")
EMPLOYEE_A = Identity(account_id="emp-a", role=Role.EMPLOYEE, tenant_scope="tenant-a")


def test_superadmin_list_filters_pass_through():
    filters = TenantScopedFilters(tenant_id="tenant-b", skip=5, limit=10)
    assert authorize_list(ROOT, filters) is filters

    unfiltered = TenantScopedFilters()
    assert authorize_list(ROOT, unfiltered).tenant_id is None


def test_tenant_member_list_is_rescoped_to_own_tenant():
    requested = EmployeeFilters(tenant_id="tenant-b", department="Sales", limit=20)
    scoped = authorize_list(HR_A, requested)

    assert scoped.tenant_id == "tenant-a"
    assert scoped.department == "Sales"
    assert scoped.limit == 20
    # the caller's filter object is left untouched
    assert requested.tenant_id == "tenant-b"


def test_tenant_member_without_tenant_filter_gets_own_tenant():
    assert authorize_list(EMPLOYEE_A, TenantScopedFilters()).tenant_id == "tenant-a"


def test_list_without_tenant_scope_is_forbidden():
    orphan = Identity(account_id="orphan", role=Role.ADMIN, tenant_scope=None)
    with pytest.raises(ForbiddenError):
        authorize_list(orphan, TenantScopedFilters(tenant_id="tenant-a"))


def test_superadmin_may_mutate_any_tenant():
    decision = authorize_mutation(ROOT, "tenant-b", Role.EMPLOYEE, target_account_id="x", changes={"is_active": False})
    assert decision.allowed


def test_cross_tenant_mutation_is_denied():
    decision = authorize_mutation(ADMIN_A, "tenant-b", Role.EMPLOYEE, target_account_id="x", changes={"name": "N"})
    assert not decision.allowed


def test_admin_may_grant_roles_below_own():
    for role in (Role.HR, Role.MANAGER, Role.EMPLOYEE):
        assert authorize_mutation(ADMIN_A, "tenant-a", changes={"role": role}).allowed


def test_role_grant_at_or_above_own_is_denied():
    assert not authorize_mutation(ADMIN_A, "tenant-a", changes={"role": Role.ADMIN}).allowed
    assert not authorize_mutation(HR_A, "tenant-a", changes={"role": Role.ADMIN}).allowed
    assert not authorize_mutation(HR_A, "tenant-a", changes={"role": Role.HR}).allowed


def test_non_superadmin_cannot_touch_superadmin_privileged_fields():
    decision = authorize_mutation(ADMIN_A, "tenant-a", Role.SUPERADMIN, target_account_id="root", deleting=True)
    assert not decision.allowed


def test_superadmin_role_is_never_granted_inside_a_tenant():
    assert not authorize_mutation(ROOT, "tenant-a", Role.EMPLOYEE, changes={"role": Role.SUPERADMIN}).allowed
    assert not authorize_mutation(ADMIN_A, "tenant-a", changes={"role": "superadmin"}).allowed


def test_admin_cannot_modify_peer_admin():
    decision = authorize_mutation(ADMIN_A, "tenant-a", Role.ADMIN, target_account_id="admin-2", changes={"name": "X"})
    assert not decision.allowed


def test_self_update_of_plain_fields_is_allowed():
    decision = authorize_mutation(EMPLOYEE_A, "tenant-a", Role.EMPLOYEE, target_account_id="emp-a", changes={"phone": "555"})
    assert decision.allowed


def test_self_role_or_activation_change_is_denied():
    assert not authorize_mutation(
        HR_A, "tenant-a", Role.HR, target_account_id="hr-a", changes={"role": Role.EMPLOYEE}
    ).allowed
    assert not authorize_mutation(
        HR_A, "tenant-a", Role.HR, target_account_id="hr-a", changes={"is_active": False}
    ).allowed


def test_last_admin_cannot_be_removed_even_by_superadmin():
    for kwargs in (
        {"deleting": True},
        {"changes": {"role": Role.HR}},
        {"changes": {"is_active": False}},
    ):
        decision = authorize_mutation(
            ROOT, "tenant-a", Role.ADMIN, target_account_id="admin-a", target_is_last_admin=True, **kwargs
        )
        assert not decision.allowed


def test_last_admin_rename_is_allowed():
    decision = authorize_mutation(
        ROOT, "tenant-a", Role.ADMIN, target_account_id="admin-a",
        changes={"name": "Renamed"}, target_is_last_admin=True,
    )
    assert decision.allowed


def test_enforce_raises_generic_forbidden_on_deny():
    decision = authorize_mutation(ADMIN_A, "tenant-b", Role.EMPLOYEE, changes={"name": "N"})
    with pytest.raises(ForbiddenError) as exc_info:
        enforce(decision, ADMIN_A)

    assert exc_info.value.status_code == 403
    assert exc_info.value.detail["error"] == "Forbidden"
    assert "tenant" not in exc_info.value.detail["message"].lower()


def test_enforce_passes_allow_through():
    enforce(authorize_mutation(ROOT, "tenant-a"), ROOT)


def test_superadmin_cannot_be_demoted():
    for role in (Role.ADMIN, Role.EMPLOYEE):
        decision = authorize_mutation(ROOT, None, Role.SUPERADMIN, target_account_id="ops", changes={"role": role})
        assert not decision.allowed

    renamed = authorize_mutation(ROOT, None, Role.SUPERADMIN, target_account_id="ops", changes={"name": "Ops"})
    assert renamed.allowed


def test_superadmin_cannot_change_own_activation_or_delete_self():
    for kwargs in ({"changes": {"is_active": False}}, {"deleting": True}):
        assert not authorize_mutation(ROOT, None, Role.SUPERADMIN, target_account_id="root", **kwargs).allowed

    assert authorize_mutation(ROOT, None, Role.SUPERADMIN, target_account_id="root", changes={"name": "R"}).allowed


def test_last_superadmin_cannot_be_removed():
    for kwargs in ({"deleting": True}, {"changes": {"is_active": False}}):
        decision = authorize_mutation(
            ROOT, None, Role.SUPERADMIN, target_account_id="ops", target_is_last_admin=True, **kwargs
        )
        assert not decision.allowed

    # with another superadmin still active the same change goes through
    assert authorize_mutation(
        ROOT, None, Role.SUPERADMIN, target_account_id="ops", changes={"is_active": False}
    ).allowed


def test_superadmin_role_is_not_granted_to_unbound_accounts():
    assert not authorize_mutation(ROOT, None, Role.ADMIN, target_account_id="x", changes={"role": Role.SUPERADMIN}).allowed
