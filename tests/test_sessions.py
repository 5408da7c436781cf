# tests/test_sessions.py
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from hrm_core.accounts.models import AccountUpdate, Role
from hrm_core.auth import service as auth_service
from hrm_core.auth.service import SessionService, bootstrap_superadmin
from hrm_core.authz.policy import resolve
from hrm_core.errors import (
    AccountInactiveError,
    DuplicateEmailError,
    InvalidCredentialsError,
    TenantInactiveError,
)
from hrm_core.profiles.models import EmployeeProfileCreate
from hrm_core.registration.models import RegistrationRequest
from hrm_core.sessions.revocation_store import NullSessionRevocationStore

from .conftest import DEFAULT_PASSWORD, TEST_JWT_SECRET


async def test_login_returns_token_and_account(session_service, token_manager, onboard_tenant, account_store):
    tenant, admin = await onboard_tenant("owner@acme.example.com", "Acme")

    result = await session_service.login("  Owner@ACME.example.com ", DEFAULT_PASSWORD)

    assert result.account.account_id == admin.account_id
    assert result.account.tenant_id == tenant.tenant_id
    assert result.account.last_login is not None
    assert result.profile is None
    assert token_manager.decode(result.token).account_id == admin.account_id
    assert result.expires_at > datetime.now(timezone.utc)
    assert (await account_store.get_account_by_id(admin.account_id)).last_login is not None


async def test_unknown_email_and_wrong_password_look_the_same(session_service, onboard_tenant):
    await onboard_tenant("owner@acme.example.com", "Acme")

    with pytest.raises(InvalidCredentialsError) as unknown:
        await session_service.login("nobody@acme.example.com", DEFAULT_PASSWORD)
    with pytest.raises(InvalidCredentialsError) as wrong:
        await session_service.login("owner@acme.example.com", "not-the-password")

    assert unknown.value.status_code == wrong.value.status_code == 401
    assert unknown.value.detail == wrong.value.detail


async def test_deactivated_account_cannot_log_in(session_service, account_store, onboard_tenant, add_member):
    tenant, _ = await onboard_tenant("owner@acme.example.com", "Acme")
    member = await add_member(tenant.tenant_id, "e@acme.example.com", Role.EMPLOYEE)
    await account_store.update_account(member.account_id, {"is_active": False})

    with pytest.raises(AccountInactiveError):
        await session_service.login("e@acme.example.com", DEFAULT_PASSWORD)


async def test_login_refused_after_tenant_suspension(session_service, tenant_service, onboard_tenant, add_member):
    tenant, _ = await onboard_tenant("owner@acme.example.com", "Acme")
    await add_member(tenant.tenant_id, "e@acme.example.com", Role.EMPLOYEE)
    await tenant_service.suspend_tenant(tenant.tenant_id)

    for email in ("owner@acme.example.com", "e@acme.example.com"):
        with pytest.raises(TenantInactiveError):
            await session_service.login(email, DEFAULT_PASSWORD)

    await tenant_service.activate_tenant(tenant.tenant_id)
    result = await session_service.login("e@acme.example.com", DEFAULT_PASSWORD)
    assert result.account.email == "e@acme.example.com"


async def test_pending_registrant_cannot_log_in(session_service, registration_service):
    await registration_service.submit_registration(
        RegistrationRequest(name="Pending", email="p@umbrella.example.com", password=DEFAULT_PASSWORD, company="Umbrella")
    )

    with pytest.raises(TenantInactiveError):
        await session_service.login("p@umbrella.example.com", DEFAULT_PASSWORD)


async def test_unapproved_member_of_active_tenant_cannot_log_in(session_service, account_store, onboard_tenant, add_member):
    tenant, _ = await onboard_tenant("owner@acme.example.com", "Acme")
    member = await add_member(tenant.tenant_id, "e@acme.example.com", Role.EMPLOYEE)
    await account_store.update_account(member.account_id, {"is_approved": False})

    with pytest.raises(AccountInactiveError):
        await session_service.login("e@acme.example.com", DEFAULT_PASSWORD)


async def test_superadmin_logs_in_without_tenant(session_service, superadmin):
    result = await session_service.login("root@platform.example.com", DEFAULT_PASSWORD)

    assert result.account.role == Role.SUPERADMIN
    assert result.account.tenant_id is None


async def test_login_attaches_linked_profile(session_service, profile_store, onboard_tenant, add_member):
    tenant, _ = await onboard_tenant("owner@acme.example.com", "Acme")
    member = await add_member(tenant.tenant_id, "e@acme.example.com", Role.EMPLOYEE, name="Eve")
    await profile_store.create_profile(
        EmployeeProfileCreate(account_id=member.account_id, tenant_id=tenant.tenant_id, name="Eve", department="Ops")
    )

    result = await session_service.login("e@acme.example.com", DEFAULT_PASSWORD)

    assert result.profile is not None
    assert result.profile.department == "Ops"


async def test_profile_lookup_failure_does_not_block_login(session_service, profile_store, onboard_tenant, monkeypatch):
    await onboard_tenant("owner@acme.example.com", "Acme")

    async def broken_lookup(account_id):
        raise RuntimeError("profile store unavailable")

    monkeypatch.setattr(profile_store, "get_profile_by_account", broken_lookup)

    result = await session_service.login("owner@acme.example.com", DEFAULT_PASSWORD)

    assert result.profile is None


async def test_authenticate_resolves_identity(session_service, onboard_tenant):
    tenant, admin = await onboard_tenant("owner@acme.example.com", "Acme")
    result = await session_service.login("owner@acme.example.com", DEFAULT_PASSWORD)

    identity = await session_service.current_identity(result.token)

    assert identity == resolve(admin)
    assert identity.tenant_scope == tenant.tenant_id


async def test_existing_session_stops_working_after_suspension(session_service, tenant_service, onboard_tenant):
    tenant, _ = await onboard_tenant("owner@acme.example.com", "Acme")
    result = await session_service.login("owner@acme.example.com", DEFAULT_PASSWORD)

    await tenant_service.suspend_tenant(tenant.tenant_id)

    with pytest.raises(TenantInactiveError):
        await session_service.authenticate(result.token)


async def test_existing_session_stops_working_after_deactivation(session_service, account_store, onboard_tenant):
    _, admin = await onboard_tenant("owner@acme.example.com", "Acme")
    result = await session_service.login("owner@acme.example.com", DEFAULT_PASSWORD)

    await account_store.update_account(admin.account_id, {"is_active": False})

    with pytest.raises(AccountInactiveError):
        await session_service.authenticate(result.token)


async def test_role_change_applies_to_existing_session(session_service, account_store, onboard_tenant, add_member):
    tenant, _ = await onboard_tenant("owner@acme.example.com", "Acme")
    member = await add_member(tenant.tenant_id, "e@acme.example.com", Role.EMPLOYEE)
    result = await session_service.login("e@acme.example.com", DEFAULT_PASSWORD)

    await account_store.update_account(member.account_id, {"role": Role.HR})

    assert (await session_service.current_identity(result.token)).role == Role.HR


async def test_tampered_token_is_rejected(session_service, onboard_tenant):
    await onboard_tenant("owner@acme.example.com", "Acme")
    token = (await session_service.login("owner@acme.example.com", DEFAULT_PASSWORD)).token
    forged = jwt.encode(jwt.decode(token, options={"verify_signature": False}), "another-secret-another-secret-0000", algorithm="HS256")

    with pytest.raises(InvalidCredentialsError):
        await session_service.authenticate(forged)
    with pytest.raises(InvalidCredentialsError):
        await session_service.authenticate("not-a-token")


async def test_expired_token_is_rejected(session_service, onboard_tenant):
    _, admin = await onboard_tenant("owner@acme.example.com", "Acme")
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    expired = jwt.encode(
        {
            "sub": admin.account_id,
            "jti": "expired-jti",
            "iss": "hrm-core-test",
            "iat": int((past - timedelta(hours=1)).timestamp()),
            "exp": int(past.timestamp()),
        },
        TEST_JWT_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(InvalidCredentialsError) as exc_info:
        await session_service.authenticate(expired)
    assert "expired" in exc_info.value.message.lower()


async def test_token_for_deleted_account_is_rejected(session_service, account_store, onboard_tenant, add_member):
    tenant, _ = await onboard_tenant("owner@acme.example.com", "Acme")
    member = await add_member(tenant.tenant_id, "e@acme.example.com", Role.EMPLOYEE)
    token = (await session_service.login("e@acme.example.com", DEFAULT_PASSWORD)).token

    await account_store.delete_account(member.account_id)

    with pytest.raises(InvalidCredentialsError):
        await session_service.authenticate(token)


async def test_logout_revokes_token(session_service, revocation_store, onboard_tenant):
    await onboard_tenant("owner@acme.example.com", "Acme")
    token = (await session_service.login("owner@acme.example.com", DEFAULT_PASSWORD)).token

    await session_service.logout(token)

    assert len(revocation_store.revoked) == 1
    with pytest.raises(InvalidCredentialsError):
        await session_service.authenticate(token)


async def test_logout_ignores_missing_or_invalid_tokens(session_service, revocation_store):
    await session_service.logout(None)
    await session_service.logout("garbage")

    assert revocation_store.revoked == set()


async def test_logout_is_advisory_without_revocation_backend(
    account_store, tenant_store, profile_store, token_manager, onboard_tenant
):
    service = SessionService(account_store, tenant_store, profile_store, token_manager, NullSessionRevocationStore())
    await onboard_tenant("owner@acme.example.com", "Acme")
    token = (await service.login("owner@acme.example.com", DEFAULT_PASSWORD)).token

    await service.logout(token)

    assert (await service.authenticate(token)).account.email == "owner@acme.example.com"


async def test_change_password(session_service, onboard_tenant):
    _, admin = await onboard_tenant("owner@acme.example.com", "Acme")
    identity = resolve(admin)

    with pytest.raises(InvalidCredentialsError):
        await session_service.change_password(identity, "wrong-current", "brand-new-pass")

    await session_service.change_password(identity, DEFAULT_PASSWORD, "brand-new-pass")

    with pytest.raises(InvalidCredentialsError):
        await session_service.login("owner@acme.example.com", DEFAULT_PASSWORD)
    assert (await session_service.login("owner@acme.example.com", "brand-new-pass")).account.account_id == admin.account_id


async def test_bootstrap_superadmin_is_idempotent(account_store, superadmin):
    again = await bootstrap_superadmin(account_store, "ROOT@platform.example.com", "other-pass", "Someone Else")

    assert again.account_id == superadmin.account_id
    assert again.is_superadmin
    assert again.tenant_id is None


async def test_bootstrap_superadmin_refuses_tenant_email(account_store, onboard_tenant):
    await onboard_tenant("owner@acme.example.com", "Acme")

    with pytest.raises(DuplicateEmailError):
        await bootstrap_superadmin(account_store, "owner@acme.example.com", DEFAULT_PASSWORD, "Impostor")


async def test_unknown_email_still_runs_a_password_check(session_service, monkeypatch):
    checked = []

    def recording_verify(plain, hashed):
        checked.append(hashed)
        return False

    monkeypatch.setattr(auth_service, "verify_password", recording_verify)

    with pytest.raises(InvalidCredentialsError):
        await session_service.login("nobody@acme.example.com", DEFAULT_PASSWORD)

    assert checked == [auth_service._UNKNOWN_ACCOUNT_HASH]


async def test_reactivating_tenant_does_not_reactivate_deactivated_member(
    session_service, tenant_service, account_service, onboard_tenant, add_member
):
    tenant, admin = await onboard_tenant("owner@acme.example.com", "Acme")
    member = await add_member(tenant.tenant_id, "e@acme.example.com", Role.EMPLOYEE)

    await tenant_service.suspend_tenant(tenant.tenant_id)
    await account_service.update_account(resolve(admin), member.account_id, AccountUpdate(is_active=False))
    await tenant_service.activate_tenant(tenant.tenant_id)

    with pytest.raises(AccountInactiveError):
        await session_service.login("e@acme.example.com", DEFAULT_PASSWORD)
    assert (await session_service.login("owner@acme.example.com", DEFAULT_PASSWORD)).account.account_id == admin.account_id
