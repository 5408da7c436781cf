# hrm_core/auth/endpoints.py
import logging
from fastapi import APIRouter, Depends, Header, Request, Response
from typing import Annotated, Optional

from .dependencies import (
    extract_session_token,
    get_current_identity,
    get_current_session,
    get_session_service,
)
from .models import CurrentAccountResponse, LoginRequest, LoginResult, MessageResponse
from .service import AuthenticatedSession, SessionService
from ..accounts.models import Account, PasswordChangeRequest
from ..authz.policy import Identity
from ..settings import settings
from ..tenants.models import Tenant
from ..utils.timeouts import run_bounded

logger = logging.getLogger(__name__)
auth_router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        samesite="strict",
        secure=settings.session_cookie_secure,
        path="/",
    )


@auth_router.post("/login", response_model=LoginResult, summary="Log in and receive a session token")
async def login_endpoint(
    credentials: LoginRequest,
    response: Response,
    service: Annotated[SessionService, Depends(get_session_service)],
):
    """
    Verifies credentials and issues a session token.

    The token is returned in the body for Bearer clients and set as an
    http-only, same-site cookie for browsers.
    """
    result = await run_bounded(
        service.login(credentials.email, credentials.password.get_secret_value()),
        "login",
    )
    _set_session_cookie(response, result.token)
    return result


@auth_router.post("/logout", response_model=MessageResponse)
async def logout_endpoint(
    request: Request,
    response: Response,
    service: Annotated[SessionService, Depends(get_session_service)],
    authorization: Annotated[Optional[str], Header()] = None,
):
    """Clears the session cookie and, when revocation is enabled, revokes the token."""
    await service.logout(extract_session_token(request, authorization))
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="strict",
        secure=settings.session_cookie_secure,
    )
    return MessageResponse(message="Logged out.")


@auth_router.get("/me", response_model=CurrentAccountResponse)
async def me_endpoint(
    session: Annotated[AuthenticatedSession, Depends(get_current_session)],
    service: Annotated[SessionService, Depends(get_session_service)],
):
    tenant = await service.get_tenant_for(session.account)
    return CurrentAccountResponse(
        account=Account.from_db(session.account),
        tenant=Tenant.model_validate(tenant) if tenant else None,
    )


@auth_router.post("/change-password", response_model=MessageResponse)
async def change_password_endpoint(
    payload: PasswordChangeRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[SessionService, Depends(get_session_service)],
):
    await service.change_password(
        identity,
        payload.current_password.get_secret_value(),
        payload.new_password.get_secret_value(),
    )
    return MessageResponse(message="Password updated successfully.")
