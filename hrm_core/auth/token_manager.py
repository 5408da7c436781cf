# hrm_core/auth/token_manager.py
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, NamedTuple, Optional
from uuid import uuid4

import jwt

from ..errors import InvalidCredentialsError
from ..settings import settings

logger = logging.getLogger(__name__)

_ALGORITHM = "HS256"


class IssuedToken(NamedTuple):
    token: str
    jti: str
    expires_at: datetime


class SessionClaims(NamedTuple):
    account_id: str
    jti: str
    expires_at: datetime


class SessionTokenManagerProtocol(ABC):
    """Protocol defining the interface for session token signing and verification."""

    @abstractmethod
    def issue(self, account_id: str) -> IssuedToken:
        """Sign a new session token for the account."""
        pass

    @abstractmethod
    def decode(self, token: str) -> SessionClaims:
        """
        Verify signature, issuer and expiry.

        Raises:
            InvalidCredentialsError: For any token that does not verify
        """
        pass


class DefaultSessionTokenManager(SessionTokenManagerProtocol):
    """
    HS256 JWT session tokens.

    Claims carry only the account id plus ``jti``/``iat``/``exp``/``iss``;
    role and tenant are re-read from the credential store on every request.
    """

    def __init__(self, secret: Optional[str] = None, issuer: Optional[str] = None, ttl_hours: Optional[int] = None):
        self.secret = secret or settings.jwt_secret
        self.issuer = issuer or settings.jwt_issuer
        self.ttl = timedelta(hours=ttl_hours or settings.session_ttl_hours)

    def issue(self, account_id: str) -> IssuedToken:
        now = datetime.now(timezone.utc)
        expires_at = now + self.ttl
        jti = uuid4().hex
        payload: Dict[str, Any] = {
            "sub": account_id,
            "jti": jti,
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self.secret, algorithm=_ALGORITHM)
        return IssuedToken(token=token, jti=jti, expires_at=expires_at)

    def decode(self, token: str) -> SessionClaims:
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[_ALGORITHM],
                issuer=self.issuer,
                options={"require": ["sub", "jti", "exp", "iat", "iss"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Session token rejected: expired.")
            raise InvalidCredentialsError("Session expired. Please log in again.")
        except jwt.PyJWTError as e:
            logger.warning(f"Session token rejected: {e}")
            raise InvalidCredentialsError("Invalid session token.")

        return SessionClaims(
            account_id=claims["sub"],
            jti=claims["jti"],
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
