# hrm_core/sessions/__init__.py
"""
Session revocation.

Session tokens are stateless and expire on their own; this module keeps
the optional list of tokens revoked at logout.
"""

from .revocation_store import (
    AbstractSessionRevocationStore,
    NullSessionRevocationStore,
    RedisSessionRevocationStore,
    close_session_revocation_store,
    get_session_revocation_store,
)

# Export public API components for session revocation
__all__ = [
    "AbstractSessionRevocationStore",
    "NullSessionRevocationStore",
    "RedisSessionRevocationStore",
    "close_session_revocation_store",
    "get_session_revocation_store",
]
