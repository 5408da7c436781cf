# hrm_core/utils/__init__.py

"""
Utility module initialization file.

Exposes the password hashing helpers and the bounded-execution helper
used by the login and tenant lifecycle operations.
"""

from .security import hash_password, verify_password, generate_password
from .timeouts import run_bounded

# Export public API for the utils package
__all__ = ["hash_password", "verify_password", "generate_password", "run_bounded"]
