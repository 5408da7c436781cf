# hrm_core/utils/security.py
import logging
import secrets
import string

from passlib.hash import pbkdf2_sha256

logger = logging.getLogger(__name__)

_GENERATED_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def hash_password(plain: str) -> str:
    """Hash a password for storage in the credential store."""
    return pbkdf2_sha256.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Check a password against a stored hash.

    A malformed or empty hash never verifies; the problem is logged
    instead of surfacing to the caller as anything but a mismatch.
    """
    if not hashed:
        return False
    try:
        return pbkdf2_sha256.verify(plain, hashed)
    except ValueError as e:
        logger.error(f"Stored password hash could not be parsed: {e}")
        return False


def generate_password(length: int = 12) -> str:
    """Generate a random password for registrations submitted without one."""
    return "".join(secrets.choice(_GENERATED_PASSWORD_ALPHABET) for _ in range(length))
