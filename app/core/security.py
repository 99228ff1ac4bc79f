"""Security and password helper functions."""

from functools import lru_cache

import bcrypt

from app.core.config import get_settings


def hash_password(password: str) -> str:
    """Hash password using bcrypt."""

    hashed_password = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    return hashed_password.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify plain password against stored hash."""

    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


@lru_cache
def get_admin_password_hash() -> str:
    """Return the configured admin hash, hashing the plain password when none is set."""

    settings = get_settings()
    if settings.admin_password_hash:
        return settings.admin_password_hash
    return hash_password(settings.admin_password)
