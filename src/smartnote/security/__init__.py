"""Security utilities."""

from .password import hash_password, identify, needs_update, verify_password

__all__ = [
    "hash_password",
    "verify_password",
    "needs_update",
    "identify",
]
