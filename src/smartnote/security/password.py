"""Password hashing utilities."""

from passlib.context import CryptContext

# bcrypt_sha256 pre-hashes with SHA-256, so long passwords are not cut at 72 bytes.
# hex_md5 only verifies accounts imported from the old notebook database; those
# hashes are reported by needs_update() and replaced at the next login.
pwd_context = CryptContext(
    schemes=["bcrypt_sha256", "hex_md5"],
    default="bcrypt_sha256",
    deprecated=["hex_md5"],
)


def hash_password(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Raises ValueError when the hash matches none of the known schemes.
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def needs_update(hashed_password: str) -> bool:
    """Check if a stored hash uses a deprecated scheme or settings."""
    return pwd_context.needs_update(hashed_password)


def identify(hashed_password: str) -> str | None:
    """Name of the scheme that produced a hash, None when unknown."""
    return pwd_context.identify(hashed_password)
