"""Password hashing and secret helpers.

This module provides utilities for:
- Hashing and verifying user passwords (bcrypt via passlib)
- Validating the strength of configured secrets
- Signing asset store requests
"""

import hashlib

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

WEAK_PATTERNS = (
    "password",
    "secret",
    "12345",
    "qwerty",
    "admin",
    "letmein",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash; malformed hashes never match."""
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def validate_secret_strength(secret: str, min_length: int = 32) -> tuple[bool, list[str]]:
    """Validate the strength of a secret.

    Args:
        secret: Secret to validate
        min_length: Minimum required length

    Returns:
        Tuple of (is_valid, list of issues)
    """
    issues = []

    if len(secret) < min_length:
        issues.append(f"Secret must be at least {min_length} characters")

    secret_lower = secret.lower()
    for pattern in WEAK_PATTERNS:
        if pattern in secret_lower:
            issues.append(f"Secret contains weak pattern: {pattern}")

    has_upper = any(c.isupper() for c in secret)
    has_lower = any(c.islower() for c in secret)
    has_digit = any(c.isdigit() for c in secret)

    if not (has_upper and has_lower and has_digit):
        issues.append("Secret should contain uppercase, lowercase, and digits")

    return len(issues) == 0, issues


def sign_params(params: dict[str, str | int], api_secret: str) -> str:
    """Sign request parameters the way the Cloudinary API expects.

    Parameters are sorted by name, joined as ``key=value`` pairs with ``&``,
    suffixed with the API secret and hashed with SHA-1.
    """
    payload = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{payload}{api_secret}".encode()).hexdigest()


def mask_secret(secret: str, visible_chars: int = 4) -> str:
    """Mask a secret for logging purposes.

    Args:
        secret: Secret to mask
        visible_chars: Number of characters to show at start and end

    Returns:
        Masked secret like "abc...xyz"
    """
    if len(secret) <= visible_chars * 2:
        return "*" * len(secret)
    return f"{secret[:visible_chars]}...{secret[-visible_chars:]}"
