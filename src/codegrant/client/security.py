"""CSRF state helpers for the authorization code flow."""

from __future__ import annotations

import secrets
import string

from codegrant.models.errors import InvalidGrantError


def generate_state() -> str:
    """Generate cryptographically secure state parameter.

    The state parameter binds the redirect back to the authorization
    request that produced it (RFC 6749 Section 10.12).

    Returns:
        Cryptographically secure random state string (32 characters)
    """
    alphabet = string.ascii_letters + string.digits + "-._~"
    return "".join(secrets.choice(alphabet) for _ in range(32))


def validate_state(expected: str, actual: str) -> None:
    """Validate state parameter matches expected value.

    Raises:
        InvalidGrantError: If state parameters don't match
    """
    if not secrets.compare_digest(expected.encode(), actual.encode()):
        raise InvalidGrantError("State parameter mismatch - possible CSRF attack")
