"""
Bearer-token helpers.

Tokens are issued by the identity provider that fronts the catalog; this
service only verifies them. ``create_access_token`` mirrors the provider's
token shape and is used by provisioning scripts and tests.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from catalog.core.config import settings


def create_access_token(
    subject: str,
    display_name: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign an access token for ``subject`` (the steward's username)."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims: Dict[str, Any] = {"sub": subject, "exp": expire, "type": "access"}
    if display_name:
        claims["name"] = display_name
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify signature and expiry of a token.

    Returns:
        The claims, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
