"""
Authentication dependencies for FastAPI.
"""
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from catalog.core.exceptions import AuthenticationError
from catalog.core.security import decode_token
from catalog.core.sentry import set_principal

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller."""
    username: str
    display_name: str


async def get_current_user_optional(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[Principal]:
    """
    Get current user from the bearer token.

    Returns:
        Principal if the token verifies, None otherwise
    """
    if not credentials:
        return None

    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type", "access") != "access":
        return None

    username = payload.get("sub")
    if not username:
        return None

    return Principal(username=str(username), display_name=str(payload.get("name") or username))


async def get_current_user(
    principal: Annotated[Optional[Principal], Depends(get_current_user_optional)],
) -> Principal:
    """
    Require an authenticated user.

    Raises:
        AuthenticationError: If no valid token was presented
    """
    if principal is None:
        raise AuthenticationError("Not authenticated")
    set_principal(principal.username)
    return principal


CurrentUser = Annotated[Principal, Depends(get_current_user)]
