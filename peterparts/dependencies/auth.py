

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer

from peterparts.core.security import COOKIE_NAME, verify_token
from peterparts.models.user import Role
from peterparts.schemas.auth import TokenPayload


# Session cookie, checked first
cookie_scheme = APIKeyCookie(name=COOKIE_NAME, auto_error=False)

# JWT Bearer token dependency
bearer_scheme = HTTPBearer(auto_error=False)


def extract_token(
    cookie_token: Optional[str] = Depends(cookie_scheme),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """
    Pick the session token from the request.

    The cookie wins over an ``Authorization: Bearer`` header. Other
    Authorization schemes are ignored.
    """
    if cookie_token:
        return cookie_token
    if credentials and credentials.scheme.lower() == "bearer" and credentials.credentials:
        return credentials.credentials
    return None


async def get_optional_session(token: Optional[str] = Depends(extract_token)) -> Optional[TokenPayload]:
    """
    Soft authentication: verified claims if a good token is present, else None.

    Never raises for missing or invalid tokens.
    """
    if not token:
        return None
    return verify_token(token)


async def get_current_session(token: Optional[str] = Depends(extract_token)) -> TokenPayload:
    """
    Dependency requiring a valid session token.

    Raises:
        HTTPException: 401 if the token is missing, malformed or expired.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


def require_roles(*roles: Role):
    """
    Build a dependency that admits only the listed roles.

    Roles are not hierarchical; list every role the endpoint accepts.

    Raises:
        HTTPException: 401 without a valid session, 403 for other roles.
    """
    accepted = frozenset(roles)

    async def role_gate(session: Optional[TokenPayload] = Depends(get_optional_session)) -> TokenPayload:
        if session is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if session.role not in accepted:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return session

    return role_gate


require_admin = require_roles(Role.ADMIN)
require_customer = require_roles(Role.CUSTOMER, Role.ADMIN)
