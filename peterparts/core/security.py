

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from pydantic import ValidationError

from peterparts.core.config import settings
from peterparts.core.errors import ConfigurationError
from peterparts.schemas.auth import TokenPayload, UnverifiedClaims


logger = logging.getLogger(__name__)

COOKIE_NAME = "auth_token"
SESSION_MAX_AGE = 7 * 24 * 60 * 60  # seconds


def _get_secret() -> str:
    if not settings.jwt_secret:
        raise ConfigurationError("JWT_SECRET is not configured")
    return settings.jwt_secret


def issue_token(payload: TokenPayload, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed session token.

    Args:
        payload: Identity to encode (user id, email, role).
        expires_delta: Optional custom lifetime, defaults to the session length.

    Returns:
        str: Encoded JWT.

    Raises:
        ConfigurationError: If no signing secret is configured.
    """
    secret = _get_secret()
    to_encode: Dict[str, Any] = payload.model_dump(mode="json", by_alias=True)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.jwt_expire_days)
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Optional[TokenPayload]:
    """
    Verify and decode a session token.

    Args:
        token: JWT to verify.

    Returns:
        Optional[TokenPayload]: Verified claims, or None if the token is
        malformed, badly signed, expired or missing identity claims.
    """
    secret = _get_secret()
    try:
        claims = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"Rejected session token: {e}")
        return None

    try:
        return TokenPayload.model_validate(claims)
    except ValidationError:
        logger.warning("Session token has a valid signature but unexpected claims")
        return None


def decode_token(token: str) -> Optional[UnverifiedClaims]:
    """
    Read token claims without checking the signature.

    For diagnostics only; never use the result for authorization.
    """
    try:
        return UnverifiedClaims(claims=jwt.get_unverified_claims(token))
    except JWTError:
        return None


def get_cookie_options(is_production: bool) -> Dict[str, Any]:
    """
    Keyword arguments for ``Response.set_cookie`` for the session cookie.

    Production cookies are secure and strict; development cookies are lax
    so they work over plain http.
    """
    return {
        "httponly": True,
        "secure": is_production,
        "samesite": "strict" if is_production else "lax",
        "max_age": SESSION_MAX_AGE,
        "path": "/",
    }
