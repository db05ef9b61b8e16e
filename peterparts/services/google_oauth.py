"""
Google OAuth2 authorization-code flow.

Builds the consent URL and exchanges the returned code for a verified
Google identity.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi.concurrency import run_in_threadpool
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests
from google.oauth2 import id_token

from peterparts.core.config import settings
from peterparts.schemas.auth import GoogleProfile


logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"


class GoogleOAuthError(Exception):
    """Raised when the code exchange or ID token verification fails."""


def is_configured() -> bool:
    return bool(settings.google_client_id and settings.google_client_secret)


def get_google_auth_url() -> str:
    """
    Generate Google OAuth2 authorization URL.

    Returns:
        str: Consent screen URL for the openid/email/profile scopes.
    """
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_redirect_uri,
        "scope": "openid email profile",
        "response_type": "code",
        "access_type": "offline",
        "prompt": "consent",
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


async def exchange_code(code: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> GoogleProfile:
    """
    Exchange an authorization code for the caller's Google profile.

    Args:
        code: Authorization code from the callback query string.
        transport: Optional httpx transport, used by tests.

    Returns:
        GoogleProfile: Verified subject, email, name and picture.

    Raises:
        GoogleOAuthError: If Google rejects the code or the ID token is invalid.
    """
    if not is_configured():
        raise GoogleOAuthError("Google OAuth2 not properly configured")

    token_data = {
        "client_id": settings.google_client_id,
        "client_secret": settings.google_client_secret,
        "code": code,
        "grant_type": "authorization_code",
        "redirect_uri": settings.google_redirect_uri,
    }

    try:
        async with httpx.AsyncClient(timeout=30.0, transport=transport) as client:
            token_response = await client.post(GOOGLE_TOKEN_URL, data=token_data)
            token_response.raise_for_status()
            token_info = token_response.json()
    except httpx.HTTPError as e:
        logger.error(f"Google token exchange failed: {e}")
        raise GoogleOAuthError("Token exchange failed") from e

    id_token_value = token_info.get("id_token")
    if not id_token_value:
        raise GoogleOAuthError("ID token missing from response")

    try:
        # Certificate fetch uses blocking requests
        request_obj = requests.Request()
        id_info = await run_in_threadpool(
            id_token.verify_oauth2_token,
            id_token_value,
            request_obj,
            settings.google_client_id,
            clock_skew_in_seconds=10,
        )
    except (ValueError, google_exceptions.GoogleAuthError) as e:
        logger.error(f"Google ID token verification failed: {e}")
        raise GoogleOAuthError("Invalid ID token") from e

    return GoogleProfile(
        sub=id_info["sub"],
        email=id_info["email"],
        name=id_info.get("name"),
        picture=id_info.get("picture"),
    )
