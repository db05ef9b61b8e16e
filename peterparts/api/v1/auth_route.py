import logging
from typing import Optional
from urllib.parse import urlencode
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from peterparts.core.config import settings
from peterparts.core.security import COOKIE_NAME, get_cookie_options
from peterparts.db.session import get_db
from peterparts.dependencies.auth import get_current_session
from peterparts.schemas.auth import (
    AuthResponse,
    MessageResponse,
    SendOtpRequest,
    TokenPayload,
    VerifyOtpRequest,
)
from peterparts.schemas.user import UserResponse
from peterparts.services import google_oauth
from peterparts.services.auth_service import AuthService, EmailDeliveryError
from peterparts.services.email import EmailService, get_email_service
from peterparts.services.user_service import UserService

# Set up logger
logger = logging.getLogger(__name__)

auth_router = APIRouter()


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(COOKIE_NAME, token, **get_cookie_options(settings.is_production))


def _frontend_callback_url(**params: str) -> str:
    return f"{settings.frontend_url.rstrip('/')}/auth/callback?{urlencode(params)}"


@auth_router.post("/otp/send", response_model=MessageResponse)
async def send_otp(
    data: SendOtpRequest,
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Send a one-time login code to an email address.

    Creates the account on first use.

    Args:
        data: Request with the email address.
        db: Database session.
        email_service: Email delivery service.

    Returns:
        MessageResponse: Confirmation message.
    """
    try:
        await AuthService.send_otp(data.email, db, email_service)
    except EmailDeliveryError as e:
        logger.error(f"Failed to send OTP email: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification email",
        )
    except Exception as e:
        logger.exception(f"Error in send_otp: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification code",
        )

    return MessageResponse(message="Verification code sent successfully")


@auth_router.post("/otp/verify", response_model=AuthResponse)
async def verify_otp(
    data: VerifyOtpRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Verify a login code and start a session.

    The failure response does not say whether the email or the code was wrong.

    Args:
        data: Request with email and code.
        response: Response used to set the session cookie.
        db: Database session.

    Returns:
        AuthResponse: The authenticated user.
    """
    try:
        result = await AuthService.verify_otp(data.email, data.code, db)
    except Exception as e:
        logger.exception(f"Error in verify_otp: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to verify code",
        )

    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired verification code",
        )

    user, token = result
    _set_session_cookie(response, token)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        message="Authentication successful",
    )


@auth_router.get("/google", response_class=RedirectResponse)
async def google_auth():
    """
    Initiate Google OAuth2 login flow by redirecting to the consent screen.
    """
    if not google_oauth.is_configured():
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to initiate Google authentication",
        )

    return RedirectResponse(url=google_oauth.get_google_auth_url(), status_code=302)


@auth_router.get("/google/callback", response_class=RedirectResponse)
async def google_auth_callback(
    code: Optional[str] = None,
    error: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Handle Google OAuth2 callback.

    Always redirects back to the frontend, with ``success=true`` or an
    ``error`` flag, so the browser flow never lands on a JSON page.

    Args:
        code: Authorization code from Google.
        error: Error reported by Google.
        db: Database session.
        email_service: Email delivery service.
    """
    if error:
        logger.warning(f"Google returned an OAuth error: {error}")
        return RedirectResponse(url=_frontend_callback_url(error=error), status_code=302)

    if not code:
        return RedirectResponse(url=_frontend_callback_url(error="missing_code"), status_code=302)

    try:
        profile = await google_oauth.exchange_code(code)
        user, token = await AuthService.complete_google_login(profile, db, email_service)
    except Exception as e:
        logger.exception(f"Error in google_auth_callback: {e}")
        return RedirectResponse(
            url=_frontend_callback_url(error="authentication_failed"),
            status_code=302,
        )

    redirect = RedirectResponse(url=_frontend_callback_url(success="true"), status_code=302)
    _set_session_cookie(redirect, token)
    return redirect


@auth_router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """
    Clear the session cookie.

    The token itself stays valid until it expires; there is no server-side
    session to revoke.
    """
    options = get_cookie_options(settings.is_production)
    response.delete_cookie(
        COOKIE_NAME,
        path=options["path"],
        secure=options["secure"],
        httponly=options["httponly"],
        samesite=options["samesite"],
    )
    return MessageResponse(message="Logged out successfully")


@auth_router.get("/me", response_model=UserResponse)
async def get_current_user(
    session: TokenPayload = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """
    Return the signed-in user, re-read from the database.

    Raises:
        HTTPException: 404 if the account no longer exists.
    """
    try:
        user_id = UUID(session.user_id)
    except ValueError:
        user_id = None

    try:
        user = await UserService.get_user_by_id(user_id, db) if user_id else None
    except Exception as e:
        logger.exception(f"Error in get_current_user: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get user",
        )

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    return UserResponse.model_validate(user)
