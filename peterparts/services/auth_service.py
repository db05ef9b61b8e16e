"""
Login flows: email OTP and Google sign-in.

Each flow ends by issuing a session token for the resolved user. Setting
the cookie is left to the HTTP layer.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from peterparts.core.security import issue_token
from peterparts.models.user import User
from peterparts.schemas.auth import GoogleProfile, TokenPayload
from peterparts.services.email import EmailService
from peterparts.services.user_service import (
    OTP_EXPIRY_MINUTES,
    UserService,
    VerificationCodeService,
)


logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the email provider did not accept a message."""


def token_payload_for(user: User) -> TokenPayload:
    return TokenPayload(user_id=str(user.id), email=user.email, role=user.role)


class AuthService:
    """Service class for authentication flows."""

    @staticmethod
    async def send_otp(email: str, db: AsyncSession, email_service: EmailService) -> None:
        """
        Issue a fresh login code and email it.

        Prior unused codes for the user are deleted first, so only the newest
        code can ever verify.

        Args:
            email: Address to log in with; an account is created if needed.
            db: Database session.
            email_service: Service used to deliver the code.

        Raises:
            EmailDeliveryError: If the provider rejected the email. The stored
                code stays until the next send replaces it.
        """
        user = await UserService.find_or_create_email_user(email, db)

        await VerificationCodeService.delete_user_codes(user.id, db)

        code = VerificationCodeService.generate_otp_code()
        await VerificationCodeService.create_code(
            user_id=user.id,
            code=code,
            expires_at=VerificationCodeService.get_otp_expiry(),
            db=db
        )

        result = await email_service.send_otp_email(
            to=email,
            code=code,
            expires_in_minutes=OTP_EXPIRY_MINUTES,
        )
        if not result.success:
            raise EmailDeliveryError(result.error or "Email provider rejected the message")

        logger.info(f"Sent login code to user {user.id}")

    @staticmethod
    async def verify_otp(email: str, code: str, db: AsyncSession) -> Optional[Tuple[User, str]]:
        """
        Check a submitted code and start a session.

        The code is looked up and then marked used in a second statement;
        two concurrent requests with the same code can both pass the lookup.

        Args:
            email: Address the code was sent to.
            code: Submitted code.
            db: Database session.

        Returns:
            Optional[tuple]: (User, session token) on success, None when the
            code does not match a live code for this user.
        """
        user = await UserService.get_user_by_email(email, db)
        if not user:
            logger.warning("Rejected login code for unknown email")
            return None

        verification_code = await VerificationCodeService.get_valid_code(user.id, code, db)
        if not verification_code:
            logger.warning(f"Rejected login code for user {user.id}")
            return None

        await VerificationCodeService.mark_code_used(verification_code, db)

        token = issue_token(token_payload_for(user))
        logger.info(f"User {user.id} authenticated with login code")
        return user, token

    @staticmethod
    async def complete_google_login(
        profile: GoogleProfile,
        db: AsyncSession,
        email_service: EmailService
    ) -> Tuple[User, str]:
        """
        Resolve a verified Google profile to a user and start a session.

        New accounts get a welcome email; a delivery failure is logged and
        does not fail the login.

        Returns:
            tuple: (User, session token)
        """
        user, created = await UserService.find_or_create_google_user(profile, db)

        if created:
            result = await email_service.send_welcome_email(user.email, user.name)
            if not result.success:
                logger.warning(f"Welcome email to user {user.id} failed: {result.error}")

        token = issue_token(token_payload_for(user))
        logger.info(f"User {user.id} authenticated with Google")
        return user, token
