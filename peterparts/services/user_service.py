import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from peterparts.models.user import AuthProvider, User
from peterparts.models.verification_code import VerificationCode
from peterparts.schemas.auth import GoogleProfile


logger = logging.getLogger(__name__)

# OTP lifetime in minutes
OTP_EXPIRY_MINUTES = 10


class UserService:
    """Service class for user persistence and identity resolution."""

    @staticmethod
    async def create_user(
        email: str,
        provider: AuthProvider,
        db: AsyncSession,
        name: Optional[str] = None,
        avatar_url: Optional[str] = None,
        google_id: Optional[str] = None,
    ) -> User:
        """
        Create and persist a new user.

        Args:
            email: Unique email address.
            provider: Provider the account was created with.
            db: Database session.
            name: Optional display name.
            avatar_url: Optional avatar URL.
            google_id: Optional Google subject id.

        Returns:
            User: The stored user.
        """
        user = User(
            email=email,
            provider=provider,
            name=name,
            avatar_url=avatar_url,
            google_id=google_id,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)

        logger.info(f"Created {provider.value} user: {user.id}")
        return user

    @staticmethod
    async def get_user_by_id(user_id: UUID, db: AsyncSession) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    @staticmethod
    async def get_user_by_email(email: str, db: AsyncSession) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    @staticmethod
    async def get_user_by_google_id(google_id: str, db: AsyncSession) -> Optional[User]:
        result = await db.execute(select(User).where(User.google_id == google_id))
        return result.scalars().first()

    @staticmethod
    async def update_user(user: User, db: AsyncSession, **changes) -> User:
        """
        Apply field changes to a user and persist them.

        Args:
            user: User to update.
            db: Database session.
            **changes: Column values to set.

        Returns:
            User: The refreshed user.
        """
        for field, value in changes.items():
            setattr(user, field, value)
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def list_users(db: AsyncSession) -> List[User]:
        """All users, newest first."""
        result = await db.execute(select(User).order_by(User.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def find_or_create_email_user(email: str, db: AsyncSession) -> User:
        """
        Return the user owning this email, creating an Email-provider user if none exists.
        """
        user = await UserService.get_user_by_email(email, db)
        if user:
            return user
        return await UserService.create_user(email=email, provider=AuthProvider.EMAIL, db=db)

    @staticmethod
    async def find_or_create_google_user(
        profile: GoogleProfile,
        db: AsyncSession
    ) -> Tuple[User, bool]:
        """
        Resolve a Google identity to a local user.

        Resolution order: existing Google id (refresh name/avatar), then an
        existing account with the same email (link the Google id onto it),
        then a new Google user. Name and avatar are only overwritten when
        Google supplied a value.

        Args:
            profile: Verified Google profile.
            db: Database session.

        Returns:
            tuple: (User, created) where created is True for a new account.
        """
        profile_changes = {}
        if profile.name:
            profile_changes["name"] = profile.name
        if profile.picture:
            profile_changes["avatar_url"] = profile.picture

        user = await UserService.get_user_by_google_id(profile.sub, db)
        if user:
            logger.info(f"Found existing Google user: {user.id}")
            if profile_changes:
                user = await UserService.update_user(user, db, **profile_changes)
            return user, False

        user = await UserService.get_user_by_email(profile.email, db)
        if user:
            user = await UserService.update_user(user, db, google_id=profile.sub, **profile_changes)
            logger.info(f"Linked Google account to existing user: {user.id}")
            return user, False

        user = await UserService.create_user(
            email=profile.email,
            provider=AuthProvider.GOOGLE,
            db=db,
            name=profile.name,
            avatar_url=profile.picture,
            google_id=profile.sub,
        )
        return user, True


class VerificationCodeService:
    """Service class for one-time login codes."""

    @staticmethod
    def generate_otp_code() -> str:
        """
        Generate a 6-digit login code.

        Returns:
            str: Uniformly random value in [100000, 999999].
        """
        return str(100000 + secrets.randbelow(900000))

    @staticmethod
    def get_otp_expiry() -> datetime:
        return datetime.now(timezone.utc) + timedelta(minutes=OTP_EXPIRY_MINUTES)

    @staticmethod
    async def create_code(
        user_id: UUID,
        code: str,
        expires_at: datetime,
        db: AsyncSession
    ) -> VerificationCode:
        verification_code = VerificationCode(user_id=user_id, code=code, expires_at=expires_at)
        db.add(verification_code)
        await db.commit()
        await db.refresh(verification_code)

        logger.info(f"Issued verification code {verification_code.id} for user {user_id}")
        return verification_code

    @staticmethod
    async def get_valid_code(user_id: UUID, code: str, db: AsyncSession) -> Optional[VerificationCode]:
        """
        Find an unused, unexpired code matching exactly this user and value.

        Args:
            user_id: Owner of the code.
            code: Submitted code.
            db: Database session.

        Returns:
            Optional[VerificationCode]: The matching code, or None.
        """
        now = datetime.now(timezone.utc)
        result = await db.execute(
            select(VerificationCode).where(
                VerificationCode.user_id == user_id,
                VerificationCode.code == code,
                VerificationCode.used_at.is_(None),
                VerificationCode.expires_at > now
            )
        )
        return result.scalars().first()

    @staticmethod
    async def mark_code_used(verification_code: VerificationCode, db: AsyncSession) -> VerificationCode:
        verification_code.mark_used()
        await db.commit()
        return verification_code

    @staticmethod
    async def delete_user_codes(user_id: UUID, db: AsyncSession) -> int:
        """
        Delete every unused code for a user so only one live code exists at a time.

        Returns:
            int: Number of codes removed.
        """
        result = await db.execute(
            delete(VerificationCode).where(
                VerificationCode.user_id == user_id,
                VerificationCode.used_at.is_(None)
            )
        )
        await db.commit()
        return result.rowcount

    @staticmethod
    async def delete_expired_codes(db: AsyncSession) -> int:
        """
        Remove codes whose expiry has passed, used or not.

        Returns:
            int: Number of codes removed.
        """
        now = datetime.now(timezone.utc)
        result = await db.execute(
            delete(VerificationCode).where(VerificationCode.expires_at < now)
        )
        await db.commit()
        return result.rowcount
