
import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, String, Uuid
from sqlalchemy.sql import func

from peterparts.db.base import Base


class Role(str, enum.Enum):
    """Roles a user may hold. Endpoints list every role they accept."""
    CUSTOMER = "Customer"
    ADMIN = "Admin"


class AuthProvider(str, enum.Enum):
    """How the account was first created."""
    EMAIL = "Email"
    GOOGLE = "Google"


class User(Base):
    """
    User model for passwordless (OTP) and Google authenticated customers.

    Email is the stable identity; a Google account is linked onto the
    same row when the emails match.
    """

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    role = Column(Enum(Role, name="user_role"), default=Role.CUSTOMER, nullable=False)
    provider = Column(Enum(AuthProvider, name="auth_provider"), default=AuthProvider.EMAIL, nullable=False)
    google_id = Column(String, unique=True, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
