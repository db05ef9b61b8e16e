"""
User administration endpoints.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from peterparts.db.session import get_db
from peterparts.dependencies.auth import require_admin
from peterparts.schemas.auth import TokenPayload
from peterparts.schemas.user import UserListResponse, UserResponse
from peterparts.services.user_service import UserService


logger = logging.getLogger(__name__)

users_router = APIRouter()


@users_router.get("", response_model=UserListResponse)
async def list_users(
    admin: TokenPayload = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    List every user, newest first. Admin only.

    Args:
        admin: Session of the calling admin.
        db: Database session.

    Returns:
        UserListResponse: All users.
    """
    users = await UserService.list_users(db)
    logger.info(f"Admin {admin.user_id} listed {len(users)} users")
    return UserListResponse(users=[UserResponse.model_validate(user) for user in users])
