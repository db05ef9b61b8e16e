"""
Out-of-band maintenance: delete expired login codes.

Run with ``python -m peterparts.tasks.cleanup`` (e.g. from cron).
"""

import asyncio
import logging

from peterparts.core.logging_config import configure_logging
from peterparts.db.session import AsyncSessionLocal, dispose_db
from peterparts.services.user_service import VerificationCodeService


logger = logging.getLogger(__name__)


async def sweep_expired_codes(session_factory=AsyncSessionLocal) -> int:
    """
    Delete every verification code past its expiry.

    Args:
        session_factory: Session factory to use; defaults to the app's.

    Returns:
        int: Number of codes removed.
    """
    async with session_factory() as db:
        removed = await VerificationCodeService.delete_expired_codes(db)
    logger.info(f"Removed {removed} expired verification codes")
    return removed


async def _main() -> None:
    try:
        await sweep_expired_codes()
    finally:
        await dispose_db()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(_main())
