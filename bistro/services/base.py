"""
Service Base Class

Every domain service works on one AsyncSession (one per request) and
commits each operation exactly once. A failed commit is rolled back and
surfaced as StorageError; nothing is retried.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bistro.core.config import get_settings
from bistro.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class SessionService:
    """Base class for services bound to a database session."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    async def _commit(self, action: str) -> None:
        """
        Commit the unit of work.

        Args:
            action: Human-readable description used in logs and errors

        Raises:
            StorageError: If the database rejected the commit
        """
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception(f"Error {action}")
            raise StorageError(f"Failed {action}", detail=str(e)) from e
