"""
Database Dependencies for FastAPI Routes

Routes declare the session they need and FastAPI provides it:

    @router.get("/carousels/{carousel_id}")
    async def get_carousel(carousel_id: int, db: DBSession):
        return await CarouselStore(db).get(carousel_id)

Tests swap the real session for their own through
app.dependency_overrides[get_db].
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lifestyle_cms.db.session import get_session


# ================================
# Database Session Dependency
# ================================

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session.

    Thin wrapper around get_session(): rollback on error and close on
    exit both happen there.

    Yields:
        AsyncSession: Database session for the current request
    """
    async for session in get_session():
        yield session


DBSession = Annotated[AsyncSession, Depends(get_db)]


# ================================
# Testing Helpers
# ================================

def get_db_override(session: AsyncSession):
    """
    Create a dependency override that always yields the given session.

    Usage in Tests:
    ---------------
        app.dependency_overrides[get_db] = get_db_override(test_session)
    """
    async def _override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    return _override


# ================================
# Database Transaction Helper
# ================================

class DBTransaction:
    """
    Commit-or-rollback scope around a group of statements.

    The session autobegins on first use, so this does not call begin();
    it only decides how the current transaction ends:

    - the block raises: rollback, exception propagates
    - the block succeeds: commit; if the commit itself fails, rollback
      and re-raise

    Usage:
    ------
        async with DBTransaction(db):
            await db.execute(delete(CarouselItem).where(...))
            db.add(CarouselItem(...))
        # both statements are committed together or not at all
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self) -> AsyncSession:
        return self.session

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            await self.session.rollback()
            return False

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        return False


__all__ = [
    "get_db",
    "DBSession",
    "get_db_override",
    "DBTransaction",
]
