"""
Storage plumbing shared by the lifecycle components.

Each component is constructed with the session it works on. All calls go
through ``run_bounded`` so a slow or failing database surfaces as
``DependencyUnavailableError`` instead of hanging the request.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from courier.app.core.config import settings
from courier.app.core.reliability import run_bounded


class StorageComponent:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _execute(self, statement):
        return await run_bounded(self.db.execute(statement), settings.storage_timeout_seconds)

    async def _commit(self):
        await run_bounded(self.db.commit(), settings.storage_timeout_seconds)

    async def _apply(self, statement) -> int:
        """
        Run one conditional UPDATE/DELETE and commit it.

        Returns the number of rows the statement changed; 0 means the
        WHERE clause (identity plus expected current state) matched nothing.
        """
        result = await self._execute(statement)
        await self._commit()
        return result.rowcount

    async def _insert(self, instance):
        """Insert and commit one row; IntegrityError propagates after rollback."""
        self.db.add(instance)
        try:
            await self._commit()
        except Exception:
            await self.db.rollback()
            raise
        return instance
