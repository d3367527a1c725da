"""PostgreSQL repository implementations.

Writes are single-row conditional statements so concurrent requests for the
same run cannot lose updates. Callers own the transaction and commit.
"""

import uuid
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from llmsgen.models import Run
from llmsgen.models.run import utcnow

DEFAULT_RUN_TTL = timedelta(hours=24)


def coerce_run_id(run_id: str) -> str | None:
    """Return the canonical form of a run id, or None if it is not a UUID."""
    try:
        return str(uuid.UUID(str(run_id)))
    except ValueError:
        return None


class PostgresRunRepository:
    """PostgreSQL implementation of the run store."""

    def __init__(
        self,
        session: AsyncSession,
        ttl: timedelta = DEFAULT_RUN_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.ttl = ttl
        self.clock = clock

    async def create(self, content: str) -> Run:
        """Persist new content with a fresh id and an expiry of now + TTL."""
        now = self.clock()
        run = Run(
            id=str(uuid.uuid4()),
            content=content,
            created_at=now,
            expires_at=now + self.ttl,
        )
        self.session.add(run)
        await self.session.flush()
        return run

    async def get_active(self, run_id: str) -> Run | None:
        """Get an unexpired run by ID."""
        key = coerce_run_id(run_id)
        if key is None:
            return None
        result = await self.session.execute(
            select(Run)
            .where(Run.id == key, Run.expires_at > self.clock())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def mark_paid(self, run_id: str) -> Run | None:
        """Set ``paid_at`` on an unexpired, unpaid run.

        A run that is already paid keeps its original timestamp and is
        returned as-is. Returns None when the run is absent or expired.
        """
        key = coerce_run_id(run_id)
        if key is None:
            return None
        now = self.clock()
        await self.session.execute(
            update(Run)
            .where(Run.id == key, Run.expires_at > now, Run.paid_at.is_(None))
            .values(paid_at=now)
            .execution_options(synchronize_session=False)
        )
        return await self.get_active(key)

    async def delete_expired(self) -> int:
        """Delete every run past its expiry, paid or not."""
        result = await self.session.execute(
            delete(Run)
            .where(Run.expires_at < self.clock())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
