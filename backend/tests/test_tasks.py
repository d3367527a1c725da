"""Tests for the Celery expiry sweep."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from unittest.mock import patch

from llmsgen.config import Settings
from llmsgen.database import build_engine, build_session_maker, create_tables
from llmsgen.models import Run
from llmsgen.models.run import utcnow
from llmsgen.workers.celery_app import celery_app
from llmsgen.workers.tasks import delete_expired_runs, sweep_expired_runs


def _seed(url: str, *ages_hours: int) -> None:
    """Create the schema and insert runs created ``age`` hours ago."""

    async def main():
        engine = build_engine(url)
        try:
            await create_tables(engine)
            session_maker = build_session_maker(engine)
            async with session_maker() as session:
                now = utcnow()
                for age in ages_hours:
                    created = now - timedelta(hours=age)
                    session.add(Run(
                        content="x",
                        created_at=created,
                        expires_at=created + timedelta(hours=24),
                    ))
                await session.commit()
        finally:
            await engine.dispose()

    asyncio.run(main())


class TestSweep:
    def test_delete_expired_runs(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'runs.db'}"
        _seed(url, 1, 30, 48)
        assert asyncio.run(delete_expired_runs(url)) == 2
        assert asyncio.run(delete_expired_runs(url)) == 0

    def test_task_uses_configured_database(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'runs.db'}"
        _seed(url, 25)
        settings = Settings(_env_file=None, database_url=url)

        with patch("llmsgen.workers.tasks.get_settings", return_value=settings):
            result = sweep_expired_runs()

        assert result == {"deleted": 1}

    def test_beat_schedule(self):
        entry = celery_app.conf.beat_schedule["sweep-expired-runs"]
        assert entry["task"] == "llmsgen.workers.tasks.sweep_expired_runs"
