import asyncio
import logging

import pytest

from core.config import SyncConfig
from core.exceptions import SourceUnavailable
from pipeline.ingest_pipeline import SyncResult
from pipeline.scheduler import SyncScheduler, JOB_ID


class SlowEngine:
    def __init__(self, delay=0.05, error=None):
        self.delay = delay
        self.error = error
        self.active = 0
        self.max_active = 0
        self.runs = 0

    async def run_sync(self):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            if self.error:
                raise self.error
            self.runs += 1
            return SyncResult(total_fetched=1)
        finally:
            self.active -= 1


async def test_manual_and_scheduled_runs_never_overlap():
    engine = SlowEngine()
    scheduler = SyncScheduler(engine, SyncConfig(timeout_seconds=5))

    await asyncio.gather(scheduler.run_once(), scheduler.run_once(), scheduler._scheduled_tick())

    assert engine.runs == 3
    assert engine.max_active == 1


async def test_cycle_deadline():
    scheduler = SyncScheduler(SlowEngine(delay=1.0), SyncConfig(timeout_seconds=0.05))

    with pytest.raises(asyncio.TimeoutError):
        await scheduler.run_once()
    assert not scheduler.is_syncing


async def test_scheduled_tick_logs_source_failures(caplog):
    scheduler = SyncScheduler(SlowEngine(delay=0, error=SourceUnavailable("quota")), SyncConfig())

    with caplog.at_level(logging.ERROR, logger="SCHEDULER"):
        await scheduler._scheduled_tick()

    assert "YouTube sync failed" in caplog.text


async def test_manual_run_propagates_source_failure():
    scheduler = SyncScheduler(SlowEngine(delay=0, error=SourceUnavailable("quota")), SyncConfig())

    with pytest.raises(SourceUnavailable):
        await scheduler.run_once()


async def test_start_registers_hourly_job():
    scheduler = SyncScheduler(SlowEngine(), SyncConfig(cron_minute=0))
    scheduler.start()
    try:
        assert scheduler.is_running
        job = scheduler.scheduler.get_job(JOB_ID)
        assert job is not None
        assert scheduler.next_run_time.minute == 0
        assert scheduler.next_run_time.second == 0
    finally:
        scheduler.shutdown()
