import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from core.config import SyncConfig
from core.exceptions import ZenithError
from core.logger import setup_logger

logger = setup_logger("SCHEDULER")

JOB_ID = "youtube_sync"


class SyncScheduler:
    """
    Hourly cron trigger around IngestionEngine.run_sync.

    Scheduled ticks and manual syncs share one lock, so two cycles never
    overlap inside this process. Each cycle is bounded by a deadline so a
    hung upstream call cannot starve the next tick.
    """

    def __init__(self, engine, config: SyncConfig):
        self.engine = engine
        self.config = config
        self.scheduler = AsyncIOScheduler()
        self._lock = asyncio.Lock()

    @property
    def is_syncing(self) -> bool:
        return self._lock.locked()

    @property
    def is_running(self) -> bool:
        return self.scheduler.running

    @property
    def next_run_time(self):
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    async def run_once(self):
        async with self._lock:
            return await asyncio.wait_for(self.engine.run_sync(), timeout=self.config.timeout_seconds)

    async def _scheduled_tick(self):
        logger.info("Running YouTube video sync...")
        try:
            result = await self.run_once()
        except ZenithError as e:
            logger.error(f"YouTube sync failed: {e}")
            return
        except asyncio.TimeoutError:
            logger.error(f"YouTube sync exceeded {self.config.timeout_seconds}s deadline")
            return
        except Exception as e:
            logger.error(f"YouTube sync crashed: {e}", exc_info=True)
            return
        logger.info(f"YouTube sync completed: {result.to_dict()}")

    def start(self):
        self.scheduler.add_job(
            self._scheduled_tick,
            trigger=CronTrigger(minute=self.config.cron_minute),
            id=JOB_ID,
            name="Sync channel uploads every hour",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(f"YouTube video scheduler started (minute={self.config.cron_minute})")

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("YouTube video scheduler stopped")
