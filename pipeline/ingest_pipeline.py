from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.logger import setup_logger

logger = setup_logger("INGEST")


@dataclass
class SyncResult:
    total_fetched: int = 0
    new_count: int = 0
    latest_published_at: Optional[datetime] = None
    failed_inserts: int = 0
    notified: int = 0

    def to_dict(self) -> dict:
        return {
            "totalFetched": self.total_fetched,
            "newVideos": self.new_count,
            "latestVideo": self.latest_published_at.isoformat() if self.latest_published_at else None,
            "failedInserts": self.failed_inserts,
        }


class IngestionEngine:
    """
    One sync cycle: fetch the newest uploads, keep the ones whose youtube_id
    is not stored yet, store them and notify subscribers once per stored video.

    Only ConfigurationError and SourceUnavailable from the client escape
    run_sync. Insert failures and notification failures become counts.
    """

    def __init__(self, client, videos, notifier):
        self.client = client
        self.videos = videos
        self.notifier = notifier

    async def run_sync(self) -> SyncResult:
        logger.info("SYNC START")
        candidates = await self.client.fetch_latest()

        watermark = await self.videos.find_most_recent()
        if watermark:
            logger.info(f"Latest stored: {watermark.youtube_id} @ {watermark.published_at}")
        else:
            logger.info("Store is empty")

        # Collapse repeated ids inside one page, first (newest) wins
        unique = {}
        for c in candidates:
            unique.setdefault(c.youtube_id, c)

        existing = await self.videos.find_existing_ids(unique.keys())
        new_videos = [c for vid, c in unique.items() if vid not in existing]
        logger.info(f"FETCHED {len(candidates)} | KNOWN {len(existing)} | NEW {len(new_videos)}")

        result = SyncResult(
            total_fetched=len(candidates),
            latest_published_at=max((c.published_at for c in candidates), default=None),
        )
        if not new_videos:
            return result

        stored = await self.videos.insert_many(new_videos)
        result.new_count = stored.inserted_count
        result.failed_inserts = stored.failed
        if stored.failed:
            logger.warning(f"{stored.failed} video(s) could not be stored this cycle")

        for video in stored.inserted:
            try:
                report = await self.notifier.notify_new_video(video)
            except Exception as e:
                logger.error(f"Notification for {video.youtube_id} failed: {e}", exc_info=True)
                continue
            result.notified += 1
            logger.info(f"Notified {report.successful}/{report.total} for {video.youtube_id}")

        logger.info(f"SYNC DONE ({result.new_count} new)")
        return result
