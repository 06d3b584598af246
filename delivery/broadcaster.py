import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone

from core.constants import PREF_YOUTUBE, YOUTUBE_WATCH_URL
from core.logger import setup_logger
from pipeline.message_formatter import add_unsubscribe_link, render_video_email, video_subject

logger = setup_logger("BROADCAST")


@dataclass
class BroadcastResult:
    total: int = 0
    successful: int = 0
    failed: int = 0


class Broadcaster:

    def __init__(self, subscribers, mailer):
        self.subscribers = subscribers
        self.mailer = mailer

    async def broadcast(self, subject: str, html: str, preference: str) -> BroadcastResult:
        targets = await self.subscribers.get_targets(preference)
        if not targets:
            logger.info(f"No active subscribers for {preference}, nothing to send")
            return BroadcastResult()

        sends = [
            self.mailer.deliver(u.email, subject, add_unsubscribe_link(html, u.email))
            for u in targets
        ]
        results = await asyncio.gather(*sends, return_exceptions=True)

        failed = 0
        for u, res in zip(targets, results):
            if isinstance(res, BaseException):
                failed += 1
                logger.warning(f"Delivery to {u.email} failed: {res}")

        # Stamped for the whole targeted batch, delivered or not
        await self.subscribers.mark_notified([u.id for u in targets], datetime.now(timezone.utc))

        result = BroadcastResult(total=len(targets), successful=len(targets) - failed, failed=failed)
        logger.info(f"Broadcast '{subject}': {result.successful}/{result.total} successful")
        return result

    async def notify_new_video(self, video) -> BroadcastResult:
        video_url = YOUTUBE_WATCH_URL.format(video_id=video.youtube_id)
        html = render_video_email(video.title, video.thumbnail_url, video_url)
        return await self.broadcast(video_subject(video.title), html, PREF_YOUTUBE)
