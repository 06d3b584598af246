import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.auth import require_admin
from core.config import load_youtube_config, load_smtp_config, load_sync_config
from core.constants import DEFAULT_PAGE_SIZE, MAX_FEED_PAGE_SIZE
from core.exceptions import ConfigurationError, SourceUnavailable
from core.logger import setup_logger
from database.repository import VideoRepo, SubscriberRepo
from delivery.broadcaster import Broadcaster
from delivery.mailer import SmtpMailer
from pipeline.ingest_pipeline import IngestionEngine
from pipeline.scheduler import SyncScheduler
from pipeline.video_feed import VideoFeed
from scraper.youtube_client import YouTubeClient

logger = setup_logger("SVC_YOUTUBE")
router = APIRouter(prefix="/api/youtube", tags=["youtube"])

video_repo = VideoRepo()
feed = VideoFeed(video_repo)
sync_scheduler: Optional[SyncScheduler] = None
youtube_client: Optional[YouTubeClient] = None


class VisibilityUpdate(BaseModel):
    is_visible: bool


def build_scheduler(videos: VideoRepo, subscribers: SubscriberRepo, client: YouTubeClient, mailer) -> SyncScheduler:
    notifier = Broadcaster(subscribers, mailer)
    engine = IngestionEngine(client, videos, notifier)
    return SyncScheduler(engine, load_sync_config())


# --- 🚀 LIFECYCLE ---
async def start_service():
    global sync_scheduler, youtube_client

    yt_config = load_youtube_config()
    if not yt_config.api_key or not yt_config.channel_id:
        logger.warning("YouTube API key or Channel ID not found. Scheduled syncs will fail until configured.")

    youtube_client = YouTubeClient(yt_config)
    sync_scheduler = build_scheduler(video_repo, SubscriberRepo(), youtube_client, SmtpMailer(load_smtp_config()))
    sync_scheduler.start()


async def stop_service():
    global sync_scheduler, youtube_client
    if sync_scheduler:
        sync_scheduler.shutdown()
        sync_scheduler = None
    if youtube_client:
        await youtube_client.aclose()
        youtube_client = None


# --- 📺 PUBLIC FEED ---
@router.get("")
async def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_FEED_PAGE_SIZE),
):
    result = await feed.get_page(page, limit)
    return {
        "videos": [v.to_dict() for v in result.items],
        "pagination": result.pagination(),
    }


# --- 🛠 ADMIN ---
@router.get("/admin", dependencies=[Depends(require_admin)])
async def list_all_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_FEED_PAGE_SIZE),
):
    result = await feed.get_page(page, limit, include_hidden=True)
    return {
        "videos": [v.to_dict() for v in result.items],
        "pagination": result.pagination(),
    }


@router.post("/sync", dependencies=[Depends(require_admin)])
async def sync_videos():
    if not sync_scheduler:
        return JSONResponse({"success": False, "error": "Sync service is not running"}, status_code=503)

    try:
        result = await sync_scheduler.run_once()
    except ConfigurationError as e:
        logger.error(f"Manual sync aborted: {e}")
        return JSONResponse({"success": False, "error": "YouTube sync is not configured"}, status_code=500)
    except SourceUnavailable as e:
        logger.error(f"Manual sync failed: {e}")
        return JSONResponse({"success": False, "error": "Failed to sync videos"}, status_code=500)
    except asyncio.TimeoutError:
        logger.error("Manual sync timed out")
        return JSONResponse({"success": False, "error": "Video sync timed out"}, status_code=500)

    return {"success": True, "message": "Videos synced successfully", **result.to_dict()}


@router.patch("/{video_id}/visibility", dependencies=[Depends(require_admin)])
async def update_visibility(video_id: int, body: VisibilityUpdate):
    video = await video_repo.set_visibility(video_id, body.is_visible)
    if not video:
        return JSONResponse({"error": "Video not found"}, status_code=404)
    return {"success": True, "video": video.to_dict()}


@router.delete("/{video_id}", dependencies=[Depends(require_admin)])
async def delete_video(video_id: int):
    deleted = await video_repo.delete_by_id(video_id)
    if not deleted:
        return JSONResponse({"error": "Video not found"}, status_code=404)
    return {
        "success": True,
        "message": "Video deleted from database. It will be re-synced if still on YouTube.",
    }
