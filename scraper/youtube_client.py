"""
YouTube Data API client.
Lists the newest uploads of one channel through the search endpoint.
"""
import httpx
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.config import YouTubeConfig
from core.constants import YOUTUBE_API_URL, YOUTUBE_MAX_PAGE_SIZE, YOUTUBE_WATCH_URL, THUMBNAIL_SIZES
from core.exceptions import ConfigurationError, SourceUnavailable
from core.logger import setup_logger

logger = setup_logger("YOUTUBE_CLIENT")


@dataclass(frozen=True)
class VideoCandidate:
    youtube_id: str
    title: str
    description: str
    thumbnail_url: str
    published_at: datetime

    @property
    def watch_url(self) -> str:
        return YOUTUBE_WATCH_URL.format(video_id=self.youtube_id)

    def to_row(self) -> dict:
        return {
            "youtube_id": self.youtube_id,
            "title": self.title,
            "description": self.description,
            "thumbnail_url": self.thumbnail_url,
            "published_at": self.published_at,
        }


def parse_published_at(raw: str) -> datetime:
    # API timestamps look like 2024-05-01T12:00:00Z
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _pick_thumbnail(thumbnails: dict) -> str:
    for size in THUMBNAIL_SIZES:
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return ""


def parse_search_item(item: dict) -> Optional[VideoCandidate]:
    """Maps one search result to a candidate. Returns None for non-video hits."""
    ident = item.get("id")
    video_id = ident.get("videoId") if isinstance(ident, dict) else None
    snippet = item.get("snippet") or {}
    if not video_id or not snippet.get("publishedAt"):
        return None
    return VideoCandidate(
        youtube_id=video_id,
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        thumbnail_url=_pick_thumbnail(snippet.get("thumbnails") or {}),
        published_at=parse_published_at(snippet["publishedAt"]),
    )


class YouTubeClient:

    def __init__(self, config: YouTubeConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
                headers={"Accept": "application/json"},
            )
        return self._client

    async def aclose(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_latest(self, max_results: Optional[int] = None) -> list[VideoCandidate]:
        """
        Returns at most `max_results` (capped at 50) videos of the configured
        channel, newest first. One page only, no cursor is followed.
        """
        if not self.config.api_key or not self.config.channel_id:
            raise ConfigurationError("YouTube API key or Channel ID not configured")

        limit = max_results if max_results is not None else self.config.max_results
        limit = max(1, min(limit, YOUTUBE_MAX_PAGE_SIZE))

        params = {
            "part": "snippet",
            "channelId": self.config.channel_id,
            "maxResults": limit,
            "order": "date",
            "type": "video",
            "key": self.config.api_key,
        }

        try:
            resp = await self._get_client().get(f"{YOUTUBE_API_URL}/search", params=params)
        except httpx.HTTPError as e:
            raise SourceUnavailable(f"YouTube request failed: {e!r}") from e

        if resp.status_code >= 400:
            raise SourceUnavailable(f"YouTube API returned {resp.status_code}: {_api_error_message(resp)}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise SourceUnavailable("YouTube API returned a non-JSON body") from e

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise SourceUnavailable("YouTube API response has no 'items' list")

        candidates = []
        for item in items:
            try:
                candidate = parse_search_item(item)
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed search item: {e}")
                continue
            if candidate:
                candidates.append(candidate)

        candidates.sort(key=lambda c: c.published_at, reverse=True)
        logger.info(f"Fetched {len(candidates)} videos for channel {self.config.channel_id}")
        return candidates


def _api_error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message") or resp.reason_phrase
    return resp.reason_phrase
