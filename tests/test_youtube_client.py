from datetime import datetime, timezone

import httpx
import pytest

from core.config import YouTubeConfig
from core.exceptions import ConfigurationError, SourceUnavailable
from scraper.youtube_client import YouTubeClient, parse_search_item


def search_item(video_id, published, title="Clip", thumbs=None):
    return {
        "id": {"kind": "youtube#video", "videoId": video_id},
        "snippet": {
            "title": title,
            "description": f"desc {video_id}",
            "publishedAt": published,
            "thumbnails": thumbs if thumbs is not None else {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                "medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"},
            },
        },
    }


def make_client(handler, **config):
    cfg = YouTubeConfig(api_key=config.get("api_key", "KEY"), channel_id=config.get("channel_id", "UC123"))
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return YouTubeClient(cfg, http_client=http)


async def test_fetch_latest_maps_items_newest_first():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"items": [
            search_item("old", "2025-01-01T10:00:00Z"),
            search_item("new", "2025-01-02T10:00:00Z", title="Fresh"),
        ]})

    client = make_client(handler)
    videos = await client.fetch_latest()

    assert [v.youtube_id for v in videos] == ["new", "old"]
    assert videos[0].title == "Fresh"
    assert videos[0].thumbnail_url.endswith("/new/mqdefault.jpg")
    assert videos[0].published_at == datetime(2025, 1, 2, 10, 0, tzinfo=timezone.utc)
    assert videos[0].watch_url == "https://www.youtube.com/watch?v=new"

    assert seen["params"]["channelId"] == "UC123"
    assert seen["params"]["order"] == "date"
    assert seen["params"]["type"] == "video"
    assert seen["params"]["key"] == "KEY"


async def test_max_results_is_capped_at_page_limit():
    seen = {}

    def handler(request):
        seen["max"] = request.url.params["maxResults"]
        return httpx.Response(200, json={"items": []})

    client = make_client(handler)
    assert await client.fetch_latest(max_results=500) == []
    assert seen["max"] == "50"


@pytest.mark.parametrize("api_key,channel_id", [("", "UC123"), ("KEY", "")])
async def test_missing_credentials_fail_before_network(api_key, channel_id):
    def handler(request):
        raise AssertionError("network must not be touched")

    client = make_client(handler, api_key=api_key, channel_id=channel_id)
    with pytest.raises(ConfigurationError):
        await client.fetch_latest()


async def test_http_error_status_becomes_source_unavailable():
    def handler(request):
        return httpx.Response(403, json={"error": {"code": 403, "message": "quotaExceeded"}})

    client = make_client(handler)
    with pytest.raises(SourceUnavailable, match="quotaExceeded"):
        await client.fetch_latest()


async def test_transport_error_becomes_source_unavailable():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    client = make_client(handler)
    with pytest.raises(SourceUnavailable):
        await client.fetch_latest()


async def test_body_without_items_is_rejected():
    client = make_client(lambda request: httpx.Response(200, json={"kind": "youtube#searchListResponse"}))
    with pytest.raises(SourceUnavailable):
        await client.fetch_latest()


async def test_malformed_items_are_skipped():
    def handler(request):
        return httpx.Response(200, json={"items": [
            {"id": {"kind": "youtube#channel", "channelId": "UC123"}, "snippet": {"publishedAt": "2025-01-01T00:00:00Z"}},
            search_item("broken", "not-a-date"),
            search_item("ok", "2025-01-01T00:00:00Z"),
        ]})

    client = make_client(handler)
    videos = await client.fetch_latest()
    assert [v.youtube_id for v in videos] == ["ok"]


def test_thumbnail_falls_back_to_next_size():
    item = search_item("v1", "2025-01-01T00:00:00Z", thumbs={"high": {"url": "https://img/high.jpg"}})
    assert parse_search_item(item).thumbnail_url == "https://img/high.jpg"

    item = search_item("v2", "2025-01-01T00:00:00Z", thumbs={})
    assert parse_search_item(item).thumbnail_url == ""
