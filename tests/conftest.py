from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import NotificationDeliveryFailure
from database.db import build_engine, build_session_factory, init_db
from database.repository import VideoRepo, SubscriberRepo
from delivery.broadcaster import BroadcastResult
from scraper.youtube_client import VideoCandidate

BASE_TIME = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_candidate(youtube_id: str, hours: int = 0, title: str = None) -> VideoCandidate:
    return VideoCandidate(
        youtube_id=youtube_id,
        title=title or f"Video {youtube_id}",
        description=f"About {youtube_id}",
        thumbnail_url=f"https://i.ytimg.com/vi/{youtube_id}/mqdefault.jpg",
        published_at=BASE_TIME + timedelta(hours=hours),
    )


class FakeClient:
    def __init__(self, candidates=None, error=None):
        self.candidates = list(candidates or [])
        self.error = error
        self.calls = 0

    async def fetch_latest(self, max_results=None):
        self.calls += 1
        if self.error:
            raise self.error
        return sorted(self.candidates, key=lambda c: c.published_at, reverse=True)


class FakeNotifier:
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.notified = []

    async def notify_new_video(self, video):
        if video.youtube_id in self.fail_for:
            raise RuntimeError(f"boom for {video.youtube_id}")
        self.notified.append(video.youtube_id)
        return BroadcastResult(total=1, successful=1, failed=0)


class FakeMailer:
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent = []

    async def deliver(self, to, subject, html):
        if to in self.fail_for:
            raise NotificationDeliveryFailure(to, ConnectionResetError("connection reset"))
        self.sent.append((to, subject, html))
        return f"<msg-{len(self.sent)}@test>"


@pytest.fixture
async def session_factory(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def video_repo(session_factory):
    return VideoRepo(session_factory)


@pytest.fixture
def subscriber_repo(session_factory):
    return SubscriberRepo(session_factory)
