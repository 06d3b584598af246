import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import select, update, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.constants import EMAIL_PATTERN, PREFERENCE_FLAGS, RECENT_SUBSCRIBERS_LIMIT
from core.exceptions import PartialInsertFailure
from core.logger import setup_logger
from database.db import AsyncSessionLocal
from database.models import YouTubeVideo, Subscriber, utc_now

logger = setup_logger("VIDEO_DB")

_EMAIL_RE = re.compile(EMAIL_PATTERN)

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass
class InsertResult:
    inserted: list = field(default_factory=list)
    skipped: int = 0
    failures: list = field(default_factory=list)

    @property
    def inserted_count(self) -> int:
        return len(self.inserted)

    @property
    def failed(self) -> int:
        return len(self.failures)


class VideoRepo:

    def __init__(self, session_factory=AsyncSessionLocal):
        self.session_factory = session_factory

    async def find_most_recent(self) -> Optional[YouTubeVideo]:
        async with self.session_factory() as session:
            stmt = select(YouTubeVideo).order_by(YouTubeVideo.published_at.desc()).limit(1)
            return (await session.execute(stmt)).scalar_one_or_none()

    async def find_existing_ids(self, youtube_ids: Iterable[str]) -> set:
        ids = set(youtube_ids)
        if not ids:
            return set()
        async with self.session_factory() as session:
            stmt = select(YouTubeVideo.youtube_id).where(YouTubeVideo.youtube_id.in_(ids))
            return {r[0] for r in (await session.execute(stmt)).all()}

    async def _insert_one(self, candidate) -> Optional[int]:
        """
        Inserts one video, ignoring a youtube_id conflict.
        Returns the new row id, or None when the video was already stored.
        """
        async with self.session_factory() as session:
            insert_fn = _DIALECT_INSERTS.get(session.bind.dialect.name, pg_insert)
            stmt = (
                insert_fn(YouTubeVideo)
                .values(**candidate.to_row(), is_visible=True, created_at=utc_now())
                .on_conflict_do_nothing(index_elements=["youtube_id"])
                .returning(YouTubeVideo.id)
            )
            try:
                new_id = (await session.execute(stmt)).scalar_one_or_none()
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PartialInsertFailure(candidate.youtube_id, e) from e
            return new_id

    async def insert_many(self, candidates) -> InsertResult:
        """
        Best-effort unordered batch insert. Every record commits on its own so
        one bad row never blocks the others.
        """
        result = InsertResult()
        for candidate in candidates:
            try:
                new_id = await self._insert_one(candidate)
            except PartialInsertFailure as e:
                logger.error(f"Insert failed for {e.youtube_id}: {e.cause}")
                result.failures.append(e)
                continue
            if new_id is None:
                logger.info(f"Video {candidate.youtube_id} already stored, skipping")
                result.skipped += 1
            else:
                result.inserted.append(candidate)
        return result

    async def list_visible(self, page: int, page_size: int) -> tuple[list, int]:
        return await self._list(page, page_size, visible_only=True)

    async def list_all(self, page: int, page_size: int) -> tuple[list, int]:
        return await self._list(page, page_size, visible_only=False)

    async def _list(self, page: int, page_size: int, visible_only: bool) -> tuple[list, int]:
        async with self.session_factory() as session:
            stmt = select(YouTubeVideo)
            count_stmt = select(func.count(YouTubeVideo.id))
            if visible_only:
                stmt = stmt.where(YouTubeVideo.is_visible == True)
                count_stmt = count_stmt.where(YouTubeVideo.is_visible == True)
            stmt = (
                stmt.order_by(YouTubeVideo.published_at.desc(), YouTubeVideo.id.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            records = (await session.execute(stmt)).scalars().all()
            total = (await session.execute(count_stmt)).scalar() or 0
            return list(records), total

    async def set_visibility(self, video_id: int, visible: bool) -> Optional[YouTubeVideo]:
        async with self.session_factory() as session:
            video = await session.get(YouTubeVideo, video_id)
            if not video:
                return None
            video.is_visible = visible
            await session.commit()
            return video

    async def delete_by_id(self, video_id: int) -> Optional[YouTubeVideo]:
        async with self.session_factory() as session:
            video = await session.get(YouTubeVideo, video_id)
            if not video:
                return None
            await session.delete(video)
            await session.commit()
            return video


def normalize_email(raw: str) -> str:
    email = (raw or "").strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValueError("Please provide a valid email address")
    return email


class SubscriberRepo:

    CREATED = "created"
    ALREADY_SUBSCRIBED = "already_subscribed"
    REACTIVATED = "reactivated"

    def __init__(self, session_factory=AsyncSessionLocal):
        self.session_factory = session_factory

    async def get_by_email(self, email: str) -> Optional[Subscriber]:
        async with self.session_factory() as session:
            stmt = select(Subscriber).where(Subscriber.email == normalize_email(email))
            return (await session.execute(stmt)).scalar_one_or_none()

    async def subscribe(self, raw_email: str) -> tuple[Subscriber, str]:
        email = normalize_email(raw_email)
        async with self.session_factory() as session:
            stmt = select(Subscriber).where(Subscriber.email == email)
            existing = (await session.execute(stmt)).scalar_one_or_none()

            if existing:
                if existing.is_active:
                    return existing, self.ALREADY_SUBSCRIBED
                existing.is_active = True
                existing.subscribed_at = utc_now()
                await session.commit()
                return existing, self.REACTIVATED

            subscriber = Subscriber(email=email)
            session.add(subscriber)
            try:
                await session.commit()
            except IntegrityError:
                # Lost a race against a concurrent subscribe for the same address
                await session.rollback()
                existing = (await session.execute(stmt)).scalar_one()
                return existing, self.ALREADY_SUBSCRIBED
            await session.refresh(subscriber)
            return subscriber, self.CREATED

    async def unsubscribe(self, raw_email: str) -> Optional[Subscriber]:
        email = normalize_email(raw_email)
        async with self.session_factory() as session:
            stmt = select(Subscriber).where(Subscriber.email == email)
            subscriber = (await session.execute(stmt)).scalar_one_or_none()
            if not subscriber:
                return None
            subscriber.is_active = False
            await session.commit()
            return subscriber

    async def get_targets(self, preference: str) -> list:
        if preference not in PREFERENCE_FLAGS:
            raise ValueError(f"Unknown preference flag: {preference}")
        flag = getattr(Subscriber, preference)
        async with self.session_factory() as session:
            stmt = (
                select(Subscriber)
                .where(Subscriber.is_active == True, flag == True)
                .order_by(Subscriber.id)
            )
            return list((await session.execute(stmt)).scalars().all())

    async def mark_notified(self, subscriber_ids: Iterable[int], when: Optional[datetime] = None) -> int:
        ids = list(subscriber_ids)
        if not ids:
            return 0
        when = when or datetime.now(timezone.utc)
        async with self.session_factory() as session:
            stmt = update(Subscriber).where(Subscriber.id.in_(ids)).values(last_notified=when)
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    async def list_all(self) -> list:
        async with self.session_factory() as session:
            stmt = select(Subscriber).order_by(Subscriber.subscribed_at.desc())
            return list((await session.execute(stmt)).scalars().all())

    async def get_stats(self) -> dict:
        async with self.session_factory() as session:
            total = (await session.execute(select(func.count(Subscriber.id)))).scalar() or 0
            active = (await session.execute(
                select(func.count(Subscriber.id)).where(Subscriber.is_active == True)
            )).scalar() or 0
            recent = (await session.execute(
                select(Subscriber)
                .where(Subscriber.is_active == True)
                .order_by(Subscriber.subscribed_at.desc())
                .limit(RECENT_SUBSCRIBERS_LIMIT)
            )).scalars().all()

            return {
                "total": total,
                "active": active,
                "inactive": total - active,
                "recent": list(recent),
            }

    async def delete_by_id(self, subscriber_id: int) -> Optional[Subscriber]:
        async with self.session_factory() as session:
            subscriber = await session.get(Subscriber, subscriber_id)
            if not subscriber:
                return None
            await session.delete(subscriber)
            await session.commit()
            return subscriber
