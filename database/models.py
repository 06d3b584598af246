from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from database.db import Base


def utc_now():
    return datetime.now(timezone.utc)


class YouTubeVideo(Base):
    __tablename__ = "youtube_videos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    youtube_id = Column(String(64), unique=True, index=True, nullable=False)
    title = Column(String(300), nullable=False)
    description = Column(Text, default="")
    thumbnail_url = Column(String(500), nullable=False)

    # Feed sort key and ingestion watermark
    published_at = Column(DateTime(timezone=True), index=True, nullable=False)

    is_visible = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "youtube_id": self.youtube_id,
            "title": self.title,
            "description": self.description or "",
            "thumbnail_url": self.thumbnail_url,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "is_visible": self.is_visible,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Subscriber(Base):
    """
    Newsletter recipient. Unsubscribing only flips is_active so a later
    subscribe call reactivates the same row.
    """
    __tablename__ = "subscribers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    subscribed_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    last_notified = Column(DateTime(timezone=True), nullable=True)

    # Preferences
    youtube_updates = Column(Boolean, default=True, nullable=False)
    blog_updates = Column(Boolean, default=True, nullable=False)
    portfolio_updates = Column(Boolean, default=False, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "is_active": self.is_active,
            "subscribed_at": self.subscribed_at.isoformat() if self.subscribed_at else None,
            "last_notified": self.last_notified.isoformat() if self.last_notified else None,
            "preferences": {
                "youtube_updates": self.youtube_updates,
                "blog_updates": self.blog_updates,
                "portfolio_updates": self.portfolio_updates,
            },
        }
