import math
from dataclasses import dataclass, field


@dataclass
class FeedPage:
    items: list = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 0
    total_count: int = 0
    has_more: bool = False

    def pagination(self) -> dict:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "totalVideos": self.total_count,
            "hasMore": self.has_more,
        }


class VideoFeed:
    """Read-only, reverse-chronological pages of videos."""

    def __init__(self, videos):
        self.videos = videos

    async def get_page(self, page: int = 1, page_size: int = 10, include_hidden: bool = False) -> FeedPage:
        if page < 1:
            raise ValueError("page must be >= 1")
        if page_size < 1:
            raise ValueError("page_size must be >= 1")

        if include_hidden:
            items, total = await self.videos.list_all(page, page_size)
        else:
            items, total = await self.videos.list_visible(page, page_size)

        return FeedPage(
            items=items,
            current_page=page,
            total_pages=math.ceil(total / page_size),
            total_count=total,
            has_more=(page - 1) * page_size + len(items) < total,
        )
