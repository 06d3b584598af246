import pytest

from pipeline.video_feed import VideoFeed

from conftest import make_candidate


@pytest.fixture
async def feed(video_repo):
    await video_repo.insert_many([make_candidate(f"v{i:02d}", hours=i) for i in range(25)])
    return VideoFeed(video_repo)


async def test_pagination_boundaries(feed):
    first = await feed.get_page(1, 10)
    second = await feed.get_page(2, 10)
    third = await feed.get_page(3, 10)

    assert (len(first.items), first.has_more) == (10, True)
    assert (len(second.items), second.has_more) == (10, True)
    assert (len(third.items), third.has_more) == (5, False)
    assert third.total_pages == 3
    assert third.total_count == 25
    assert first.items[0].youtube_id == "v24"
    assert third.items[-1].youtube_id == "v00"


async def test_page_past_the_end_is_empty(feed):
    page = await feed.get_page(9, 10)
    assert page.items == []
    assert page.has_more is False
    assert page.pagination() == {"currentPage": 9, "totalPages": 3, "totalVideos": 25, "hasMore": False}


async def test_hidden_videos_only_in_admin_view(feed, video_repo):
    newest = (await feed.get_page(1, 1)).items[0]
    await video_repo.set_visibility(newest.id, False)

    public = await feed.get_page(1, 10)
    admin = await feed.get_page(1, 10, include_hidden=True)

    assert public.total_count == 24
    assert admin.total_count == 25
    assert public.items[0].youtube_id == "v23"


@pytest.mark.parametrize("page,size", [(0, 10), (1, 0), (-1, -1)])
async def test_invalid_paging_is_rejected(feed, page, size):
    with pytest.raises(ValueError):
        await feed.get_page(page, size)
