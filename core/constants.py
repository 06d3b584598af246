# YouTube Data API v3
YOUTUBE_API_URL = "https://www.googleapis.com/youtube/v3"
YOUTUBE_MAX_PAGE_SIZE = 50  # hard cap of the search endpoint
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

# Thumbnail sizes, best fit for the email card first
THUMBNAIL_SIZES = ["medium", "high", "default"]

# Subscriber preference flags (column names on Subscriber)
PREF_YOUTUBE = "youtube_updates"
PREF_BLOG = "blog_updates"
PREF_PORTFOLIO = "portfolio_updates"
PREFERENCE_FLAGS = (PREF_YOUTUBE, PREF_BLOG, PREF_PORTFOLIO)

EMAIL_PATTERN = r"^\S+@\S+\.\S+$"

# Public feed paging
DEFAULT_PAGE_SIZE = 10
MAX_FEED_PAGE_SIZE = 50
RECENT_SUBSCRIBERS_LIMIT = 10
