import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

# ==============================
# YOUTUBE SOURCE
# ==============================
YOUTUBE_API_KEY = os.getenv("YOUTUBE_API_KEY", "")
YOUTUBE_CHANNEL_ID = os.getenv("YOUTUBE_CHANNEL_ID", "")
YOUTUBE_MAX_RESULTS = int(os.getenv("YOUTUBE_MAX_RESULTS", "50"))

# ==============================
# CLOUD DATABASE CONFIGURATION
# ==============================
_RAW_DB_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///local_backup.db")


def normalize_database_url(raw_url: str) -> str:
    """Force the async driver for every supported backend."""
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if raw_url.startswith("sqlite:///"):
        return raw_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return raw_url


DATABASE_URL = normalize_database_url(_RAW_DB_URL)

# ==============================
# EMAIL TRANSPORT (SMTP)
# ==============================
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_SECURE = os.getenv("SMTP_SECURE", "false").lower() == "true"
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
SMTP_FROM_NAME = os.getenv("SMTP_FROM_NAME", "Lifestyle")

# ==============================
# SITE & ADMIN
# ==============================
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")
ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN", "")
PORT = int(os.getenv("PORT", "5000"))

# ==============================
# PIPELINE SETTINGS
# ==============================
SYNC_CRON_MINUTE = int(os.getenv("SYNC_CRON_MINUTE", "0"))  # hourly, on the hour
SYNC_TIMEOUT = float(os.getenv("SYNC_TIMEOUT", "600"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ==============================
# PERFORMANCE & LIMITS
# ==============================
REQUEST_TIMEOUT = 30.0
SMTP_TIMEOUT = 20.0
DB_POOL_SIZE = 5      # Safe limit for Railway Starter Plan
DB_MAX_OVERFLOW = 10  # Burst buffer


@dataclass(frozen=True)
class YouTubeConfig:
    api_key: str
    channel_id: str
    max_results: int = 50
    timeout: float = REQUEST_TIMEOUT


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    use_ssl: bool
    username: str
    password: str
    from_name: str = "Lifestyle"
    timeout: float = SMTP_TIMEOUT


@dataclass(frozen=True)
class SyncConfig:
    cron_minute: int = 0
    timeout_seconds: float = 600.0


def load_youtube_config() -> YouTubeConfig:
    return YouTubeConfig(
        api_key=YOUTUBE_API_KEY,
        channel_id=YOUTUBE_CHANNEL_ID,
        max_results=YOUTUBE_MAX_RESULTS,
    )


def load_smtp_config() -> SmtpConfig:
    return SmtpConfig(
        host=SMTP_HOST,
        port=SMTP_PORT,
        use_ssl=SMTP_SECURE,
        username=SMTP_USER,
        password=SMTP_PASS,
        from_name=SMTP_FROM_NAME,
    )


def load_sync_config() -> SyncConfig:
    return SyncConfig(cron_minute=SYNC_CRON_MINUTE, timeout_seconds=SYNC_TIMEOUT)
