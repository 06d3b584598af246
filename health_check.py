import asyncio
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from core.config import load_youtube_config, load_smtp_config
from database.db import engine


async def verify_system(bind=engine) -> bool:
    print("\n🔍 === SITE BACKEND HEALTH CHECK ===\n")
    healthy = True

    # 1. Test Database
    try:
        async with bind.connect() as conn:
            await conn.execute(text("SELECT 1"))
        print("✅ DATABASE: Connection Successful")
    except (SQLAlchemyError, OSError) as e:
        print(f"❌ DATABASE: Connection Failed | {e}")
        healthy = False

    # 2. YouTube source credentials
    yt = load_youtube_config()
    if yt.api_key and yt.channel_id:
        print(f"✅ YOUTUBE: Channel {yt.channel_id} configured")
    else:
        print("❌ YOUTUBE: YOUTUBE_API_KEY / YOUTUBE_CHANNEL_ID missing, sync disabled")
        healthy = False

    # 3. Mail transport credentials
    smtp = load_smtp_config()
    if smtp.username and smtp.password:
        print(f"✅ SMTP: {smtp.username} via {smtp.host}:{smtp.port}")
    else:
        print("⚠️ SMTP: SMTP_USER / SMTP_PASS missing, subscribers will not be emailed")

    print("\n🚀 === CHECK COMPLETE ===\n")
    return healthy


if __name__ == "__main__":
    asyncio.run(verify_system())
