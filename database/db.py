import logging
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine
from sqlalchemy.orm import sessionmaker, declarative_base
from core.config import DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW

logger = logging.getLogger("DATABASE")

Base = declarative_base()


def build_engine(url: str = DATABASE_URL) -> AsyncEngine:
    # SQLite (local / tests) keeps the dialect default pool
    if url.startswith("sqlite"):
        return create_async_engine(url, future=True, echo=False)
    return create_async_engine(
        url,
        pool_size=DB_POOL_SIZE,
        max_overflow=DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        future=True,
        echo=False,
    )


def build_session_factory(bind: AsyncEngine):
    return sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# Async Engine with health checks
engine = build_engine()

# Mandatory Async Session Factory
AsyncSessionLocal = build_session_factory(engine)


async def init_db(bind: AsyncEngine = None):
    import database.models  # noqa: F401  (registers tables on Base)

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("DATABASE TABLES READY")


async def dispose_engine():
    await engine.dispose()


logger.info(f"DATABASE ENGINE READY (ASYNC MODE: {DATABASE_URL.split('+')[0]})")
