from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from libs.common.config import get_settings

settings = get_settings()


def _engine_options() -> dict:
    options = {"echo": settings.DB_ECHO, "future": True}
    # SQLite (tests, local demos) runs on a single-connection pool
    if not settings.is_sqlite:
        options.update(
            pool_pre_ping=True,  # Test connections before using
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    return options


# Create async engine
engine = create_async_engine(settings.DATABASE_URL, **_engine_options())

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)
