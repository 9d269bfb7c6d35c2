from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, StaticPool
from app.config import settings
from app.utils.logger import logger


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine for a DATABASE_URL.

    sqlite gets a single shared connection when in-memory so every session
    sees the same tables; postgres goes through NullPool for pgbouncer.
    """
    if not database_url or not database_url.strip():
        raise ValueError("DATABASE_URL environment variable is not set or is empty")

    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool
        return create_async_engine(database_url, echo=echo, **kwargs)

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if not database_url.startswith("postgresql+asyncpg://"):
        raise ValueError(f"Invalid DATABASE_URL format. Got: {database_url[:50]}...")

    # asyncpg doesn't understand query parameters such as sslmode
    clean_url = database_url.split("?")[0]
    if clean_url != database_url:
        logger.warning("Removed query parameters from DATABASE_URL")

    return create_async_engine(
        clean_url,
        echo=echo,
        poolclass=NullPool,
        connect_args={
            "server_settings": {"application_name": "helpdesk_backend"},
            "command_timeout": 60,
            "statement_cache_size": 0,
        },
    )


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.APP_DEBUG)
logger.info(f"Using database: {engine.url.render_as_string(hide_password=True)}")

AsyncSessionLocal = build_sessionmaker(engine)

Base = declarative_base()


async def get_db() -> AsyncSession:
    """Yield a session; roll back if the request fails."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_tables(bind: AsyncEngine = engine) -> None:
    import app.models  # noqa: F401  registers every table on Base.metadata

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")
