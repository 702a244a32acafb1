"""
Async engine and session factory for the orders store.

`DATABASE__URL` may name a plain dialect (`postgresql://`, `sqlite://`); it is
switched to the async driver installed with the project.
"""
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from core.config import settings
from infrastructure.models import Base


ASYNC_DRIVERS = {
    "postgresql": "postgresql+asyncpg",
    "postgres": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def async_database_url(raw: str) -> str:
    url = make_url(raw)
    if "+" in url.drivername:
        return raw
    try:
        driver = ASYNC_DRIVERS[url.drivername]
    except KeyError:
        raise ValueError(f"Driver de banco não suportado: {url.drivername}. Use postgresql ou sqlite.") from None
    return url.set(drivername=driver).render_as_string(hide_password=False)


engine = create_async_engine(async_database_url(settings.database.url), echo=settings.DEBUG)

# 会话在提交后仍可读取已加载的属性
AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False)


async def create_tables() -> None:
    """Create `orders` and `order_items` when missing (DEBUG startup only)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
