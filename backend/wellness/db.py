from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from wellness.config import DATABASE_URL

class Base(DeclarativeBase):
    pass

engine_kwargs = {"echo": False, "pool_pre_ping": True}
if DATABASE_URL.startswith("sqlite"):
    # no pooled sqlite connections shared between event loops
    engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(DATABASE_URL, **engine_kwargs)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

async def get_db():
    async with SessionLocal() as session:
        yield session

async def create_tables():
    # local runs only; deployed databases are managed by alembic
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
