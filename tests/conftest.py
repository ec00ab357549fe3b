import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.models import Base
from app.db import crud


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def people(db):
    """An admin, two technicians and a client."""
    return {
        "admin": await crud.create_profile(db, "admin@test.com", "admin", "Admin"),
        "tech": await crud.create_profile(db, "tech@test.com", "technician", "Laura"),
        "tech2": await crud.create_profile(db, "tech2@test.com", "technician", "Pablo"),
        "client": await crud.create_profile(db, "client@test.com", "client", "Metalurgia Norte"),
    }
