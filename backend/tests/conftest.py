import os
import tempfile

# Settings are read at import time, so the environment has to be ready first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("MEDIA_STORAGE_BACKEND", "local")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="catalog-uploads-"))

from typing import Dict, Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from catalog_api.core.security import Role, create_access_token
from catalog_api.db.base import Base
from catalog_api.dependencies import get_db, get_media_storage
from catalog_api.main import app
from catalog_api.services.user_service import user_service
import catalog_api.models  # noqa: F401


class InMemoryMediaStorage:
    """Blob store double. ``fail_after`` makes every save past that count fail."""

    def __init__(self, fail_after: Optional[int] = None):
        self.objects: Dict[str, bytes] = {}
        self.fail_after = fail_after

    async def save(self, key: str, content: bytes, content_type: str) -> str:
        if self.fail_after is not None and len(self.objects) >= self.fail_after:
            raise RuntimeError("storage unavailable")
        self.objects[key] = content
        return f"https://cdn.example.com/{key}"

    async def delete(self, key: str) -> bool:
        return self.objects.pop(key, None) is not None


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage_factory():
    return InMemoryMediaStorage


@pytest.fixture
def media_storage():
    return InMemoryMediaStorage()


@pytest_asyncio.fixture
async def client(session_factory, media_storage):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_media_storage] = lambda: media_storage
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _headers_for(session_factory, email: str, role: Role) -> Dict[str, str]:
    async with session_factory() as session:
        user = await user_service.register_user(session, email, "secret-password", role=role)
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest_asyncio.fixture
async def admin_headers(session_factory):
    return await _headers_for(session_factory, "admin@example.com", Role.admin)


@pytest_asyncio.fixture
async def user_headers(session_factory):
    return await _headers_for(session_factory, "shopper@example.com", Role.user)
