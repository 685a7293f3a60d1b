"""Test configuration"""
import os

# src をインポートする前にテスト用の設定を反映する
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["OFFICIAL_UPDATES_URL"] = "https://relief.example.org/"

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.api.disasters import get_update_scraper
from src.database.connection import Base, get_session
from src.main import create_app

# Import all models to ensure they are registered
from src.models.cache import CacheEntry  # noqa: F401
from src.models.disaster import Disaster  # noqa: F401
from src.services.official_updates import OfficialUpdateScraper


class UpstreamStub:
    """公式情報の取得元スタブ"""

    def __init__(self, html: str = "", status_code: int = 200):
        self.html = html
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.html)

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
async def test_engine():
    """テスト用インメモリ SQLite エンジン"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine):
    """テスト用データベースセッション"""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session


@pytest.fixture
def app(test_engine):
    """テスト用エンジンを使う FastAPI アプリ"""
    app = create_app()
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return app


@pytest.fixture
def upstream(app):
    """公式情報の取得元を差し替える"""
    stub = UpstreamStub()

    async def override_get_update_scraper():
        scraper = OfficialUpdateScraper(transport=httpx.MockTransport(stub.handle))
        try:
            yield scraper
        finally:
            await scraper.close()

    app.dependency_overrides[get_update_scraper] = override_get_update_scraper
    return stub


@pytest.fixture
async def async_client(app):
    """ASGI アプリに直接接続する HTTP クライアント"""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
