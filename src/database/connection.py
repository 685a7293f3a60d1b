"""
データベース接続モジュール

SQLAlchemy async engine を提供します。
"""

from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from src.config.logging import get_logger
from src.config.settings import get_settings

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy ベースクラス"""

    pass


# グローバル変数
_engine = None
_async_session_maker = None


def _engine_options(database_url: str) -> dict:
    """URL に応じたエンジンオプションを返す"""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}

    database = url.database or ""
    if database in ("", ":memory:"):
        # インメモリ DB は全セッションで同じ接続を共有する
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}

    Path(database).parent.mkdir(parents=True, exist_ok=True)
    return {}


def get_engine():
    """データベースエンジンを取得"""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            echo=False,
            future=True,
            **_engine_options(settings.database_url),
        )
        safe_url = make_url(settings.database_url).render_as_string()
        logger.info(f"Database engine created: {safe_url}")
        if settings.supabase_url:
            logger.info(f"Supabase project: {settings.supabase_url}")

    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """セッションメーカーを取得"""
    global _async_session_maker
    if _async_session_maker is None:
        engine = get_engine()
        _async_session_maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Session maker created")

    return _async_session_maker


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """データベースセッションを取得（依存性注入用）

    Yields:
        AsyncSession: データベースセッション
    """
    session_maker = get_session_maker()
    async with session_maker() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Session error: {e}")
            raise
        finally:
            await session.close()


async def init_db():
    """データベースを初期化（存在しないテーブルのみ作成）"""
    engine = get_engine()
    async with engine.begin() as conn:
        # すべてのモデルをインポート
        from src.models import cache, disaster  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized")


async def close_db():
    """データベース接続を閉じる"""
    global _engine, _async_session_maker
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database connection closed")
        _engine = None
        _async_session_maker = None
