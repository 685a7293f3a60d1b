"""
永続キャッシュストア

外部ストアの cache テーブルに対する参照と upsert を提供
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.logging import get_logger
from src.models.cache import CacheEntry, as_utc, utcnow
from src.services.error_handler import DatabaseError

logger = get_logger(__name__)


@dataclass(frozen=True)
class CachedValue:
    """キャッシュの参照結果"""

    value: Any
    expires_at: datetime


def is_fresh(entry: CachedValue, now: datetime) -> bool:
    """キャッシュが有効かどうか（expires_at と同時刻は期限切れ）"""
    return as_utc(entry.expires_at) > as_utc(now)


class CacheStore:
    """キャッシュストア"""

    # キャッシュの有効期限（デフォルト: 1時間）
    DEFAULT_TTL_SECONDS = 3600

    def __init__(self, session: AsyncSession, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.session = session
        self.ttl = timedelta(seconds=ttl_seconds)

    async def lookup(self, key: str) -> CachedValue | None:
        """キーに一致するキャッシュを取得

        期限切れの判定は呼び出し側で行う。

        Args:
            key: キャッシュキー

        Returns:
            値と有効期限、存在しない場合はNone

        Raises:
            DatabaseError: ストアエラー
        """
        stmt = select(CacheEntry.value, CacheEntry.expires_at).where(CacheEntry.key == key)
        try:
            result = await self.session.execute(stmt)
            row = result.one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Cache lookup failed for key {key}: {str(e)}")
            raise DatabaseError("Cache lookup failed", original_error=e)

        if row is None:
            logger.debug(f"Cache row not found: {key}")
            return None

        return CachedValue(value=row.value, expires_at=as_utc(row.expires_at))

    async def upsert(self, key: str, value: Any, now: datetime | None = None) -> datetime:
        """キャッシュを書き込む（同一キーは上書き）

        Args:
            key: キャッシュキー
            value: JSON にシリアライズ可能な値
            now: 書き込み時刻（省略時は現在時刻）

        Returns:
            書き込んだ有効期限

        Raises:
            DatabaseError: ストアエラー
        """
        expires_at = as_utc(now or utcnow()) + self.ttl

        try:
            insert = pg_insert if self._dialect_name() == "postgresql" else sqlite_insert
            stmt = insert(CacheEntry).values(key=key, value=value, expires_at=expires_at)
            stmt = stmt.on_conflict_do_update(
                index_elements=[CacheEntry.key],
                set_={
                    "value": stmt.excluded["value"],
                    "expires_at": stmt.excluded["expires_at"],
                },
            )
            await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Cache upsert failed for key {key}: {str(e)}")
            raise DatabaseError("Cache update failed", original_error=e)

        logger.debug(f"Cached value for key {key} until {expires_at.isoformat()}")
        return expires_at

    def _dialect_name(self) -> str:
        return self.session.get_bind().dialect.name
