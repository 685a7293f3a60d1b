"""
キャッシュ関連モデル

CacheEntry
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.database.connection import Base


def utcnow() -> datetime:
    """現在時刻（UTC, aware）"""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """UTC の aware datetime に揃える

    SQLite はタイムゾーンを保持しないため、naive な値は UTC とみなす。
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CacheEntry(Base):
    """リクエスト URL をキーにしたキャッシュ

    expires_at より前の時刻でのみ有効。キーごとに 1 行で、upsert で置き換える。
    """

    __tablename__ = "cache"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<CacheEntry(key={self.key}, expires_at={self.expires_at})>"
