"""
災害関連モデル

Disaster
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from src.database.connection import Base
from src.models.cache import utcnow

# Postgres では text[]、それ以外では JSON 配列として保存
TagsType = JSON().with_variant(ARRAY(Text), "postgresql")


class Disaster(Base):
    """災害レポート"""

    __tablename__ = "disasters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    location_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(TagsType, nullable=False, default=list)
    owner_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # 変更履歴 [{action, user_id, timestamp}, ...]
    audit_trail: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Disaster(id={self.id}, title={self.title})>"
