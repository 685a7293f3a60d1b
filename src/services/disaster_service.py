"""
災害レポートサービス

disasters テーブルへの登録と一覧取得を提供
"""

from typing import Any

from sqlalchemy import Text, select, type_coerce
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.logging import get_logger
from src.models.cache import as_utc, utcnow
from src.models.disaster import Disaster
from src.services.error_handler import DatabaseError

logger = get_logger(__name__)


class DisasterService:
    """災害レポートサービス"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_disaster(
        self,
        title: str | None,
        location_name: str | None,
        description: str | None,
        tags: list[str],
        owner_id: str | None,
    ) -> list[Disaster]:
        """災害レポートを登録

        Args:
            title: タイトル
            location_name: 地名
            description: 説明
            tags: タグ
            owner_id: 登録ユーザー ID

        Returns:
            登録した行のリスト

        Raises:
            DatabaseError: ストアエラー
        """
        disaster = Disaster(
            title=title,
            location_name=location_name,
            description=description,
            tags=list(tags),
            owner_id=owner_id,
            created_at=utcnow(),
            audit_trail=[
                {
                    "action": "create",
                    "user_id": owner_id,
                    "timestamp": utcnow().isoformat(),
                }
            ],
        )

        try:
            self.session.add(disaster)
            await self.session.commit()
            await self.session.refresh(disaster)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to create disaster: {str(e)}")
            raise DatabaseError("Failed to create disaster", original_error=e)

        logger.info(f"Disaster created: id={disaster.id}, owner={owner_id}")
        return [disaster]

    async def list_disasters(self, tag: str | None = None) -> list[Disaster]:
        """災害レポート一覧を取得

        Args:
            tag: 指定時はこのタグを含むレポートのみ

        Returns:
            災害レポートのリスト

        Raises:
            DatabaseError: ストアエラー
        """
        stmt = select(Disaster)
        in_database = tag is not None and self.session.get_bind().dialect.name == "postgresql"
        if in_database:
            stmt = stmt.where(type_coerce(Disaster.tags, ARRAY(Text)).contains([tag]))

        try:
            result = await self.session.execute(stmt)
            disasters = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to list disasters: {str(e)}")
            raise DatabaseError("Failed to list disasters", original_error=e)

        # 配列の包含検索がない DB ではここで絞り込む
        if tag is not None and not in_database:
            disasters = [d for d in disasters if tag in (d.tags or [])]

        logger.info(f"Listed {len(disasters)} disasters (tag={tag})")
        return disasters

    @staticmethod
    def to_dict(disaster: Disaster) -> dict[str, Any]:
        """JSON レスポンス用の辞書に変換"""
        return {
            "id": disaster.id,
            "title": disaster.title,
            "location_name": disaster.location_name,
            "description": disaster.description,
            "tags": list(disaster.tags or []),
            "owner_id": disaster.owner_id,
            "created_at": as_utc(disaster.created_at).isoformat() if disaster.created_at else None,
            "audit_trail": list(disaster.audit_trail or []),
        }
