"""
リアルタイム配信

WebSocket で接続中のクライアントにイベントを配信
"""

from typing import Any

from fastapi import WebSocket

from src.config.logging import get_logger

logger = get_logger(__name__)

DISASTER_UPDATED = "disaster_updated"


class ConnectionManager:
    """WebSocket 接続マネージャー"""

    def __init__(self):
        self.active: list[WebSocket] = []

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self.active.append(ws)
        logger.debug(f"{len(self.active)} active connections")

    def disconnect(self, ws: WebSocket) -> None:
        if ws in self.active:
            self.active.remove(ws)
        logger.debug(f"{len(self.active)} active connections")

    async def broadcast(self, event: str, data: Any) -> int:
        """全クライアントにイベントを送信

        Args:
            event: イベント名
            data: JSON にシリアライズ可能なペイロード

        Returns:
            送信できたクライアント数
        """
        payload = {"event": event, "data": data}
        dead: list[WebSocket] = []
        sent = 0
        for ws in list(self.active):
            try:
                await ws.send_json(payload)
                sent += 1
            except Exception as e:
                logger.warning(f"Dropping client after send failure: {str(e)}")
                dead.append(ws)

        for ws in dead:
            self.disconnect(ws)

        logger.debug(f"Broadcast {event} to {sent} clients")
        return sent


# アプリ全体で共有するマネージャー
manager = ConnectionManager()


def get_connection_manager() -> ConnectionManager:
    """接続マネージャーを取得（依存性注入用）"""
    return manager
