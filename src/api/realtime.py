"""
リアルタイム配信 WebSocket エンドポイント
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from src.config.logging import get_logger_with_context
from src.services.broadcaster import manager

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws")
async def realtime(ws: WebSocket):
    """WebSocket 接続

    接続後、サーバーから {"event": "disaster_updated", "data": [...]} を送信する。
    クライアントが "ping" を送ると {"event": "pong"} を返す。
    """
    client_id = f"{ws.client.host}:{ws.client.port}" if ws.client else "unknown"
    logger = get_logger_with_context(__name__, client_id=client_id)

    await manager.connect(ws)
    logger.info("Client connected")
    try:
        while True:
            message = await ws.receive_text()
            if message == "ping":
                await ws.send_json({"event": "pong"})
    except WebSocketDisconnect:
        logger.info("Client disconnected")
    finally:
        # 切断以外の例外でも配信先から外す
        manager.disconnect(ws)
