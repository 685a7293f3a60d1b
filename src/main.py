"""
メインアプリケーション

FastAPI アプリケーションのエントリーポイント
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.disasters import router as disasters_router
from src.api.geocode import router as geocode_router
from src.api.health import API_NAME, API_VERSION
from src.api.health import router as health_router
from src.api.realtime import router as realtime_router
from src.config.logging import get_logger, setup_logging
from src.config.settings import get_settings
from src.database.connection import close_db, init_db
from src.services.error_handler import ApplicationError, RequestValidationFailed, handle_error

# ログ設定
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """アプリケーションライフサイクル管理

    起動時と終了時の処理を定義
    """
    # 起動時
    logger.info("Application starting...")
    settings = get_settings()
    logger.info(f"Environment: {settings.environment}")

    # データベース初期化
    await init_db()
    logger.info("Database initialized")

    yield

    # 終了時
    logger.info("Application shutting down...")
    await close_db()
    logger.info("Application shutdown complete")


# FastAPI アプリケーション作成
def create_app() -> FastAPI:
    """FastAPI アプリケーションを作成

    Returns:
        FastAPI: アプリケーションインスタンス
    """
    app = FastAPI(
        title=API_NAME,
        description="災害情報の登録・共有 API",
        version=API_VERSION,
        lifespan=lifespan,
    )

    # CORS ミドルウェア設定
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # エラーハンドラー登録
    @app.exception_handler(ApplicationError)
    async def application_error_handler(request: Request, exc: ApplicationError):
        """ApplicationError ハンドラー"""
        context = {"path": request.url.path, "method": request.method}
        error_response = handle_error(exc, context)
        return JSONResponse(status_code=exc.status_code, content=error_response.model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """入力バリデーションエラーハンドラー"""
        error = RequestValidationFailed(
            "Invalid request", details={"errors": jsonable_errors(exc)}
        )
        logger.warning(
            f"Validation error: {request.method} {request.url.path}",
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(status_code=error.status_code, content=error.to_response().model_dump())

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """一般的な例外ハンドラー"""
        context = {"path": request.url.path, "method": request.method}
        error_response = handle_error(exc, context)
        return JSONResponse(status_code=500, content=error_response.model_dump())

    # ルーター登録
    app.include_router(health_router, tags=["health"])
    app.include_router(disasters_router)
    app.include_router(geocode_router)
    app.include_router(realtime_router)

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """バリデーションエラーを JSON 化可能な形に変換"""
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


# アプリケーションインスタンス
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
    )
