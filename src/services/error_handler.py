"""
エラーハンドリングユーティリティ

一貫したエラーレスポンスを提供します。
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from src.config.logging import get_logger

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    """エラーコード"""

    # 一般エラー
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # データベース関連
    DATABASE_ERROR = "DATABASE_ERROR"

    # スクレイピング関連
    SCRAPE_ERROR = "SCRAPE_ERROR"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"


class ErrorResponse(BaseModel):
    """エラーレスポンス"""

    code: ErrorCode
    message: str
    details: Optional[dict[str, Any]] = None


class ApplicationError(Exception):
    """アプリケーション基底例外"""

    # レスポンスの HTTP ステータス
    status_code: int = 400

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.original_error = original_error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """ErrorResponse に変換"""
        return ErrorResponse(code=self.code, message=self.message, details=self.details)


class RequestValidationFailed(ApplicationError):
    """入力バリデーションエラー"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None, **kwargs):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR, message=message, details=details, **kwargs
        )


class DatabaseError(ApplicationError):
    """データベースエラー"""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None, **kwargs):
        original_error = kwargs.get("original_error")
        if original_error is not None:
            # ストアのエラー内容はそのままクライアントに返す
            details = {**(details or {}), "original_error": str(original_error)}
        super().__init__(code=ErrorCode.DATABASE_ERROR, message=message, details=details, **kwargs)


class ScrapeError(ApplicationError):
    """スクレイピングエラー"""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None, **kwargs):
        code = kwargs.pop("code", ErrorCode.SCRAPE_ERROR)
        super().__init__(code=code, message=message, details=details, **kwargs)


class ScrapeTimeoutError(ScrapeError):
    """スクレイピングのタイムアウト"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None, **kwargs):
        super().__init__(message, details=details, code=ErrorCode.UPSTREAM_TIMEOUT, **kwargs)


def handle_error(error: Exception, context: Optional[dict[str, Any]] = None) -> ErrorResponse:
    """エラーをハンドリングして ErrorResponse を返す

    Args:
        error: 例外
        context: コンテキスト情報

    Returns:
        ErrorResponse
    """
    context = context or {}

    if isinstance(error, ApplicationError):
        logger.error(
            f"Application error: {error.code} - {error.message}",
            extra={"error_details": error.details, **context},
        )
        return error.to_response()

    # 予期しないエラー
    logger.exception("Unexpected error", extra=context)
    return ErrorResponse(
        code=ErrorCode.INTERNAL_ERROR,
        message="予期しないエラーが発生しました",
        details={"original_error": str(error)},
    )
