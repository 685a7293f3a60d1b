"""
設定管理モジュール

環境変数を読み込み、アプリケーション全体で使用する設定を提供します。
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """アプリケーション設定"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database Configuration
    # 認証情報（service role）は URL に含め、ソースには書かない
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/database.db", description="データベース URL"
    )

    # Supabase Configuration（ログ出力用の参考情報）
    supabase_url: str = Field(default="", description="Supabase プロジェクト URL")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="待ち受けホスト")
    port: int = Field(default=5000, description="待ち受けポート（環境変数 PORT）")

    # Official Updates Scraper Configuration
    official_updates_url: str = Field(
        default="https://www.redcross.org/", description="公式情報の取得元 URL"
    )
    official_updates_selector: str = Field(
        default=".disaster-info", description="公式情報を抽出する CSS セレクタ"
    )
    scrape_timeout: float = Field(default=10.0, description="スクレイピングのタイムアウト（秒）")
    cache_ttl_seconds: int = Field(default=3600, description="キャッシュの有効期限（秒）")

    # Resource Search Configuration
    resource_search_radius_km: float = Field(default=10, description="周辺リソース検索半径（km）")

    # Application Configuration
    log_level: str = Field(default="INFO", description="ログレベル")
    environment: str = Field(default="development", description="実行環境")


@lru_cache()
def get_settings() -> Settings:
    """設定インスタンスを取得（シングルトン）"""
    return Settings()
