"""設定データクラス"""

from dataclasses import dataclass, field


@dataclass
class DatabaseConfig:
    """データベース設定"""

    path: str


@dataclass
class ServerConfig:
    """HTTP サーバー設定"""

    host: str = "0.0.0.0"
    port: int = 5000


@dataclass
class ReaperConfig:
    """非アクティブユーザー退室処理の設定

    Attributes:
        tick_interval_seconds: 退室チェックの実行間隔
        stale_after_seconds: 最終ハートビートからこの秒数を超えたユーザーを退室させる
    """

    tick_interval_seconds: float = 1.5
    stale_after_seconds: float = 10.0


@dataclass
class MessagesConfig:
    """メッセージ取得設定"""

    default_limit: int = 100  # limit 未指定時の取得件数


@dataclass
class LoggingConfig:
    """ログ設定"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None


@dataclass
class Config:
    """アプリケーション設定"""

    database: DatabaseConfig
    server: ServerConfig = field(default_factory=ServerConfig)
    reaper: ReaperConfig = field(default_factory=ReaperConfig)
    messages: MessagesConfig = field(default_factory=MessagesConfig)
    logging: LoggingConfig | None = None
