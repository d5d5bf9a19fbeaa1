"""YAML設定ファイルの読み込みと環境変数展開"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from chatroom.config.models import (
    Config,
    DatabaseConfig,
    LoggingConfig,
    MessagesConfig,
    ReaperConfig,
    ServerConfig,
)


class ConfigError(Exception):
    """設定関連の基底例外"""


class ConfigValidationError(ConfigError):
    """設定値のバリデーションエラー"""


class EnvironmentVariableError(ConfigError):
    """環境変数が見つからないエラー"""


# 環境変数パターン: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str) -> str:
    """文字列中の ${VAR_NAME} を環境変数の値に置換する

    Args:
        value: 置換対象の文字列

    Returns:
        環境変数が展開された文字列

    Raises:
        EnvironmentVariableError: 環境変数が未設定
    """
    if not value:
        return value

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise EnvironmentVariableError(
                f"Environment variable '{var_name}' is not set"
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, value)


def _expand_recursive(data: Any) -> Any:
    """データ構造を再帰的に走査し、文字列中の環境変数を展開する"""
    if isinstance(data, dict):
        return {key: _expand_recursive(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _validate_required_field(data: dict[str, Any], field: str, parent: str = "") -> Any:
    """必須フィールドの存在を検証する

    Args:
        data: 検証対象のdict
        field: フィールド名
        parent: 親フィールド名（エラーメッセージ用）

    Returns:
        フィールドの値

    Raises:
        ConfigValidationError: フィールドが存在しない
    """
    if field not in data or data[field] is None:
        full_path = f"{parent}.{field}" if parent else field
        raise ConfigValidationError(f"Required field '{full_path}' is missing")
    return data[field]


def _positive_number(
    data: dict[str, Any], field: str, parent: str, default: float
) -> float:
    """正の数値フィールドを取得する

    環境変数展開後の文字列（"1.5" など）も受け付ける。

    Raises:
        ConfigValidationError: 数値でない、または 0 以下
    """
    raw = data.get(field, default)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ConfigValidationError(
            f"'{parent}.{field}' must be a number, got {raw!r}"
        ) from None
    if value <= 0:
        raise ConfigValidationError(f"'{parent}.{field}' must be greater than 0")
    return value


def _positive_int(data: dict[str, Any], field: str, parent: str, default: int) -> int:
    """正の整数フィールドを取得する

    Raises:
        ConfigValidationError: 整数でない、または 0 以下
    """
    value = _positive_number(data, field, parent, default)
    if not value.is_integer():
        raise ConfigValidationError(f"'{parent}.{field}' must be an integer")
    return int(value)


def load_config(path: str | Path) -> Config:
    """設定ファイルを読み込む

    Args:
        path: config.yaml のパス

    Returns:
        Config オブジェクト

    Raises:
        FileNotFoundError: ファイルが存在しない
        ConfigValidationError: 必須項目が欠落、または値が不正
        EnvironmentVariableError: 環境変数が未設定
        yaml.YAMLError: YAML構文エラー
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f) or {}

    # 環境変数を展開
    data = _expand_recursive(raw_data)

    # DatabaseConfig (必須)
    database_data = _validate_required_field(data, "database")
    database = DatabaseConfig(
        path=_validate_required_field(database_data, "path", "database"),
    )

    # ServerConfig
    server_data = data.get("server") or {}
    server = ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=_positive_int(server_data, "port", "server", 5000),
    )

    # ReaperConfig
    reaper_data = data.get("reaper") or {}
    reaper = ReaperConfig(
        tick_interval_seconds=_positive_number(
            reaper_data, "tick_interval_seconds", "reaper", 1.5
        ),
        stale_after_seconds=_positive_number(
            reaper_data, "stale_after_seconds", "reaper", 10.0
        ),
    )

    # MessagesConfig
    messages_data = data.get("messages") or {}
    messages = MessagesConfig(
        default_limit=_positive_int(messages_data, "default_limit", "messages", 100),
    )

    # LoggingConfig (optional)
    logging_config: LoggingConfig | None = None
    logging_data = data.get("logging")
    if logging_data:
        logging_config = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            format=logging_data.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            loggers=logging_data.get("loggers"),
        )

    return Config(
        database=database,
        server=server,
        reaper=reaper,
        messages=messages,
        logging=logging_config,
    )
