"""設定管理モジュール"""

from chatroom.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
from chatroom.config.models import (
    Config,
    DatabaseConfig,
    LoggingConfig,
    MessagesConfig,
    ReaperConfig,
    ServerConfig,
)

__all__ = [
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "DatabaseConfig",
    "EnvironmentVariableError",
    "LoggingConfig",
    "MessagesConfig",
    "ReaperConfig",
    "ServerConfig",
    "expand_env_vars",
    "load_config",
]
