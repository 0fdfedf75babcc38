"""Configuration package for CodeTrain."""

from codetrain.config.app_config import (
    AppConfig,
    ConfigError,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "clear_config_cache",
    "load_app_config",
]
