"""Configuration module for Roster."""

from .settings import config, APIConfig, PreferencesConfig, SyncConfig, AppConfig, Config
from .logging_config import setup_logging, get_logger
from .config_loader import (
    ConfigurationError,
    TableConfig,
    get_table_config,
    load_filter_fields,
    load_table_columns,
    clear_config_cache,
)

__all__ = [
    "config",
    "APIConfig",
    "PreferencesConfig",
    "SyncConfig",
    "AppConfig",
    "Config",
    "setup_logging",
    "get_logger",
    "ConfigurationError",
    "TableConfig",
    "get_table_config",
    "load_filter_fields",
    "load_table_columns",
    "clear_config_cache",
]
