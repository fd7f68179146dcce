"""YAML Configuration Loader for Roster.

Loads and caches configuration from YAML files with fallback to defaults.
Provides type-safe access to configuration values.
"""

from pathlib import Path
from typing import Any, Dict, List
from dataclasses import dataclass, field
from functools import lru_cache
import yaml

from .logging_config import get_logger

logger = get_logger("config")

# Get config directory
CONFIG_DIR = Path(__file__).parent


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""

    pass


def _load_yaml_file(filename: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of YAML file in config directory

    Returns:
        Parsed YAML content as dictionary

    Raises:
        ConfigurationError: If file cannot be loaded
    """
    filepath = CONFIG_DIR / filename
    if not filepath.exists():
        raise ConfigurationError(f"Configuration file not found: {filepath}")

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing {filename}: {e}")
    except IOError as e:
        raise ConfigurationError(f"Error reading {filename}: {e}")


@lru_cache(maxsize=1)
def load_filter_fields() -> Dict[str, Any]:
    """Load filter_fields.yaml configuration."""
    try:
        return _load_yaml_file("filter_fields.yaml")
    except ConfigurationError as e:
        logger.warning(f"Using fallback filter fields: {e}")
        return {
            "group_labels": {"identification": "Identification"},
            "fields": {
                "identification": {
                    "id": {"type": "text", "label": "Employee ID"},
                    "surname": {"type": "text", "label": "Surname"},
                },
            },
        }


@lru_cache(maxsize=1)
def load_table_columns() -> Dict[str, Any]:
    """Load table_columns.yaml configuration."""
    try:
        return _load_yaml_file("table_columns.yaml")
    except ConfigurationError as e:
        logger.warning(f"Using fallback table columns: {e}")
        return {
            "pagination": {"default_page_size": 10, "page_size_options": [5, 10, 25, 50, 100]},
            "max_visible_columns": 100,
            "core_columns": ["id", "surname", "first_name"],
            "columns": [
                {"key": "id", "label": "Employee ID", "group": "identification"},
                {"key": "surname", "label": "Surname", "group": "identification"},
                {"key": "first_name", "label": "First Name", "group": "identification"},
            ],
        }


def clear_config_cache() -> None:
    """Clear all cached configuration data."""
    load_filter_fields.cache_clear()
    load_table_columns.cache_clear()


@dataclass
class TableConfig:
    """Table pagination and column configuration accessor."""

    _data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self._data = load_table_columns()

    @property
    def default_page_size(self) -> int:
        """Get default rows per page."""
        return self._data.get("pagination", {}).get("default_page_size", 10)

    @property
    def page_size_options(self) -> List[int]:
        """Get the allowed rows-per-page choices."""
        return self._data.get("pagination", {}).get("page_size_options", [5, 10, 25, 50, 100])

    @property
    def max_visible_columns(self) -> int:
        return self._data.get("max_visible_columns", 100)

    @property
    def core_columns(self) -> List[str]:
        """Get the columns shown by default."""
        return list(self._data.get("core_columns", []))

    @property
    def columns(self) -> List[Dict[str, Any]]:
        return list(self._data.get("columns", []))

    @property
    def group_labels(self) -> Dict[str, str]:
        return dict(self._data.get("group_labels", {}))


def get_table_config() -> TableConfig:
    """Get table configuration accessor."""
    return TableConfig()
