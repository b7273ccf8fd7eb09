"""
Unified Configuration Manager for BizSheets

Loads configuration from the root config.json and provides easy access to
per-entity range settings. Secrets come from environment variables.
"""
import json
import os
from pathlib import Path
from typing import Dict, List, Optional, Any
import logging

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Default configuration file location
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.json"


class RangeConfig:
    """Where one record type lives in the spreadsheet."""

    def __init__(self, range_data: Dict[str, Any]):
        self.id = range_data.get("id")
        self.range = range_data.get("range")
        self.sheet = range_data.get("sheet")
        self.id_field = range_data.get("id_field")
        self.id_prefix = range_data.get("id_prefix", "")
        self.id_digits = int(range_data.get("id_digits", 5))
        self.update_columns = range_data.get("update_columns") or ["A", "Z"]
        self.lookup_range = range_data.get("lookup_range")

    @property
    def start_column(self) -> str:
        return self.update_columns[0]

    @property
    def end_column(self) -> str:
        return self.update_columns[-1]


class ConfigManager:
    """Manages application configuration."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.config_data: Dict[str, Any] = {}
        self.ranges: Dict[str, RangeConfig] = {}
        self.global_settings: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self):
        """Load configuration from JSON file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r') as f:
                self.config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}")

        for range_data in self.config_data.get("ranges", []):
            range_config = RangeConfig(range_data)
            if not range_config.id or not range_config.range:
                logger.warning("Skipping range entry without id or range: %s", range_data)
                continue
            self.ranges[range_config.id] = range_config

        self.global_settings = self.config_data.get("global_settings", {})

        logger.info(f"Loaded configuration for {len(self.ranges)} ranges")

    def get_range(self, range_id: str) -> RangeConfig:
        """Get configuration for one record type."""
        range_config = self.ranges.get(range_id)
        if range_config is None:
            raise KeyError(f"Range configuration not found: {range_id}")
        return range_config

    def list_ranges(self) -> List[str]:
        """List all configured record types."""
        return list(self.ranges.keys())

    def get_global_setting(self, key: str, default: Any = None) -> Any:
        """Get a global setting value."""
        return self.global_settings.get(key, default)

    @property
    def id_scheme(self) -> str:
        """
        Id scheme for new records: "uuid" (prefix + 10 hex chars) or "legacy"
        (prefix + fixed digits). Sheets may mix both widths.
        """
        return self.global_settings.get("id_scheme", "uuid")

    @property
    def request_timeout(self) -> Optional[float]:
        return self.global_settings.get("request_timeout")

    @property
    def cache_sheet_ids(self) -> bool:
        return self.global_settings.get("cache_sheet_ids", True)

    def reload(self):
        """Reload configuration from file."""
        self.ranges.clear()
        self.global_settings.clear()
        self._load_config()


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_path: Optional[Path] = None) -> ConfigManager:
    """Get or create the global configuration manager."""
    global _config_manager
    if config_path is None and os.getenv("BIZSHEETS_CONFIG"):
        config_path = Path(os.getenv("BIZSHEETS_CONFIG"))
    if _config_manager is None or config_path is not None:
        _config_manager = ConfigManager(config_path)
    return _config_manager


# Environment variables configuration
class EnvConfig:
    """Manages environment variables."""

    @staticmethod
    def get_spreadsheet_id() -> str:
        """Get the backing spreadsheet ID."""
        spreadsheet_id = os.getenv("SPREADSHEET_ID")
        if not spreadsheet_id:
            raise ValueError("SPREADSHEET_ID must be set")
        return spreadsheet_id

    @staticmethod
    def get_access_token() -> Optional[str]:
        """Get a pre-issued bearer token, if one is configured."""
        return os.getenv("SHEETS_ACCESS_TOKEN")

    @staticmethod
    def has_service_account() -> bool:
        """Whether service account credentials are available."""
        return bool(
            os.getenv("SERVICE_ACCOUNT_CREDENTIALS")
            or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        )
