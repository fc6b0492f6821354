"""
Configuration Loader - Loads and validates application settings

Usage:
    from config.loader import get_config

    config = get_config()
    print(config.max_attempts)
    print(config.data_dir)

Settings come from config/settings.yaml. String values may reference
environment variables as ${VAR_NAME} or ${VAR_NAME:-default}.
"""

import yaml
import json
import os
import re
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from jsonschema import validate, ValidationError

logger = logging.getLogger(__name__)

_TRUTHY = {'1', 'true', 'yes', 'on'}


class AppConfig:
    """Load and validate application configuration from YAML"""

    def __init__(self, base_path: Optional[str] = None, settings_file: str = "settings.yaml"):
        """
        Initialize application configuration

        Args:
            base_path: Base directory path (defaults to project root)
            settings_file: Settings file name inside the config directory
        """
        if base_path is None:
            # Default to project root
            base_path = Path(__file__).parent.parent

        self.base_path = Path(base_path)
        self.config_path = self.base_path / "config" / settings_file
        self.schema_path = self.base_path / "config" / "schema.json"

        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        self.config = self._load_config()
        self._validate_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load YAML configuration file"""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        # Substitute environment variables
        config = self._substitute_env_vars(config)

        return config

    def _substitute_env_vars(self, obj: Any) -> Any:
        """
        Recursively substitute environment variables in config

        Supports: ${VAR_NAME} or ${VAR_NAME:-default_value}
        """
        if isinstance(obj, dict):
            return {k: self._substitute_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._substitute_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            # Match ${VAR} or ${VAR:-default}
            pattern = r'\$\{([A-Z_]+)(?::-([^}]*))?\}'

            def replacer(match):
                var_name = match.group(1)
                default = match.group(2)
                return os.getenv(var_name, default or '')

            return re.sub(pattern, replacer, obj)
        else:
            return obj

    def _validate_config(self):
        """Validate configuration against JSON schema"""
        if not self.schema_path.exists():
            logger.warning(f"Schema file not found: {self.schema_path}, skipping validation")
            return

        with open(self.schema_path, 'r') as f:
            schema = json.load(f)

        try:
            validate(instance=self.config, schema=schema)
        except ValidationError as e:
            raise ValueError(f"Configuration validation failed: {e.message}")

    def _section(self, name: str) -> Dict[str, Any]:
        return self.config.get(name) or {}

    # ==================== App Properties ====================

    @property
    def app_name(self) -> str:
        """Display name of the application"""
        return self._section('app').get('name', 'StreakGuard')

    @property
    def service_name(self) -> str:
        """Service name stamped on every log entry"""
        return self._section('app').get('service_name', 'streakguard')

    # ==================== Logging Properties ====================

    @property
    def log_level(self) -> str:
        """Root log level"""
        return str(self._section('logging').get('level') or 'INFO').upper()

    @property
    def json_logs(self) -> bool:
        """Emit JSON log lines instead of plain text"""
        value = self._section('logging').get('json', True)
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUTHY

    # ==================== Security Properties ====================

    @property
    def max_attempts(self) -> int:
        """Failed attempts allowed before an account is locked"""
        return int(self._section('security').get('max_attempts', 5))

    @property
    def lockout_seconds(self) -> int:
        """Length of the lockout window in seconds"""
        return int(self._section('security').get('lockout_seconds', 30))

    # ==================== Storage Properties ====================

    @property
    def storage_backend(self) -> str:
        """Either 'file' (persistent JSON files) or 'memory'"""
        return str(self._section('storage').get('backend') or 'file').lower()

    @property
    def data_dir(self) -> Path:
        """Directory holding the store files"""
        data_dir = Path(self._section('storage').get('data_dir') or 'data')
        if not data_dir.is_absolute():
            data_dir = self.base_path / data_dir
        return data_dir

    @property
    def secret_store_path(self) -> Path:
        return self.data_dir / self._section('storage').get('secret_file', 'secure_store.json')

    @property
    def general_store_path(self) -> Path:
        return self.data_dir / self._section('storage').get('general_file', 'app_store.json')

    # ==================== Engagement Properties ====================

    @property
    def notification_limit(self) -> int:
        """Maximum number of engagement notifications kept"""
        return int(self._section('notifications').get('max_items', 10))

    def __repr__(self):
        return f"AppConfig(path='{self.config_path}', backend='{self.storage_backend}')"


# ==================== Helper Functions ====================

_config_cache: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get or create application configuration (cached)

    Returns:
        AppConfig instance
    """
    global _config_cache
    if _config_cache is None:
        _config_cache = AppConfig()
    return _config_cache


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it"""
    global _config_cache
    _config_cache = None
