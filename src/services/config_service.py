"""
Configuration Service Module

Manages smart queue configuration: recommendation sources, cache TTL,
per-step timeouts and the default smart queue settings.
"""

from typing import Any, Dict, Optional
from pathlib import Path
import os
import sys
import yaml
import threading
import logging

logger = logging.getLogger(__name__)


class ConfigService:
    """
    Configuration Service - Singleton Pattern

    Loads built-in defaults, then the repository template
    (config/default_config.yaml), then the user file, each deep-merged over
    the previous layer.

    Usage Example:
        config = ConfigService()

        ttl = config.get("recommendations.cache.ttl_hours", 24)

        config.set("providers.hexmusic.enabled", False)
        config.save()
    """

    _instance: Optional['ConfigService'] = None
    _lock = threading.Lock()

    def __new__(cls, config_path: str = None) -> 'ConfigService':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: str = None):
        if self._initialized:
            return

        self._default_config_path = "config/default_config.yaml"
        default_path = Path(self._default_config_path)
        provided_path = Path(config_path) if config_path else None

        # Passing the template path itself still means "default mode" so the
        # repository template is never overwritten by save().
        self._use_custom_path = provided_path is not None and provided_path != default_path

        if self._use_custom_path:
            self._user_config_path = provided_path
        else:
            self._user_config_path = self._get_user_config_path()

        self._config: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._initialized = True

        self._load()

    @staticmethod
    def _get_user_config_path() -> Path:
        """Get user configuration file path (platform-specific)"""
        if sys.platform == "win32":
            base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
        return base / "smart-queue" / "config.yaml"

    @property
    def user_config_path(self) -> Path:
        return self._user_config_path

    def _load(self) -> None:
        """Load and merge from default and user configuration"""
        config = self._get_default_config()

        if self._use_custom_path:
            # Custom path mode: the repository template is not merged
            self._merge_file(config, self._user_config_path, "custom")
        else:
            self._merge_file(config, Path(self._default_config_path), "default")
            self._merge_file(config, self._user_config_path, "user")

        with self._lock:
            self._config = config

    def _merge_file(self, config: Dict[str, Any], path: Path, label: str) -> None:
        if not path.exists():
            return
        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load %s configuration %s: %s", label, path, e)
            return
        if not isinstance(loaded, dict):
            logger.warning("Ignoring %s configuration %s: top level is not a mapping", label, path)
            return
        self._deep_merge(config, loaded)

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Deep merge dictionaries, override overwrites base"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            'app': {
                'name': 'Smart Queue',
                'version': '1.0.0',
            },
            'smart_queue': {
                'auto_queue_enabled': False,
                'auto_queue_threshold': 3,
                'auto_queue_count': 5,
                'similarity_preference': 'balanced',
                'smart_mix_enabled': True,
                'target_queue_length': 20,   # Length the auto-queue tries to refill towards
                'over_request_factor': 1.5,  # Headroom for tracks lost to dedup/exclusion
            },
            'recommendations': {
                'cache': {
                    'enabled': True,
                    'ttl_hours': 24,
                },
                'smart_mix': {
                    'per_seed_count': 20,
                    'max_seeds': 5,
                },
                'radio_max_page_size': 40,
                'timeouts': {
                    'primary_seconds': 10.0,
                    'secondary_seconds': 8.0,
                    'radio_seconds': 8.0,
                    'lookup_seconds': 5.0,   # Each catalog re-resolution call
                },
                'logging': {
                    'enabled': True,
                },
            },
            'providers': {
                'deezer': {
                    'base_url': 'https://api.deezer.com',
                    'timeout_seconds': 10.0,
                },
                'hexmusic': {
                    'enabled': True,
                    'base_url': 'https://api.starchildmusic.com',
                    'api_key_env': 'HEXMUSIC_API_KEY',
                    'api_key': '',
                    'timeout_seconds': 10.0,
                },
            },
            'queue': {
                'persist': True,
                'persist_max_items': 500,   # 0 = unlimited
            },
            'database': {
                'path': '',  # Empty = platform data directory
            },
            'user': {
                'id': 'default',
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Supports dot-separated nested keys, e.g., "recommendations.cache.ttl_hours".

        Args:
            key: Configuration key
            default: Default value

        Returns:
            Configuration value or the default value.
        """
        with self._lock:
            keys = key.split('.')
            value = self._config

            try:
                for k in keys:
                    value = value[k]
                return value
            except (KeyError, TypeError):
                return default

    def get_float(self, key: str, default: float) -> float:
        """Numeric lookup that falls back to default on malformed values"""
        value = self.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("Configuration %s is not a number: %r", key, value)
            return float(default)

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Configuration %s is not an integer: %r", key, value)
            return int(default)

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            key: Configuration key (dot-separated)
            value: Configuration value
        """
        with self._lock:
            keys = key.split('.')
            config = self._config

            for k in keys[:-1]:
                if not isinstance(config.get(k), dict):
                    config[k] = {}
                config = config[k]

            config[keys[-1]] = value

    def save(self) -> bool:
        """
        Save configuration to the user configuration file.

        Returns:
            bool: True if saving was successful.
        """
        try:
            self._user_config_path.parent.mkdir(parents=True, exist_ok=True)

            with self._lock:
                with open(self._user_config_path, 'w', encoding='utf-8') as f:
                    yaml.safe_dump(self._config, f, allow_unicode=True, default_flow_style=False)
            logger.debug("Configuration saved to: %s", self._user_config_path)
            return True
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save configuration: %s", e)
            return False

    def reload(self) -> bool:
        """
        Reload configuration

        Returns:
            bool: Whether loading was successful
        """
        try:
            self._load()
            return True
        except (OSError, yaml.YAMLError):
            logger.exception("Failed to reload configuration")
            return False

    def reset(self) -> None:
        """Reset to default configuration."""
        with self._lock:
            self._config = self._get_default_config()

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing only)."""
        with cls._lock:
            cls._instance = None
