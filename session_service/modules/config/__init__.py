"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: get_config(), ConfigModule.get(), ConfigModule.get_config_schema()
Hidden: Config sources, validation logic, environment parsing

Can be replaced with different config systems (Consul, etcd, AWS Parameter Store).
"""

import os
from typing import Any, Dict


# Configuration Contract: Required and Optional Keys

REQUIRED_CONFIG_KEYS = {
    "redis_host": "Redis server hostname",
    "redis_port": "Redis server port number",
    "redis_db": "Redis database number",
    "host": "API server bind address",
    "port": "API server port",
    "log_level": "Logging level (DEBUG, INFO, WARNING, ERROR)",
    "store_key_prefix": "Prefix for every key the document store writes",
}

OPTIONAL_CONFIG_KEYS = {
    "redis_password": {
        "description": "Redis authentication password",
        "default": None,
    },
    "debug": {
        "description": "Enable debug mode (auto-reload)",
        "default": False,
    },
    "publish_events": {
        "description": "Publish session lifecycle events on Redis pub/sub",
        "default": True,
    },
}


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigModule:
    """Configuration management module."""

    def __init__(self, environ: Dict[str, str] = None):
        """
        Initialize from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (used by tests)
        """
        self._environ = os.environ if environ is None else environ
        self._config = self._load_from_env()
        self._validate_required_keys()

    def _validate_required_keys(self) -> None:
        """
        Validate that all required configuration keys are present.

        Raises:
            ValueError: If required keys are missing
        """
        missing_keys = [
            key
            for key in REQUIRED_CONFIG_KEYS
            if key not in self._config or self._config[key] in (None, "")
        ]

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}. "
                f"Check environment variables and deployment configuration."
            )

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment."""
        env = self._environ.get

        # Redis port might be in tcp://host:port format when injected by Kubernetes
        redis_port_env = env("REDIS_PORT", "6379")
        if redis_port_env.startswith("tcp://"):
            redis_port = int(redis_port_env.split(":")[-1])
        else:
            redis_port = int(redis_port_env)

        return {
            # Redis settings
            "redis_host": env("REDIS_HOST", "localhost"),
            "redis_port": redis_port,
            "redis_db": int(env("REDIS_DB", "0")),
            "redis_password": env("REDIS_PASSWORD"),
            # API settings
            "host": env("API_HOST", "0.0.0.0"),
            "port": int(env("API_PORT", "8080")),
            "log_level": env("LOG_LEVEL", "INFO"),
            "debug": _parse_bool(env("DEBUG", "false")),
            # Store settings
            "store_key_prefix": env("STORE_KEY_PREFIX", "sessions"),
            "publish_events": _parse_bool(env("PUBLISH_EVENTS", "true")),
        }

    @property
    def redis_url(self) -> str:
        """Redis URL without credentials (password is passed separately)."""
        return f"redis://{self.get('redis_host')}:{self.get('redis_port')}/{self.get('redis_db')}"

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self._config.copy()

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Get the configuration schema (contract) for this module.

        Returns:
            Dictionary with 'required' and 'optional' key specifications

        Example:
            >>> schema = ConfigModule.get_config_schema()
            >>> print(schema['required']['redis_host'])
            Redis server hostname
        """
        return {
            "required": REQUIRED_CONFIG_KEYS.copy(),
            "optional": OPTIONAL_CONFIG_KEYS.copy(),
        }


# Singleton instance
_instance = None


def get_config() -> ConfigModule:
    """Get the configuration module singleton."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


__all__ = ["get_config", "ConfigModule", "REQUIRED_CONFIG_KEYS", "OPTIONAL_CONFIG_KEYS"]
