"""
Configuration Provider.

Loads key material and logging settings from environment variables
(optionally via a .env file) and registers configured keys into a key store.

Environment Variables:
    FIELDCRYPT_ENCRYPT_KEY: hex-encoded AES key (16, 24 or 32 bytes)
    FIELDCRYPT_BLIND_INDEX_KEY: hex-encoded HMAC key
    FIELDCRYPT_LOG_LEVEL: logging level name (default INFO)
    FIELDCRYPT_LOG_FILE: optional path for a rotating log file

Generate keys with: openssl rand -hex 32
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import logging
import os

from dotenv import load_dotenv

from fieldcrypt.security.keystore import (
    BLIND_INDEX_KEY_NAME,
    ENCRYPT_KEY_NAME,
    KeyStore,
    get_key_store,
)

logger = logging.getLogger(__name__)


@dataclass
class ConfigurationProvider:
    """
    Provides configuration values loaded from environment variables.
    """

    _config: Dict[str, Any] = field(default_factory=dict)
    _loaded: bool = field(default=False)

    def load(self, env_path: Optional[str] = None) -> "ConfigurationProvider":
        """
        Load configuration from .env file.

        Args:
            env_path: Optional path to .env file

        Returns:
            Self for method chaining
        """
        if self._loaded:
            return self

        if env_path:
            load_dotenv(env_path)
        else:
            env_file = Path.cwd() / ".env"
            if env_file.exists():
                load_dotenv(env_file)

        self._config = {
            "app": {
                "log_level": os.getenv("FIELDCRYPT_LOG_LEVEL", "INFO"),
                "log_file": os.getenv("FIELDCRYPT_LOG_FILE", ""),
            },
            "security": {
                "encrypt_key": os.getenv("FIELDCRYPT_ENCRYPT_KEY", ""),
                "blind_index_key": os.getenv("FIELDCRYPT_BLIND_INDEX_KEY", ""),
            },
        }
        self._loaded = True
        return self

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot notation key.

        Args:
            key: Dot-separated key path (e.g., "security.encrypt_key")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def is_encryption_configured(self) -> bool:
        """Check if the encryption key is set."""
        return bool(self.get("security.encrypt_key"))

    def is_blind_index_configured(self) -> bool:
        """Check if the blind index key is set."""
        return bool(self.get("security.blind_index_key"))


# Singleton instance
_configuration_provider: Optional[ConfigurationProvider] = None


def get_configuration_provider() -> ConfigurationProvider:
    """
    Get the singleton ConfigurationProvider instance.

    Returns:
        ConfigurationProvider: The configuration provider
    """
    global _configuration_provider
    if _configuration_provider is None:
        _configuration_provider = ConfigurationProvider()
        _configuration_provider.load()
    return _configuration_provider


def reset_configuration_provider() -> None:
    """Discard the singleton ConfigurationProvider. Intended for tests."""
    global _configuration_provider
    _configuration_provider = None


def _parse_hex_key(setting: str, value: str) -> bytes:
    try:
        return bytes.fromhex(value.strip())
    except ValueError as e:
        raise ValueError(
            f"{setting} must be hex encoded. "
            "Generate with: openssl rand -hex 32"
        ) from e


def load_keys(
    store: KeyStore | None = None,
    config: ConfigurationProvider | None = None,
) -> KeyStore:
    """
    Register configured keys into a key store.

    Only keys present in configuration are registered; a missing key is
    reported when an operation first needs it.

    Args:
        store: Target key store. Defaults to the process-wide store.
        config: Configuration provider. Defaults to the singleton.

    Returns:
        The key store the keys were registered into.

    Raises:
        ValueError: If a configured key is not valid hex.
        KeyAlreadyExistsError: If a key name is already registered.
    """
    store = store if store is not None else get_key_store()
    config = config or get_configuration_provider()

    settings = (
        ("security.encrypt_key", "FIELDCRYPT_ENCRYPT_KEY", ENCRYPT_KEY_NAME),
        ("security.blind_index_key", "FIELDCRYPT_BLIND_INDEX_KEY", BLIND_INDEX_KEY_NAME),
    )
    for config_key, env_name, key_name in settings:
        value = config.get(config_key, "")
        if not value:
            logger.info(f"{env_name} not configured; '{key_name}' key not loaded")
            continue
        store.register(key_name, _parse_hex_key(env_name, value))

    return store


def init_from_environment(
    env_path: Optional[str] = None,
    store: KeyStore | None = None,
    configure_logging: bool = True,
    freeze: bool = True,
) -> KeyStore:
    """
    Startup helper: load configuration, set up logging and register keys.

    Call once at application start, before any encryption or hashing.

    Args:
        env_path: Optional path to .env file.
        store: Target key store. Defaults to the process-wide store.
        configure_logging: Whether to call setup_logging() with configured values.
        freeze: Whether to freeze the key store after registration.

    Returns:
        The populated key store.
    """
    from fieldcrypt.logging_config import setup_logging

    config = ConfigurationProvider().load(env_path)

    if configure_logging:
        setup_logging(
            config.get("app.log_level", "INFO"),
            config.get("app.log_file") or None,
        )

    store = load_keys(store, config)
    if freeze:
        store.freeze()

    logger.info(f"Key store initialized with keys: {store.names()}")
    return store
