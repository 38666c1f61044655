"""
Pytest Configuration and Shared Fixtures.

Provides common test fixtures for fieldcrypt unit tests.
"""

import os

import pytest


# =============================================================================
# Key Fixtures
# =============================================================================

# 32-byte ASCII key, usable as AES-256 key material
TEST_ENCRYPT_KEY = b"Y53DIiG6XX7eguA0SOzK7p6EPV7wfRNe"
TEST_BLIND_INDEX_KEY = b"blind-index-test-key-0123456789abcdef"


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset process-wide singletons before and after each test."""
    from fieldcrypt.config import reset_configuration_provider
    from fieldcrypt.security import (
        reset_blind_index_service,
        reset_encryption_service,
        reset_key_store,
    )

    def _reset():
        reset_key_store()
        reset_encryption_service()
        reset_blind_index_service()
        reset_configuration_provider()

    _reset()
    yield
    _reset()


@pytest.fixture
def key_store():
    """Create an isolated key store with both conventional keys registered."""
    from fieldcrypt.security import BLIND_INDEX_KEY_NAME, ENCRYPT_KEY_NAME, KeyStore

    store = KeyStore()
    store.register(ENCRYPT_KEY_NAME, TEST_ENCRYPT_KEY)
    store.register(BLIND_INDEX_KEY_NAME, TEST_BLIND_INDEX_KEY)
    return store


@pytest.fixture
def encryption_service(key_store):
    """Create an EncryptionService bound to the isolated key store."""
    from fieldcrypt.security import EncryptionService

    return EncryptionService(key_store=key_store)


@pytest.fixture
def blind_index_service(key_store):
    """Create a BlindIndexService bound to the isolated key store."""
    from fieldcrypt.security import BlindIndexService

    return BlindIndexService(key_store=key_store)


@pytest.fixture
def global_keys():
    """Register both conventional keys in the process-wide key store."""
    from fieldcrypt.security import BLIND_INDEX_KEY_NAME, ENCRYPT_KEY_NAME, add_key

    add_key(ENCRYPT_KEY_NAME, TEST_ENCRYPT_KEY)
    add_key(BLIND_INDEX_KEY_NAME, TEST_BLIND_INDEX_KEY)


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def mock_env_vars(monkeypatch, tmp_path):
    """Set up mock environment variables for testing."""
    # Keep load() from picking up a developer .env
    monkeypatch.chdir(tmp_path)

    env_vars = {
        "FIELDCRYPT_ENCRYPT_KEY": os.urandom(32).hex(),
        "FIELDCRYPT_BLIND_INDEX_KEY": os.urandom(64).hex(),
        "FIELDCRYPT_LOG_LEVEL": "DEBUG",
    }

    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("FIELDCRYPT_LOG_FILE", raising=False)

    return env_vars
