"""
Key Store Module.

Named registry of raw key material shared by the encryption codec and the
blind index hasher. Entries are append-only: a name can be registered once
and is never replaced or removed.

Usage:
    store = KeyStore()
    store.register(ENCRYPT_KEY_NAME, os.urandom(32))
    store.register(BLIND_INDEX_KEY_NAME, os.urandom(64))
    store.freeze()

    service = EncryptionService(key_store=store)
"""

import logging
import threading
from typing import Iterator, Mapping, Optional

from fieldcrypt.security.exceptions import (
    KeyAlreadyExistsError,
    KeyStoreFrozenError,
    NoSuchKeyError,
)

logger = logging.getLogger(__name__)

# Conventional key names
ENCRYPT_KEY_NAME = "encrypt"
BLIND_INDEX_KEY_NAME = "blindIndex"


class KeyStore:
    """
    Append-only store mapping a logical key name to raw key bytes.

    Registration and lookup are serialized by an internal lock. Call
    freeze() once startup registration is complete to make the store
    read-only.
    """

    def __init__(self, keys: Optional[Mapping[str, bytes]] = None) -> None:
        """
        Initialize key store.

        Args:
            keys: Optional initial name -> key mapping, registered in order.
        """
        self._keys: dict[str, bytes] = {}
        self._lock = threading.Lock()
        self._frozen = False

        if keys:
            for name, key in keys.items():
                self.register(name, key)

    def register(self, name: str, key: bytes) -> None:
        """
        Register a named key.

        Args:
            name: Logical key name (e.g. "encrypt").
            key: Raw key material.

        Raises:
            KeyAlreadyExistsError: If the name is already registered.
            KeyStoreFrozenError: If the store has been frozen.
            TypeError: If key is not bytes-like.
        """
        if not isinstance(key, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"Key material must be bytes, got {type(key).__name__}"
            )

        with self._lock:
            if self._frozen:
                raise KeyStoreFrozenError(
                    f"Cannot register key '{name}': key store is frozen"
                )
            if name in self._keys:
                raise KeyAlreadyExistsError(name)
            self._keys[name] = bytes(key)

        logger.debug(f"Registered key '{name}' ({len(key)} bytes)")

    def lookup(self, name: str) -> bytes:
        """
        Look up key material by name.

        Raises:
            NoSuchKeyError: If the name is not registered.
        """
        with self._lock:
            try:
                return self._keys[name]
            except KeyError:
                raise NoSuchKeyError(name) from None

    def freeze(self) -> None:
        """Make the store read-only. Idempotent."""
        with self._lock:
            self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def names(self) -> list[str]:
        """Get the registered key names in registration order."""
        with self._lock:
            return list(self._keys)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __repr__(self) -> str:
        # Never include key material
        return f"KeyStore(names={self.names()!r}, frozen={self._frozen})"


# Global singleton
_key_store: KeyStore | None = None
_key_store_lock = threading.Lock()


def get_key_store() -> KeyStore:
    """Get or create the process-wide key store."""
    global _key_store
    if _key_store is None:
        with _key_store_lock:
            if _key_store is None:
                _key_store = KeyStore()
    return _key_store


def add_key(name: str, key: bytes) -> None:
    """Register a key in the process-wide key store."""
    get_key_store().register(name, key)


def reset_key_store() -> None:
    """Discard the process-wide key store. Intended for tests."""
    global _key_store
    with _key_store_lock:
        _key_store = None
