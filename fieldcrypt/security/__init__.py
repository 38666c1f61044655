"""
Core security primitives.

Provides the key store, the versioned AES-GCM codec and the blind index
hasher used by the storage and serialization adapters.
"""

from fieldcrypt.security.blind_index import (
    BlindIndexService,
    generate_blind_index,
    get_blind_index_service,
    reset_blind_index_service,
)
from fieldcrypt.security.encryption import (
    CURRENT_VERSION,
    EncryptionService,
    FormatVersion,
    get_encryption_service,
    reset_encryption_service,
)
from fieldcrypt.security.exceptions import (
    AuthenticationError,
    FieldCryptError,
    KeyAlreadyExistsError,
    KeyStoreFrozenError,
    NoSuchKeyError,
    PlaintextEncodingError,
    SerializationError,
    ShortCipherError,
    SourceTypeMismatchError,
    VersionMismatchError,
)
from fieldcrypt.security.keystore import (
    BLIND_INDEX_KEY_NAME,
    ENCRYPT_KEY_NAME,
    KeyStore,
    add_key,
    get_key_store,
    reset_key_store,
)

__all__ = [
    # Key store
    "BLIND_INDEX_KEY_NAME",
    "ENCRYPT_KEY_NAME",
    "KeyStore",
    "add_key",
    "get_key_store",
    "reset_key_store",
    # Encryption
    "CURRENT_VERSION",
    "EncryptionService",
    "FormatVersion",
    "get_encryption_service",
    "reset_encryption_service",
    # Blind index
    "BlindIndexService",
    "generate_blind_index",
    "get_blind_index_service",
    "reset_blind_index_service",
    # Exceptions
    "AuthenticationError",
    "FieldCryptError",
    "KeyAlreadyExistsError",
    "KeyStoreFrozenError",
    "NoSuchKeyError",
    "PlaintextEncodingError",
    "SerializationError",
    "ShortCipherError",
    "SourceTypeMismatchError",
    "VersionMismatchError",
]
