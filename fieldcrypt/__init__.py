"""
fieldcrypt - Field-level encryption with blind indexes.

Provides:
- A versioned AES-GCM codec for encrypting individual string values
- HMAC-SHA512 blind indexes for exact-match lookups on encrypted data
- SQLAlchemy column types and pydantic/JSON serialization adapters
"""

__version__ = "1.0.0"

from fieldcrypt.security import (
    BLIND_INDEX_KEY_NAME,
    ENCRYPT_KEY_NAME,
    AuthenticationError,
    BlindIndexService,
    EncryptionService,
    FieldCryptError,
    KeyAlreadyExistsError,
    KeyStore,
    KeyStoreFrozenError,
    NoSuchKeyError,
    PlaintextEncodingError,
    SerializationError,
    ShortCipherError,
    SourceTypeMismatchError,
    VersionMismatchError,
    add_key,
    generate_blind_index,
    get_blind_index_service,
    get_encryption_service,
    get_key_store,
)

__all__ = [
    "BLIND_INDEX_KEY_NAME",
    "ENCRYPT_KEY_NAME",
    "AuthenticationError",
    "BlindIndexService",
    "EncryptionService",
    "FieldCryptError",
    "KeyAlreadyExistsError",
    "KeyStore",
    "KeyStoreFrozenError",
    "NoSuchKeyError",
    "PlaintextEncodingError",
    "SerializationError",
    "ShortCipherError",
    "SourceTypeMismatchError",
    "VersionMismatchError",
    "add_key",
    "generate_blind_index",
    "get_blind_index_service",
    "get_encryption_service",
    "get_key_store",
]
