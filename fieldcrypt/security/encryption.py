"""
Field Encryption Module.

Provides versioned AES-GCM encryption for individual string values.

Ciphertext Layout:
    [version:1][nonce:12][ciphertext + tag:N]

    - version: format version byte (currently 0x00)
    - nonce: random 12-byte GCM nonce, unique per encryption, not secret
    - ciphertext + tag: AES-GCM output, the 16-byte tag trails the data

An empty plaintext encrypts to an empty byte string (no header), and an
empty byte string decrypts back to "" without touching the cipher. Plaintext
is UTF-8 with surrogateescape, so payloads that are not valid UTF-8 still
decrypt to a string that encrypts back to the same bytes.

Security Features:
- AES-GCM authenticated encryption with random nonces (non-deterministic)
- Key looked up from the key store on every call (never cached)
- Tampering, corruption and wrong keys all surface as AuthenticationError
"""

import logging
import os
from enum import IntEnum
from typing import Callable

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from fieldcrypt.security.exceptions import (
    AuthenticationError,
    PlaintextEncodingError,
    ShortCipherError,
    VersionMismatchError,
)
from fieldcrypt.security.keystore import ENCRYPT_KEY_NAME, KeyStore, get_key_store

logger = logging.getLogger(__name__)

NONCE_SIZE = 12
TAG_SIZE = 16

# Undecodable bytes map to lone surrogates and back, so any sealed payload round-trips
TEXT_ERRORS = "surrogateescape"
HEADER_SIZE = 1 + NONCE_SIZE


class FormatVersion(IntEnum):
    """Supported ciphertext format versions."""

    V0 = 0x00


CURRENT_VERSION = FormatVersion.V0


def _open_v0(cipher: AESGCM, payload: bytes) -> bytes:
    """Open a version 0 payload: nonce followed by sealed data."""
    nonce = payload[:NONCE_SIZE]
    sealed = payload[NONCE_SIZE:]
    return cipher.decrypt(nonce, sealed, None)


# Dispatch table: version -> opener
_OPENERS: dict[FormatVersion, Callable[[AESGCM, bytes], bytes]] = {
    FormatVersion.V0: _open_v0,
}


def _log_version_mismatch(version: int) -> None:
    """Default hook for unsupported ciphertext versions."""
    logger.warning(
        f"Encryption versions don't match: got 0x{version:02x}, "
        f"supported {[f'0x{v:02x}' for v in _OPENERS]}"
    )


class EncryptionService:
    """
    Versioned AES-GCM codec for string fields.

    The key is resolved by name from the injected KeyStore on every
    operation, so a service can be constructed before keys are registered.
    """

    def __init__(
        self,
        key_store: KeyStore | None = None,
        key_name: str = ENCRYPT_KEY_NAME,
        nonce_source: Callable[[int], bytes] = os.urandom,
        on_version_mismatch: Callable[[int], None] | None = None,
    ) -> None:
        """
        Initialize encryption service.

        Args:
            key_store: Key store to resolve keys from. Defaults to the
                process-wide store.
            key_name: Name of the encryption key in the store.
            nonce_source: Callable returning n secure random bytes.
            on_version_mismatch: Hook called with the offending version byte
                before VersionMismatchError is raised. Defaults to logging
                a warning.
        """
        self._key_store = key_store
        self._key_name = key_name
        self._nonce_source = nonce_source
        self._on_version_mismatch = on_version_mismatch or _log_version_mismatch

    @property
    def key_name(self) -> str:
        return self._key_name

    def _cipher(self) -> AESGCM:
        store = self._key_store if self._key_store is not None else get_key_store()
        # Raises NoSuchKeyError, or ValueError for an invalid key length
        return AESGCM(store.lookup(self._key_name))

    def encrypt(self, plaintext: str) -> bytes:
        """
        Encrypt plaintext using AES-GCM with a random nonce.

        Args:
            plaintext: String to encrypt.

        Returns:
            Versioned ciphertext (version + nonce + ciphertext + tag),
            or b"" for an empty plaintext.

        Raises:
            PlaintextEncodingError: If the string holds unencodable surrogates.
        """
        if not plaintext:
            return b""

        try:
            plaintext_bytes = plaintext.encode("utf-8", TEXT_ERRORS)
        except UnicodeEncodeError as e:
            raise PlaintextEncodingError(f"plaintext is not encodable: {e.reason}") from e

        cipher = self._cipher()

        nonce = self._nonce_source(NONCE_SIZE)
        if len(nonce) != NONCE_SIZE:
            raise ValueError(
                f"Nonce source returned {len(nonce)} bytes, expected {NONCE_SIZE}"
            )

        sealed = cipher.encrypt(nonce, plaintext_bytes, None)

        return bytes([CURRENT_VERSION]) + nonce + sealed

    def decrypt(self, ciphertext: bytes) -> str:
        """
        Decrypt a versioned AES-GCM ciphertext.

        Args:
            ciphertext: Bytes produced by encrypt().

        Returns:
            Decrypted plaintext string.

        Raises:
            VersionMismatchError: If the version byte is not supported.
            ShortCipherError: If the ciphertext is shorter than the header.
            AuthenticationError: If the ciphertext fails authentication.
        """
        if not ciphertext:
            return ""

        version = ciphertext[0]
        try:
            opener = _OPENERS[FormatVersion(version)]
        except ValueError:
            self._on_version_mismatch(version)
            raise VersionMismatchError(version) from None

        if len(ciphertext) < HEADER_SIZE:
            raise ShortCipherError(
                f"ciphertext too short: {len(ciphertext)} bytes, need at least {HEADER_SIZE}"
            )

        cipher = self._cipher()

        try:
            plaintext_bytes = opener(cipher, bytes(ciphertext[1:]))
        except InvalidTag as e:
            raise AuthenticationError("message authentication failed") from e

        return plaintext_bytes.decode("utf-8", TEXT_ERRORS)


# Global singleton
_encryption_service: EncryptionService | None = None


def get_encryption_service() -> EncryptionService:
    """Get or create the global encryption service instance."""
    global _encryption_service
    if _encryption_service is None:
        _encryption_service = EncryptionService()
    return _encryption_service


def reset_encryption_service() -> None:
    """Discard the global encryption service instance."""
    global _encryption_service
    _encryption_service = None
