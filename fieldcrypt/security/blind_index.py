"""
Blind Index Module.

Deterministic HMAC-SHA512 digests for equality lookups on encrypted fields.

A blind index lets an application store a searchable companion column next
to an encrypted value: the same plaintext under the same key always yields
the same digest, so `WHERE email_index = :digest` finds the row without
decrypting anything. Digests are one-way; there is no path back to the
plaintext.

Identical plaintexts produce identical digests, so a blind index reveals
which rows share a value. Only index fields where that is acceptable.
"""

import base64
import hashlib
import hmac

from fieldcrypt.security.encryption import TEXT_ERRORS
from fieldcrypt.security.exceptions import PlaintextEncodingError
from fieldcrypt.security.keystore import BLIND_INDEX_KEY_NAME, KeyStore, get_key_store

DIGEST_SIZE = hashlib.sha512().digest_size  # 64 bytes
TEXT_DIGEST_LENGTH = 88  # len(urlsafe_b64encode(64 bytes))


class BlindIndexService:
    """
    Keyed HMAC-SHA512 hasher for blind indexes.

    The key is resolved by name from the key store on every call.
    """

    def __init__(
        self,
        key_store: KeyStore | None = None,
        key_name: str = BLIND_INDEX_KEY_NAME,
    ) -> None:
        self._key_store = key_store
        self._key_name = key_name

    @property
    def key_name(self) -> str:
        return self._key_name

    def hash(self, value: str) -> bytes:
        """
        Generate the raw blind index digest for a value.

        Args:
            value: String to hash.

        Returns:
            64-byte HMAC-SHA512 digest, or b"" for an empty value
            (empty values are not indexed).
        """
        if not value:
            return b""

        try:
            data = value.encode("utf-8", TEXT_ERRORS)
        except UnicodeEncodeError as e:
            raise PlaintextEncodingError(f"value is not encodable: {e.reason}") from e

        store = self._key_store if self._key_store is not None else get_key_store()
        key = store.lookup(self._key_name)

        return hmac.new(key, data, hashlib.sha512).digest()

    def encode_text(self, value: str) -> str:
        """
        Generate the blind index as URL-safe base64 text.

        Used for programmatic comparison and as the stored column value.

        Returns:
            88-character URL-safe base64 string, or "" for an empty value.
        """
        digest = self.hash(value)
        if not digest:
            return ""
        return base64.urlsafe_b64encode(digest).decode("ascii")

    def matches(self, value: str, text_digest: str) -> bool:
        """
        Check a value against a stored text digest in constant time.

        Empty values are never indexed, so they never match.
        """
        digest = self.encode_text(value)
        if not digest:
            return False
        return hmac.compare_digest(
            digest.encode("ascii"),
            text_digest.encode("utf-8", "replace"),
        )


# Global singleton
_blind_index_service: BlindIndexService | None = None


def get_blind_index_service() -> BlindIndexService:
    """Get or create the global blind index service instance."""
    global _blind_index_service
    if _blind_index_service is None:
        _blind_index_service = BlindIndexService()
    return _blind_index_service


def reset_blind_index_service() -> None:
    """Discard the global blind index service instance."""
    global _blind_index_service
    _blind_index_service = None


def generate_blind_index(value: str) -> str:
    """
    Helper function to generate blind index for a value.

    Used when you need to populate the hash column for lookups.

    Args:
        value: String to hash.

    Returns:
        URL-safe base64 HMAC-SHA512 digest.
    """
    return get_blind_index_service().encode_text(value)
