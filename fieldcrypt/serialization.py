"""
Text Serialization Module.

Converts encrypted values to and from their JSON text form: the versioned
ciphertext, URL-safe base64 encoded, as a JSON string literal.

Also provides pydantic field types so models can carry encrypted and blind
indexed fields:

    class Customer(BaseModel):
        name: str
        ssn: EncryptedStr
        email_index: BlindIndexStr

    customer.model_dump_json()   # ssn -> base64 ciphertext, email_index -> digest
    Customer.model_validate_json(payload)  # ssn decrypted back to plaintext
"""

import base64
import binascii
import json
import logging
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer, ValidationInfo

from fieldcrypt.security.blind_index import get_blind_index_service
from fieldcrypt.security.encryption import EncryptionService, get_encryption_service
from fieldcrypt.security.exceptions import FieldCryptError, SerializationError

logger = logging.getLogger(__name__)


def encode_ciphertext(ciphertext: bytes) -> str:
    """Encode ciphertext bytes as padded URL-safe base64."""
    return base64.urlsafe_b64encode(ciphertext).decode("ascii")


def decode_ciphertext(text: str | bytes) -> bytes:
    """
    Decode padded URL-safe base64 into ciphertext bytes.

    Raises:
        SerializationError: If the text is not valid URL-safe base64.
    """
    if isinstance(text, str):
        text = text.encode("ascii", "replace")
    # b64decode maps the altchars onto +/ and would accept both alphabets
    if b"+" in text or b"/" in text:
        raise SerializationError("Invalid base64 ciphertext: standard alphabet characters '+' or '/'")
    try:
        return base64.b64decode(text, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise SerializationError(f"Invalid base64 ciphertext: {e}") from e


def marshal_encrypted(plaintext: str, service: EncryptionService | None = None) -> str:
    """
    Encrypt a value into its JSON text form.

    Args:
        plaintext: Value to encrypt.
        service: Optional encryption service. Uses the global service if None.

    Returns:
        A quoted JSON string literal holding the base64 ciphertext.
        An empty plaintext marshals to '""'.
    """
    service = service or get_encryption_service()
    return json.dumps(encode_ciphertext(service.encrypt(plaintext)))


def unmarshal_encrypted(data: str | bytes, service: EncryptionService | None = None) -> str:
    """
    Decrypt a value from its JSON text form.

    Args:
        data: A quoted JSON string literal produced by marshal_encrypted().
        service: Optional encryption service. Uses the global service if None.

    Returns:
        Decrypted plaintext.

    Raises:
        SerializationError: If the literal is unquoted or not valid base64.
        FieldCryptError: Any codec error from decryption.
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("ascii")
        except UnicodeDecodeError as e:
            raise SerializationError("Encrypted value is not ASCII text") from e

    if len(data) < 2 or data[0] != '"' or data[-1] != '"':
        raise SerializationError("Encrypted value must be a quoted JSON string")

    service = service or get_encryption_service()
    return service.decrypt(decode_ciphertext(data[1:-1]))


# =============================================================================
# Pydantic Field Types
# =============================================================================


def _decrypt_json_input(value: Any, info: ValidationInfo) -> Any:
    """Decrypt base64 ciphertext when validating JSON; pass Python input through."""
    if info.mode != "json" or not isinstance(value, str):
        return value
    try:
        return get_encryption_service().decrypt(decode_ciphertext(value))
    except FieldCryptError as e:
        logger.debug(f"Rejected encrypted field {info.field_name}: {type(e).__name__}")
        raise ValueError(f"Cannot decrypt field: {e}") from e


def _encrypt_for_json(value: str) -> str:
    return encode_ciphertext(get_encryption_service().encrypt(value))


def _blind_index_for_json(value: str) -> str:
    return get_blind_index_service().encode_text(value)


EncryptedStr = Annotated[
    str,
    BeforeValidator(_decrypt_json_input),
    PlainSerializer(_encrypt_for_json, return_type=str, when_used="json"),
]
"""Plaintext string that is encrypted when dumped to JSON and decrypted when loaded from JSON."""

BlindIndexStr = Annotated[
    str,
    PlainSerializer(_blind_index_for_json, return_type=str, when_used="json"),
]
"""Plaintext string that is replaced by its blind index digest when dumped to JSON."""
