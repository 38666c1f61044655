"""
Unit Tests for fieldcrypt.serialization.

Tests the JSON text form of encrypted values and the pydantic field types.
"""

import base64
import json

import pytest
from pydantic import BaseModel, ValidationError


class TestMarshalEncrypted:
    """Tests for marshal_encrypted() / unmarshal_encrypted()."""

    def test_roundtrip(self, encryption_service):
        """Test marshal/unmarshal roundtrip preserves data."""
        from fieldcrypt.serialization import marshal_encrypted, unmarshal_encrypted

        data = marshal_encrypted("Hello World", encryption_service)

        assert unmarshal_encrypted(data, encryption_service) == "Hello World"

    def test_marshal_is_quoted_urlsafe_base64(self, encryption_service):
        """Test output is a JSON string literal holding URL-safe base64 ciphertext."""
        from fieldcrypt.serialization import marshal_encrypted

        data = marshal_encrypted("Hello World", encryption_service)

        assert data.startswith('"') and data.endswith('"')
        inner = json.loads(data)
        assert "+" not in inner and "/" not in inner
        ciphertext = base64.urlsafe_b64decode(inner)
        assert encryption_service.decrypt(ciphertext) == "Hello World"

    def test_empty_string(self, encryption_service):
        """Test empty plaintext marshals to an empty JSON string and back."""
        from fieldcrypt.serialization import marshal_encrypted, unmarshal_encrypted

        assert marshal_encrypted("", encryption_service) == '""'
        assert unmarshal_encrypted('""', encryption_service) == ""

    def test_unmarshal_accepts_bytes(self, encryption_service):
        """Test unmarshal accepts raw JSON bytes."""
        from fieldcrypt.serialization import marshal_encrypted, unmarshal_encrypted

        data = marshal_encrypted("bytes input", encryption_service).encode("ascii")

        assert unmarshal_encrypted(data, encryption_service) == "bytes input"

    def test_embedded_in_json_document(self, encryption_service):
        """Test the literal embeds in a larger JSON document."""
        from fieldcrypt.serialization import marshal_encrypted, unmarshal_encrypted

        document = '{"ssn": %s}' % marshal_encrypted("123-45-6789", encryption_service)
        ciphertext_literal = json.dumps(json.loads(document)["ssn"])

        assert unmarshal_encrypted(ciphertext_literal, encryption_service) == "123-45-6789"

    @pytest.mark.parametrize("data", ["abc", '"abc', 'abc"', '"', ""])
    def test_unmarshal_rejects_unquoted(self, encryption_service, data):
        """Test input without surrounding quotes raises SerializationError."""
        from fieldcrypt.security import SerializationError
        from fieldcrypt.serialization import unmarshal_encrypted

        with pytest.raises(SerializationError):
            unmarshal_encrypted(data, encryption_service)

    @pytest.mark.parametrize("data", ['"not base64!"', '"abc"', '"ab$d"'])
    def test_unmarshal_rejects_malformed_base64(self, encryption_service, data):
        """Test malformed base64 raises SerializationError."""
        from fieldcrypt.security import SerializationError
        from fieldcrypt.serialization import unmarshal_encrypted

        with pytest.raises(SerializationError):
            unmarshal_encrypted(data, encryption_service)

    @pytest.mark.parametrize("text", ["+/8=", "ab+d", "ab/d", b"+/8="])
    def test_decode_rejects_standard_alphabet(self, text):
        """Test '+' and '/' are rejected; only the URL-safe alphabet is accepted."""
        from fieldcrypt.security import SerializationError
        from fieldcrypt.serialization import decode_ciphertext

        with pytest.raises(SerializationError):
            decode_ciphertext(text)

    def test_decode_accepts_urlsafe_alphabet(self):
        """Test '-' and '_' decode to the same bytes as '+' and '/' would."""
        from fieldcrypt.serialization import decode_ciphertext

        assert decode_ciphertext("-_8=") == b"\xfb\xff"

    def test_decode_rejects_non_ascii(self):
        """Test non-ASCII text raises SerializationError."""
        from fieldcrypt.security import SerializationError
        from fieldcrypt.serialization import decode_ciphertext

        with pytest.raises(SerializationError):
            decode_ciphertext("abcé")

    def test_unmarshal_propagates_codec_errors(self, encryption_service):
        """Test decryption failures surface as codec errors."""
        from fieldcrypt.security import AuthenticationError, VersionMismatchError
        from fieldcrypt.serialization import encode_ciphertext, unmarshal_encrypted

        ciphertext = bytearray(encryption_service.encrypt("Hello World"))
        ciphertext[-1] ^= 0x01
        with pytest.raises(AuthenticationError):
            unmarshal_encrypted(json.dumps(encode_ciphertext(bytes(ciphertext))), encryption_service)

        ciphertext[0] = 0x01
        with pytest.raises(VersionMismatchError):
            unmarshal_encrypted(json.dumps(encode_ciphertext(bytes(ciphertext))), encryption_service)

    def test_uses_global_service_by_default(self, global_keys):
        """Test marshal/unmarshal fall back to the global encryption service."""
        from fieldcrypt.serialization import marshal_encrypted, unmarshal_encrypted

        assert unmarshal_encrypted(marshal_encrypted("global")) == "global"


class TestPydanticTypes:
    """Tests for EncryptedStr and BlindIndexStr pydantic field types."""

    @pytest.fixture
    def customer_model(self):
        from fieldcrypt.serialization import BlindIndexStr, EncryptedStr

        class Customer(BaseModel):
            name: str
            ssn: EncryptedStr
            email_index: BlindIndexStr

        return Customer

    def test_python_mode_holds_plaintext(self, global_keys, customer_model):
        """Test Python construction and model_dump() keep plaintext."""
        customer = customer_model(name="Alice", ssn="123-45-6789", email_index="alice@example.com")

        assert customer.ssn == "123-45-6789"
        assert customer.model_dump()["ssn"] == "123-45-6789"

    def test_json_dump_encrypts(self, global_keys, customer_model):
        """Test model_dump_json() writes ciphertext and blind index digest."""
        from fieldcrypt.security import get_blind_index_service, get_encryption_service

        customer = customer_model(name="Alice", ssn="123-45-6789", email_index="alice@example.com")

        payload = json.loads(customer.model_dump_json())

        assert payload["name"] == "Alice"
        assert payload["ssn"] != "123-45-6789"
        assert get_encryption_service().decrypt(base64.urlsafe_b64decode(payload["ssn"])) == "123-45-6789"
        assert payload["email_index"] == get_blind_index_service().encode_text("alice@example.com")

    def test_json_roundtrip_decrypts(self, global_keys, customer_model):
        """Test model_validate_json() decrypts the encrypted field."""
        customer = customer_model(name="Alice", ssn="123-45-6789", email_index="x")

        restored = customer_model.model_validate_json(customer.model_dump_json())

        assert restored.ssn == "123-45-6789"

    def test_json_dump_is_non_deterministic(self, global_keys, customer_model):
        """Test two dumps of the same model carry different ciphertexts."""
        customer = customer_model(name="Alice", ssn="123-45-6789", email_index="x")

        assert customer.model_dump_json() != customer.model_dump_json()

    def test_json_validate_rejects_bad_ciphertext(self, global_keys, customer_model):
        """Test malformed ciphertext raises a pydantic ValidationError."""
        payload = json.dumps({"name": "Alice", "ssn": "not base64!", "email_index": "x"})

        with pytest.raises(ValidationError, match="Cannot decrypt field"):
            customer_model.model_validate_json(payload)

    def test_json_validate_rejects_tampered_ciphertext(self, global_keys, customer_model):
        """Test tampered ciphertext raises a pydantic ValidationError."""
        from fieldcrypt.security import get_encryption_service
        from fieldcrypt.serialization import encode_ciphertext

        ciphertext = bytearray(get_encryption_service().encrypt("123-45-6789"))
        ciphertext[-1] ^= 0x01
        payload = json.dumps({
            "name": "Alice",
            "ssn": encode_ciphertext(bytes(ciphertext)),
            "email_index": "x",
        })

        with pytest.raises(ValidationError):
            customer_model.model_validate_json(payload)
