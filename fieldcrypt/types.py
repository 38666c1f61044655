"""
SQLAlchemy Column Types.

TypeDecorators that encrypt values on the way into the database and decrypt
them on the way out, plus a blind index column that hashes bound parameters
so equality lookups work against the stored digest.

Usage:
    class User(Base):
        __tablename__ = "users"

        id: Mapped[int] = mapped_column(primary_key=True)
        email: Mapped[str] = mapped_column(EncryptedType())
        email_index: Mapped[str] = mapped_column(BlindIndexType(), index=True)

    user = User(email="alice@example.com", email_index="alice@example.com")
    session.add(user)

    # The literal is hashed before it is sent to the database
    stmt = select(User).where(User.email_index == "alice@example.com")
"""

from typing import Any

from sqlalchemy import LargeBinary, String, TypeDecorator
from sqlalchemy.engine import Dialect

from fieldcrypt.security.blind_index import (
    TEXT_DIGEST_LENGTH,
    BlindIndexService,
    get_blind_index_service,
)
from fieldcrypt.security.encryption import EncryptionService, get_encryption_service
from fieldcrypt.security.exceptions import SourceTypeMismatchError


class EncryptedType(TypeDecorator):
    """
    SQLAlchemy TypeDecorator for transparent field encryption.

    Stores the versioned ciphertext as raw bytes (BLOB / BYTEA).
    An empty string is stored as a zero-length byte string without
    invoking the cipher.
    """

    impl = LargeBinary
    cache_ok = True

    def __init__(
        self,
        *args: Any,
        service: EncryptionService | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize encrypted type.

        Args:
            service: Optional encryption service. Uses the global service if None.
        """
        super().__init__(*args, **kwargs)
        self._service = service

    @property
    def service(self) -> EncryptionService:
        return self._service if self._service is not None else get_encryption_service()

    def process_bind_param(self, value: str | None, dialect: Dialect) -> bytes | None:
        """Encrypt value before storing in database."""
        if value is None:
            return None
        if value == "":
            return b""

        return self.service.encrypt(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> str | None:
        """Decrypt value when reading from database."""
        if value is None:
            return None
        if isinstance(value, (bytearray, memoryview)):
            value = bytes(value)
        if not isinstance(value, bytes):
            raise SourceTypeMismatchError(
                f"Encrypted column value must be bytes, got {type(value).__name__}"
            )
        if not value:
            return ""

        return self.service.decrypt(value)


class BlindIndexType(TypeDecorator):
    """
    SQLAlchemy TypeDecorator for blind index columns.

    Bound parameters are hashed to their URL-safe base64 digest, both on
    insert and in WHERE clauses. Result values are returned as stored,
    since a digest cannot be reversed.
    """

    impl = String
    cache_ok = True

    def __init__(
        self,
        length: int = TEXT_DIGEST_LENGTH,
        *args: Any,
        service: BlindIndexService | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize blind index type.

        Args:
            length: Column length. The default fits one base64 digest.
            service: Optional blind index service. Uses the global service if None.
        """
        super().__init__(length, *args, **kwargs)
        self._service = service

    @property
    def service(self) -> BlindIndexService:
        return self._service if self._service is not None else get_blind_index_service()

    def process_bind_param(self, value: str | None, dialect: Dialect) -> str | None:
        """Hash value before it is bound."""
        if value is None:
            return None

        return self.service.encode_text(value)

    def process_result_value(self, value: str | None, dialect: Dialect) -> str | None:
        return value
