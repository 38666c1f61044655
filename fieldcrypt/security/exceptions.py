"""
Field encryption exceptions.

Custom exception classes for key registry, codec and adapter errors.
"""


class FieldCryptError(Exception):
    """Base exception for field encryption errors."""
    pass


class NoSuchKeyError(FieldCryptError):
    """Raised when a key name is not registered in the key store."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No such key exists: '{name}'")


class KeyAlreadyExistsError(FieldCryptError):
    """Raised when registering a key name that is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Key with this name already exists: '{name}'")


class KeyStoreFrozenError(FieldCryptError):
    """Raised when registering into a key store that has been frozen."""
    pass


class ShortCipherError(FieldCryptError):
    """Raised when a ciphertext is too short to hold version and nonce."""
    pass


class VersionMismatchError(FieldCryptError):
    """Raised when a ciphertext carries an unsupported format version."""

    def __init__(self, version: int) -> None:
        self.version = version
        super().__init__(f"Unsupported ciphertext version: 0x{version:02x}")


class AuthenticationError(FieldCryptError):
    """
    Raised when a ciphertext fails authentication.

    Covers tampering, corruption and decryption under the wrong key
    without telling them apart.
    """
    pass


class SourceTypeMismatchError(FieldCryptError):
    """Raised when a storage adapter receives a value that is not bytes."""
    pass


class SerializationError(FieldCryptError):
    """Raised when an encrypted value cannot be decoded from its text form."""
    pass


class PlaintextEncodingError(FieldCryptError):
    """Raised when a plaintext string cannot be encoded to bytes."""
    pass
