"""
Key Generator
-------------
Generates fresh encryption and blind index keys as .env lines and checks
that they work with the codec before printing them.

Usage:
    python scripts/generate_keys.py >> .env
    python scripts/generate_keys.py --key-size 16
"""

import argparse
import os
import secrets
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fieldcrypt.security import (
    BLIND_INDEX_KEY_NAME,
    ENCRYPT_KEY_NAME,
    BlindIndexService,
    EncryptionService,
    KeyStore,
)

AES_KEY_SIZES = (16, 24, 32)
BLIND_INDEX_KEY_SIZE = 64


def generate_keys(key_size: int = 32) -> dict[str, str]:
    """
    Generate hex-encoded keys and verify them with a round trip.

    Args:
        key_size: AES key size in bytes (16, 24 or 32).

    Returns:
        Mapping of environment variable name to hex-encoded key.
    """
    if key_size not in AES_KEY_SIZES:
        raise ValueError(f"AES key size must be one of {AES_KEY_SIZES}, got {key_size}")

    encrypt_key = secrets.token_bytes(key_size)
    blind_index_key = secrets.token_bytes(BLIND_INDEX_KEY_SIZE)

    store = KeyStore({
        ENCRYPT_KEY_NAME: encrypt_key,
        BLIND_INDEX_KEY_NAME: blind_index_key,
    })
    store.freeze()

    codec = EncryptionService(key_store=store)
    probe = "fieldcrypt key check"
    if codec.decrypt(codec.encrypt(probe)) != probe:
        raise RuntimeError("Generated encryption key failed round trip")
    BlindIndexService(key_store=store).hash(probe)

    return {
        "FIELDCRYPT_ENCRYPT_KEY": encrypt_key.hex(),
        "FIELDCRYPT_BLIND_INDEX_KEY": blind_index_key.hex(),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate fieldcrypt keys as .env lines.")
    parser.add_argument(
        "--key-size",
        type=int,
        default=32,
        choices=AES_KEY_SIZES,
        help="AES key size in bytes (default: 32).",
    )
    args = parser.parse_args()

    for name, value in generate_keys(args.key_size).items():
        print(f"{name}={value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
