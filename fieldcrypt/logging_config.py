"""
Logging Configuration Module.

Provides centralized logging setup with an optional rotating file handler.
Includes automatic masking of key material and ciphertext-like values so
that secrets never reach log output.
"""

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys


# --- Constants ---
MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# --- Sensitive Data Patterns ---
SENSITIVE_PATTERNS = [
    # Key-value pairs with sensitive keys (key=xxx, secret: xxx, etc.)
    (
        re.compile(
            r"\b(key|secret|token|password|encrypt_key|blind_index_key|"
            r"fieldcrypt_encrypt_key|fieldcrypt_blind_index_key)\s*[:=]\s*['\"]?([^'\"\s&]+)['\"]?",
            re.IGNORECASE
        ),
        r"\1=***"
    ),
    # Hex runs long enough to be key material (16+ bytes)
    (
        re.compile(r"\b[0-9a-fA-F]{32,}\b"),
        r"[HEX:***]"
    ),
    # Long URL-safe base64 runs (ciphertexts, blind index digests)
    (
        re.compile(r"(?<![A-Za-z0-9_\-])[A-Za-z0-9_\-]{40,}={0,2}"),
        r"[B64:***]"
    ),
]


class SensitiveDataFormatter(logging.Formatter):
    """
    Custom log formatter that masks sensitive data.

    Automatically detects and masks:
    - key/secret/token assignments
    - Hex-encoded key material
    - Base64 ciphertexts and digests
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record, masking any sensitive data."""
        original_msg = super().format(record)

        masked_msg = original_msg
        for pattern, replacement in SENSITIVE_PATTERNS:
            masked_msg = pattern.sub(replacement, masked_msg)

        return masked_msg


def setup_logging(
    log_level: int | str = logging.INFO,
    log_file: str | Path | None = None,
) -> None:
    """
    Configure application logging.

    Args:
        log_level: The logging level (default: logging.INFO).
        log_file: Optional path for a rotating log file.
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()

    formatter = SensitiveDataFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # --- File Handler (Rotating) ---
    if log_file:
        log_file_path = Path(log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            filename=str(log_file_path),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        root_logger.info(f"Logging initialized. Log file: {log_file_path}")
    else:
        root_logger.info("Logging initialized.")
