"""
Session encryption - key bootstrap and authenticated encryption.

Session files hold database credentials, so they are written as Fernet
tokens (AES-128-CBC + HMAC-SHA256) from the cryptography package.

The key is resolved exactly once, when the session store is built:
1. An externally supplied key (SESSION_ENCRYPTION_KEY)
2. A key previously generated and saved to the key file
3. A freshly generated key, saved to the key file with 0600 permissions
"""
import base64
import hashlib
import os
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from dbconsole.core.logging_config import get_logger

logger = get_logger(__name__)


def _normalize_key(raw_key: str) -> bytes:
    """
    Turn an operator supplied key into a valid Fernet key.

    A proper Fernet key (32 url-safe base64 bytes) is used as-is; any
    other passphrase is stretched through SHA-256.
    """
    candidate = raw_key.strip().encode("utf-8")
    try:
        if len(base64.urlsafe_b64decode(candidate)) == 32:
            return candidate
    except (ValueError, TypeError):
        pass
    return base64.urlsafe_b64encode(hashlib.sha256(candidate).digest())


def resolve_encryption_key(external_key: Optional[str], key_file: Path) -> bytes:
    """
    Resolve the session encryption key.

    Args:
        external_key: Key supplied through configuration, if any
        key_file: Location of the generated key

    Returns:
        Fernet key bytes
    """
    if external_key:
        logger.info("Using externally supplied session encryption key")
        return _normalize_key(external_key)

    if key_file.exists():
        stored = key_file.read_text(encoding="utf-8").strip()
        if stored:
            logger.info(f"Loaded session encryption key from {key_file}")
            return _normalize_key(stored)
        logger.warning(f"Session key file {key_file} is empty, generating a new key")

    key = Fernet.generate_key()
    key_file.parent.mkdir(parents=True, exist_ok=True)

    # Create with restrictive permissions from the start
    fd = os.open(key_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as handle:
        handle.write(key)
    os.chmod(key_file, 0o600)

    logger.warning(
        f"Generated new session encryption key at {key_file}. "
        f"Set SESSION_ENCRYPTION_KEY to manage it externally."
    )
    return key


class SessionCipher:
    """
    Encrypts and decrypts serialized session records.

    Example:
        >>> cipher = SessionCipher(Fernet.generate_key())
        >>> blob = cipher.encrypt(b'{"id": "..."}')
        >>> cipher.decrypt(blob)
        b'{"id": "..."}'
    """

    def __init__(self, key: bytes):
        self._fernet = Fernet(key)

    def encrypt(self, plaintext: bytes) -> bytes:
        return self._fernet.encrypt(plaintext)

    def decrypt(self, token: bytes) -> bytes:
        """
        Decrypt a session blob.

        Raises:
            ValueError: If the blob was tampered with or uses another key
        """
        try:
            return self._fernet.decrypt(token)
        except InvalidToken as e:
            raise ValueError("Session blob could not be decrypted") from e
