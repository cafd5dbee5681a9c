"""
Field-level encryption for secrets stored at rest (TOTP secrets and bank
account numbers).

AES-256-GCM with a random 96-bit nonce per value. Ciphertexts are stored as
``nonce:ciphertext`` in URL-safe base64. The key comes from a secrets
provider; there is no built-in fallback key.
"""

import base64
import binascii
import logging
import secrets
from typing import Callable

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from hrportal.core.config import settings

logger = logging.getLogger(__name__)

NONCE_BYTES = 12
KEY_BYTES = 32


class EncryptionError(Exception):
    """Raised when a value cannot be encrypted or decrypted."""


def settings_key_provider() -> bytes:
    """Read the base64 encryption key from settings."""
    if not settings.encryption_key:
        raise EncryptionError("ENCRYPTION_KEY is not set")
    try:
        key = base64.b64decode(settings.encryption_key)
    except (binascii.Error, ValueError) as e:
        raise EncryptionError("ENCRYPTION_KEY is not valid base64") from e
    if len(key) != KEY_BYTES:
        raise EncryptionError(f"ENCRYPTION_KEY must decode to {KEY_BYTES} bytes")
    return key


class FieldEncryptor:
    """Encrypts and decrypts short text values with a key from ``key_provider``."""

    def __init__(self, key_provider: Callable[[], bytes] = settings_key_provider):
        self._key_provider = key_provider

    def _cipher(self) -> AESGCM:
        return AESGCM(self._key_provider())

    def encrypt(self, plaintext: str) -> str:
        nonce = secrets.token_bytes(NONCE_BYTES)
        ciphertext = self._cipher().encrypt(nonce, plaintext.encode("utf-8"), None)
        return (
            base64.urlsafe_b64encode(nonce).decode("ascii")
            + ":"
            + base64.urlsafe_b64encode(ciphertext).decode("ascii")
        )

    def decrypt(self, token: str) -> str:
        try:
            nonce_b64, ct_b64 = token.split(":", 1)
            nonce = base64.urlsafe_b64decode(nonce_b64)
            ciphertext = base64.urlsafe_b64decode(ct_b64)
            return self._cipher().decrypt(nonce, ciphertext, None).decode("utf-8")
        except (ValueError, binascii.Error, InvalidTag) as e:
            logger.error("Stored secret could not be decrypted")
            raise EncryptionError("Decryption failed") from e
