"""
AES-256-CBC encryption for Aadhaar numbers at rest
"""
import hashlib
import logging
import os
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..config import settings

logger = logging.getLogger(__name__)

IV_SIZE = 16


def _key(secret: Optional[str] = None) -> bytes:
    # SHA-256 stretches any configured secret to the 32 bytes AES-256 needs
    return hashlib.sha256((secret or settings.aadhaar_encryption_key).encode("utf-8")).digest()


def encrypt_aadhaar(aadhaar_number: str, secret: Optional[str] = None) -> str:
    """
    Encrypt an Aadhaar number with a fresh random IV

    Returns:
        ``"<iv hex>:<ciphertext hex>"``
    """
    iv = os.urandom(IV_SIZE)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(aadhaar_number.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(_key(secret)), modes.CBC(iv)).encryptor()
    encrypted = encryptor.update(padded) + encryptor.finalize()
    return f"{iv.hex()}:{encrypted.hex()}"


def decrypt_aadhaar(stored: Optional[str], secret: Optional[str] = None) -> Optional[str]:
    """Decrypt a stored Aadhaar value; ``None`` when missing or unreadable"""
    if not stored:
        return None

    try:
        iv_hex, encrypted_hex = stored.split(":", 1)
        decryptor = Cipher(
            algorithms.AES(_key(secret)), modes.CBC(bytes.fromhex(iv_hex))
        ).decryptor()
        padded = decryptor.update(bytes.fromhex(encrypted_hex)) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
    except ValueError as e:
        logger.warning(f"Could not decrypt Aadhaar number: {e}")
        return None
