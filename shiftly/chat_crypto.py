"""
Chat message encryption
AES-CBC with PKCS7 padding, compatible with CryptoJS.AES using a hex WordArray key
"""

import base64
import binascii
import logging
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .exceptions import ChatCryptoError

logger = logging.getLogger(__name__)

IV_SIZE = 16
VALID_KEY_SIZES = (16, 24, 32)


def generate_chat_key(num_bytes: int = 16) -> str:
    """Generate a random AES key, hex-encoded (128-bit by default)"""
    if num_bytes not in VALID_KEY_SIZES:
        raise ChatCryptoError(f"Unsupported key size: {num_bytes} bytes")
    return os.urandom(num_bytes).hex()


def _parse_key(hex_key: str) -> bytes:
    try:
        key = bytes.fromhex(hex_key or "")
    except ValueError as e:
        raise ChatCryptoError("Encryption key is not valid hex") from e
    if len(key) not in VALID_KEY_SIZES:
        raise ChatCryptoError(f"Invalid encryption key length: {len(key)} bytes")
    return key


def encrypt_message(plain_text: str, hex_key: str) -> dict:
    """
    Encrypt plain_text with a hex key.
    Returns {"iv": Base64, "ciphertext": Base64}.
    """
    key = _parse_key(hex_key)
    iv = os.urandom(IV_SIZE)

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plain_text.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    return {
        "iv": base64.b64encode(iv).decode("ascii"),
        "ciphertext": base64.b64encode(ciphertext).decode("ascii"),
    }


def decrypt_message(iv_b64: str, ciphertext_b64: str, hex_key: str) -> str:
    """Decrypt using the same hex key and Base64 IV. Returns the UTF-8 plaintext."""
    key = _parse_key(hex_key)
    try:
        iv = base64.b64decode(iv_b64, validate=True)
        ciphertext = base64.b64decode(ciphertext_b64, validate=True)
    except (binascii.Error, TypeError) as e:
        raise ChatCryptoError("IV or ciphertext is not valid Base64") from e

    if len(iv) != IV_SIZE:
        raise ChatCryptoError(f"Invalid IV length: {len(iv)} bytes")
    if not ciphertext or len(ciphertext) % IV_SIZE:
        raise ChatCryptoError("Ciphertext is not a whole number of blocks")

    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        plain = unpadder.update(padded) + unpadder.finalize()
        return plain.decode("utf-8")
    except ValueError as e:
        # Wrong key shows up as bad padding or garbage bytes
        raise ChatCryptoError("Unable to decrypt message") from e
