"""
Primitives: AES-CBC, HMAC-SHA-256, constant-time compare, randomness
=====================================================================
Thin adapter over the `cryptography` package. Nothing here knows about
envelopes; callers hand in raw bytes and get raw bytes back.

Cipher:  AES in CBC mode with PKCS#7 padding (block = 128 bits).
MAC:     HMAC-SHA-256 (32-byte tag).

Any failure inside the cipher (wrong key length for the selected
algorithm, wrong IV size, bad padding on decrypt) is raised as CipherError.

Dependencies: cryptography >= 41.0
"""

import asyncio
import base64
import os

from cryptography.hazmat.primitives import constant_time, hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..errors import CipherError


def _aes_cbc(algorithm, key: bytes, iv: bytes) -> Cipher:
    if len(key) * 8 != algorithm.key_bits:
        raise CipherError(
            f"Invalid key length: {algorithm.name} needs a "
            f"{algorithm.key_size}-byte key, got {len(key)} bytes."
        )
    try:
        return Cipher(algorithms.AES(key), modes.CBC(iv))
    except (TypeError, ValueError) as e:
        raise CipherError(f"{algorithm.name}: {e}") from e


def cipher_encrypt(algorithm, key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    """AES-CBC encrypt with PKCS#7 padding. Output is a multiple of 16 bytes."""
    cipher = _aes_cbc(algorithm, key, iv)
    try:
        encryptor = cipher.encryptor()
    except ValueError as e:
        raise CipherError(f"{algorithm.name}: {e}") from e
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext) + padder.finalize()
    return encryptor.update(padded) + encryptor.finalize()


def cipher_decrypt(algorithm, key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """AES-CBC decrypt and strip PKCS#7 padding."""
    cipher = _aes_cbc(algorithm, key, iv)
    try:
        decryptor = cipher.decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise CipherError(f"{algorithm.name} decryption failed: {e}") from e


def hmac_sha256(key: bytes, message: bytes) -> bytes:
    h = hmac.HMAC(key, hashes.SHA256())
    h.update(message)
    return h.finalize()


def constant_time_equal(a: bytes, b: bytes) -> bool:
    return constant_time.bytes_eq(a, b)


def secure_random_bytes(n: int) -> bytes:
    return os.urandom(n)


async def secure_random_bytes_async(n: int) -> bytes:
    """os.urandom run on the default executor so the event loop keeps going."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, os.urandom, n)


def generate_random_key(length: int = 32) -> str:
    """
    Base64 text of `length` random bytes. 32 bytes is a valid AES-256 key
    and the same format Laravel writes to APP_KEY (minus the "base64:" prefix).
    """
    return base64.b64encode(secure_random_bytes(length)).decode("ascii")
