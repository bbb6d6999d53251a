"""
IV derivation
=============
The Laravel-compatible IV is NOT the raw random bytes.

    raw   = random(n)                 # n = random_bytes, default 8
    text  = raw.hex()                 # 2n lowercase hex characters
    iv    = text.encode("ascii")      # 2n bytes, each one of b"0-9a-f"

With n = 8 this gives the 16-byte AES block-sized IV, carrying 8 bytes of
entropy. Other implementations of the format derive it this way, so it has
to be reproduced exactly; the envelope stores base64(iv).
"""

from .primitives import secure_random_bytes, secure_random_bytes_async

DEFAULT_RANDOM_BYTES = 8
IV_SIZE = 16


def materialize_iv(raw: bytes) -> bytes:
    """Hex-encode raw and take the single-byte code of each hex character."""
    return raw.hex().encode("ascii")


def derive_iv(random_bytes: int = DEFAULT_RANDOM_BYTES) -> bytes:
    return materialize_iv(secure_random_bytes(random_bytes))


async def derive_iv_async(random_bytes: int = DEFAULT_RANDOM_BYTES) -> bytes:
    raw = await secure_random_bytes_async(random_bytes)
    return materialize_iv(raw)
