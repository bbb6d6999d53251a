"""
MAC engine
==========
    mac = hex(HMAC-SHA-256(secret, utf8(iv_b64 + value_b64)))

The MAC covers the base64 *text* of both fields, not the raw bytes, and is
rendered as lowercase hex. Verification is constant-time over the hex text.
"""

import logging

from .primitives import constant_time_equal, hmac_sha256

logger = logging.getLogger(__name__)

INVALID_MAC = "The MAC is invalid."


def compute_mac(secret: bytes, iv_b64: str, value_b64: str) -> str:
    return hmac_sha256(secret, (iv_b64 + value_b64).encode("utf-8")).hex()


def verify_mac(secret: bytes, envelope) -> bool:
    """
    True only if envelope.mac matches the MAC recomputed from its iv and
    value. A length mismatch, or any error while computing, counts as a
    failed verification.
    """
    try:
        calculated = compute_mac(secret, envelope.iv, envelope.value).encode("ascii")
        supplied   = envelope.mac.encode("utf-8")
        if len(calculated) != len(supplied):
            return False
        return constant_time_equal(calculated, supplied)
    except Exception as e:
        logger.debug(f"MAC verification error treated as mismatch: {e!r}")
        return False
