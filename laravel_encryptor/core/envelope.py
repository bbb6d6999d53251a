"""
Envelope codec
==============
One encrypted message is the envelope

    {"iv": base64(iv), "value": base64(ciphertext), "mac": hex(hmac)}

and what travels between systems is base64 of its compact JSON text.
Field order and separators match what Laravel and the Node port emit.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Union

from ..errors import PayloadFormatError
from .iv import IV_SIZE
from .mac import compute_mac

logger = logging.getLogger(__name__)

FIELDS = ("iv", "value", "mac")

INVALID_JSON    = "Encryptor decryptIt cannot parse json"
INVALID_PAYLOAD = "The payload is invalid."


def b64encode_text(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode_text(text: Union[str, bytes]) -> bytes:
    """
    Lenient base64 decode: surrounding whitespace is ignored and missing
    "=" padding is restored, as other ports of the format accept both.
    """
    if isinstance(text, str):
        text = text.encode("ascii")
    text = text.strip()
    text += b"=" * (-len(text) % 4)
    return base64.b64decode(text)


@dataclass(frozen=True)
class Envelope:
    iv: str
    value: str
    mac: str

    def to_dict(self) -> dict:
        return {"iv": self.iv, "value": self.value, "mac": self.mac}

    def serialize_outer(self) -> str:
        text = json.dumps(self.to_dict(), separators=(",", ":"))
        return b64encode_text(text.encode("utf-8"))

    def iv_bytes(self) -> bytes:
        return b64decode_text(self.iv)

    def value_bytes(self) -> bytes:
        return b64decode_text(self.value)


def encode_envelope(secret: bytes, iv: bytes, ciphertext_b64: str) -> Envelope:
    iv_b64 = b64encode_text(iv)
    return Envelope(iv=iv_b64, value=ciphertext_b64,
                    mac=compute_mac(secret, iv_b64, ciphertext_b64))


def serialize_outer(envelope: Envelope) -> str:
    return envelope.serialize_outer()


def _load_json_object(payload: Union[str, bytes]) -> dict:
    try:
        obj = json.loads(b64decode_text(payload).decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError, TypeError, AttributeError) as e:
        raise PayloadFormatError(INVALID_JSON) from e
    if not isinstance(obj, dict):
        raise PayloadFormatError(INVALID_JSON)
    return obj


def valid_payload(obj: dict) -> bool:
    """All three fields present as text, and iv decodes to one AES block."""
    if not all(isinstance(obj.get(field), str) for field in FIELDS):
        return False
    try:
        return len(b64decode_text(obj["iv"])) == IV_SIZE
    except (binascii.Error, ValueError):
        return False


def parse_outer(payload: Union[str, bytes], strict: bool = True) -> Envelope:
    """
    Decode an outer payload into an Envelope.

    strict=True also runs the structural check (fields present, 16-byte IV).
    strict=False only requires a JSON object; absent or non-text fields
    become empty strings and fail later, at the cipher.
    """
    obj = _load_json_object(payload)
    if strict:
        if not valid_payload(obj):
            raise PayloadFormatError(INVALID_PAYLOAD)
        return Envelope(iv=obj["iv"], value=obj["value"], mac=obj["mac"])

    fields = {f: obj.get(f) if isinstance(obj.get(f), str) else "" for f in FIELDS}
    missing = [f for f in FIELDS if not fields[f]]
    if missing:
        logger.debug(f"Unchecked envelope missing fields: {missing}")
    return Envelope(**fields)
