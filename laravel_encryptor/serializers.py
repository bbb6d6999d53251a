"""
Serialization bridge
====================
Structured values are turned into text before encryption and back after
decryption. Laravel uses PHP's serialize() format, which is the default;
a JSON mode is available for peers that do not speak PHP.

Each serializer exposes:
    encode(value) -> str
    decode(text)  -> value          (SerializationError on malformed input)
    looks_serialized(text) -> bool

Two decode policies exist and are kept apart on purpose:
    EXPLICIT     the caller's serialize flag decides   (AsyncEncryptor)
    AUTO_DETECT  looks_serialized() decides            (Encryptor)

Dependencies: phpserialize >= 1.3
"""

import json
import re
from io import BytesIO

import phpserialize

from .errors import ConfigurationError, SerializationError

EXPLICIT    = "explicit"
AUTO_DETECT = "auto_detect"


class PhpSerializer:
    """PHP serialize()/unserialize() via phpserialize."""

    name = "php"

    # N; or a type tag followed by ':'  (s:, i:, b:, d:, a:, O:)
    _SERIALIZED = re.compile(r"^(?:N;|[sibdaO]:)")

    def encode(self, value) -> str:
        try:
            return phpserialize.dumps(value).decode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot PHP-serialize {type(value).__name__}: {e}") from e

    def decode(self, text: str):
        try:
            raw = text.encode("utf-8")
            fp = BytesIO(raw)
            data = phpserialize.load(fp, decode_strings=True,
                                     object_hook=phpserialize.phpobject)
        except (ValueError, TypeError, IndexError, AttributeError) as e:
            raise SerializationError(f"Malformed PHP serialized data: {e}") from e
        # a single value must account for the whole text
        if fp.tell() != len(raw):
            raise SerializationError(
                f"Trailing data after PHP serialized value at byte {fp.tell()}"
            )
        return _arrays_to_lists(data)

    def looks_serialized(self, text) -> bool:
        if not isinstance(text, str) or not self._SERIALIZED.match(text):
            return False
        try:
            self.decode(text)
        except SerializationError:
            return False
        return True


def _arrays_to_lists(data):
    """PHP arrays come back as dicts; non-empty 0..n-1 keyed ones become lists."""
    if isinstance(data, dict):
        data = {k: _arrays_to_lists(v) for k, v in data.items()}
        if data and list(data.keys()) == list(range(len(data))):
            return list(data.values())
    return data


class JsonSerializer:
    """
    Compact JSON. Only objects and arrays count as serialized text, so
    under AUTO_DETECT scalars come back as their JSON text: True -> "true",
    None -> "null", 1 -> "1". Use the EXPLICIT policy to get them back typed.
    """

    name = "json"

    def encode(self, value) -> str:
        try:
            return json.dumps(value, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot JSON-serialize {type(value).__name__}: {e}") from e

    def decode(self, text: str):
        try:
            return json.loads(text)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Malformed JSON data: {e}") from e

    def looks_serialized(self, text) -> bool:
        if not isinstance(text, str) or text.lstrip()[:1] not in ("{", "["):
            return False
        try:
            json.loads(text)
        except ValueError:
            return False
        return True


_SERIALIZERS = {
    PhpSerializer.name:  PhpSerializer,
    JsonSerializer.name: JsonSerializer,
}


def get_serializer(mode: str = "php"):
    try:
        return _SERIALIZERS[mode]()
    except (KeyError, TypeError):
        raise ConfigurationError(
            f"Unknown serialize_mode {mode!r}; expected one of {sorted(_SERIALIZERS)}."
        ) from None


def should_decode(policy: str, flag, text: str, serializer) -> bool:
    """Decide whether decrypted text goes through serializer.decode()."""
    if policy == AUTO_DETECT:
        return serializer.looks_serialized(text)
    return bool(flag)
