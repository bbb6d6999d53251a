"""
Key & algorithm resolution
==========================
Maps the `key_length` option onto an AES-CBC variant.

The selector is the *hex* length of the key, the convention used by the
Node and PHP ports of this format:

    32  ->  AES-128-CBC   (16-byte key)
    64  ->  AES-256-CBC   (32-byte key, default)

Only the selector is checked here. Whether the secret actually has the
right number of bytes is left to the cipher, which raises CipherError.
"""

from dataclasses import dataclass
from typing import Optional

from ..errors import ConfigurationError

DEFAULT_KEY_LENGTH = 64
VALID_KEY_LENGTHS  = (32, 64)

UNSUPPORTED_CIPHER = ("The only supported ciphers are AES-128-CBC and "
                      "AES-256-CBC with the correct key lengths.")


@dataclass(frozen=True)
class Algorithm:
    key_bits: int
    cipher: str = "aes"
    mode: str = "cbc"

    @property
    def name(self) -> str:
        return f"{self.cipher}-{self.key_bits}-{self.mode}"

    @property
    def key_size(self) -> int:
        """Expected secret length in bytes."""
        return self.key_bits // 8


def resolve_algorithm(key_length: Optional[int] = None) -> Algorithm:
    if key_length is None:
        key_length = DEFAULT_KEY_LENGTH
    # bool is an int subclass; True must not sneak through as a selector
    if isinstance(key_length, bool) or key_length not in VALID_KEY_LENGTHS:
        raise ConfigurationError(UNSUPPORTED_CIPHER)
    return Algorithm(key_bits=key_length * 4)
