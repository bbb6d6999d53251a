"""
Encryptor configuration.

Option names follow the other ports of the format so the same settings
can be shared between runtimes:

    key             base64 application key (required)
    laravel_key     deprecated alias for key
    key_length      32 -> AES-128-CBC, 64 -> AES-256-CBC (default)
    random_bytes    random bytes fed into the IV, default 8 (None or 0 -> 8)
    serialize_mode  "php" (default) or "json"
    serialize       True / False, or None for each encryptor's own default
"""

import base64
import binascii
import logging
import warnings
from dataclasses import dataclass, field
from typing import Optional

from .core.algorithm import Algorithm, resolve_algorithm
from .core.iv import DEFAULT_RANDOM_BYTES
from .errors import ConfigurationError
from .serializers import get_serializer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncryptorConfig:
    key: str
    key_length: Optional[int] = None
    random_bytes: int = DEFAULT_RANDOM_BYTES
    serialize_mode: str = "php"
    serialize: Optional[bool] = None
    secret: bytes = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.key:
            raise ConfigurationError("An encryption key is required.")
        try:
            secret = base64.b64decode(self.key.removeprefix("base64:"), validate=True)
        except (binascii.Error, ValueError, TypeError, AttributeError) as e:
            raise ConfigurationError("The encryption key is not valid base64.") from e
        object.__setattr__(self, "secret", secret)

        if not self.random_bytes:
            object.__setattr__(self, "random_bytes", DEFAULT_RANDOM_BYTES)
        elif isinstance(self.random_bytes, bool) or not isinstance(self.random_bytes, int) \
                or self.random_bytes < 0:
            raise ConfigurationError(
                f"random_bytes must be a positive integer, got {self.random_bytes!r}."
            )

    @classmethod
    def from_options(cls, key: Optional[str] = None,
                     laravel_key: Optional[str] = None,
                     **options) -> "EncryptorConfig":
        if laravel_key:
            warnings.warn("laravel_key is deprecated, please use key instead",
                          DeprecationWarning, stacklevel=3)
            logger.warning("laravel_key is deprecated, please use key instead")
        return cls(key=laravel_key or key, **options)

    def algorithm(self) -> Algorithm:
        """Resolve key_length; raises ConfigurationError if unsupported."""
        return resolve_algorithm(self.key_length)

    def serializer(self):
        return get_serializer(self.serialize_mode)


def build_config(config: Optional[EncryptorConfig] = None, **options) -> EncryptorConfig:
    if config is not None:
        if options:
            raise TypeError("Pass either an EncryptorConfig or keyword options, not both.")
        return config
    return EncryptorConfig.from_options(**options)
