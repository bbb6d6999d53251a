"""
AsyncEncryptor — deferred, coroutine-based encryptor
=====================================================
Every failure is delivered through the awaited coroutine. Configuration
problems found at construction are collected in `errors` and returned as
the failure of every encrypt()/decrypt() call before any crypto runs.

Serialization uses the EXPLICIT policy: the `serialize` argument (default
True) decides whether data is serialized before encryption and
unserialized after decryption.

decrypt() does NOT check the envelope structure or MAC before deciphering,
so malformed input fails at the cipher first, as it always has for
existing consumers. The MAC is checked only after the cipher succeeds
(AuthenticationError); pass verify=False to skip it entirely and get the
unchecked behaviour. Encryptor.decrypt() validates everything up front.
"""

import base64
import logging
from typing import List, Optional

from .config import EncryptorConfig, build_config
from .core.envelope import parse_outer
from .core.iv import derive_iv_async
from .core.mac import INVALID_MAC, verify_mac
from .core.primitives import secure_random_bytes_async
from .errors import AuthenticationError, ConfigurationError, EncryptorError
from .pipeline import Pipeline
from .serializers import EXPLICIT

logger = logging.getLogger(__name__)


class AsyncEncryptor:
    """Laravel-compatible AES-CBC + HMAC-SHA-256 encryption, asyncio flavour."""

    def __init__(self, config: Optional[EncryptorConfig] = None, **options):
        self.errors: List[EncryptorError] = []
        self.config: Optional[EncryptorConfig] = None
        self._pipeline: Optional[Pipeline] = None
        self._serialize = True
        try:
            config = build_config(config, **options)
            self._pipeline = Pipeline(config)
        except ConfigurationError as e:
            logger.info(f"AsyncEncryptor configuration error deferred: {e}")
            self.errors.append(e)
            return
        if config.serialize is not None:
            self._serialize = config.serialize
        self.config = config
        logger.info(f"AsyncEncryptor {self._pipeline.algorithm.name} | "
                    f"serialize_mode={config.serialize_mode}")

    def has_errors(self) -> bool:
        return len(self.errors) >= 1

    def _check(self) -> Pipeline:
        if self.has_errors():
            raise self.errors[0]
        return self._pipeline

    async def encrypt(self, data, serialize: Optional[bool] = None) -> str:
        """Encrypt data into an outer payload string."""
        pipeline = self._check()
        serialize = self._serialize if serialize is None else serialize
        plaintext = pipeline.to_plaintext(data, serialize)
        iv = await derive_iv_async(pipeline.random_bytes)
        return pipeline.seal(plaintext, iv)

    async def decrypt(self, payload, serialize: Optional[bool] = None, *,
                      verify: bool = True):
        """
        Decrypt an outer payload. With serialize (default True) the
        plaintext is unserialized; otherwise the text is returned as is.
        """
        pipeline = self._check()
        serialize = self._serialize if serialize is None else serialize
        envelope = parse_outer(payload, strict=False)
        text = pipeline.open(envelope)
        if verify and not verify_mac(pipeline.secret, envelope):
            raise AuthenticationError(INVALID_MAC)
        return pipeline.from_plaintext(text, EXPLICIT, serialize)

    @staticmethod
    async def generate_key(length: int = 32) -> str:
        """Base64 of `length` random bytes, generated off the event loop."""
        return base64.b64encode(await secure_random_bytes_async(length)).decode("ascii")

    def __repr__(self):
        if self.has_errors():
            return f"AsyncEncryptor(<error: {self.errors[0]}>)"
        return f"AsyncEncryptor({self._pipeline.algorithm.name})"
