"""
Encryptor — synchronous encryptor with structured errors
=========================================================
Raises immediately, always with an EncryptorError subclass:

    ConfigurationError   bad key / key_length            (at construction)
    PayloadFormatError   undecodable payload, bad envelope
    AuthenticationError  MAC mismatch
    CipherError          AES-CBC failure
    SerializationError   serializer failure

decrypt() validates in a fixed order before touching the cipher:
parse -> structure -> MAC -> decipher. The result is unserialized when
the serializer recognizes it (AUTO_DETECT policy), otherwise returned as
text; set serialize=True/False in the config to force either way.
"""

import logging
from typing import Optional

from .config import EncryptorConfig, build_config
from .core.envelope import parse_outer
from .core.iv import derive_iv
from .core.mac import INVALID_MAC, verify_mac
from .core.primitives import generate_random_key
from .errors import (AuthenticationError, CipherError, EncryptorError,
                     PayloadFormatError, wrap_error)
from .pipeline import Pipeline
from .serializers import AUTO_DETECT, EXPLICIT

logger = logging.getLogger(__name__)

NO_DATA = "You are calling Encryptor without data to cipher"


class Encryptor:
    """Laravel-compatible AES-CBC + HMAC-SHA-256 encryption, blocking."""

    def __init__(self, config: Optional[EncryptorConfig] = None, **options):
        self.config = build_config(config, **options)
        self._pipeline = Pipeline(self.config)
        if self.config.serialize is None:
            self._policy, self._flag = AUTO_DETECT, None
        else:
            self._policy, self._flag = EXPLICIT, self.config.serialize
        logger.info(f"Encryptor {self._pipeline.algorithm.name} | "
                    f"serialize_mode={self.config.serialize_mode} | policy={self._policy}")

    def prepare_data(self, data) -> str:
        """
        None and "" are rejected; int/float become decimal text; str passes
        through; anything else (dict, list, bool, ...) is serialized.
        With serialize=True in the config everything is serialized, so
        decrypt() can always unserialize.
        """
        if data is None or data == "":
            raise EncryptorError(NO_DATA)
        if self._policy == EXPLICIT and self._flag:
            return self._pipeline.to_plaintext(data, serialize=True)
        if isinstance(data, str):
            return data
        is_number = isinstance(data, (int, float)) and not isinstance(data, bool)
        return self._pipeline.to_plaintext(data, serialize=not is_number)

    def encrypt_sync(self, data) -> str:
        """Encrypt data into an outer payload string."""
        try:
            plaintext = self.prepare_data(data)
            iv = derive_iv(self._pipeline.random_bytes)
            return self._pipeline.seal(plaintext, iv)
        except EncryptorError:
            raise
        except Exception as e:
            raise wrap_error(e, CipherError) from e

    def decrypt(self, payload):
        """Validate and decrypt an outer payload."""
        try:
            envelope = parse_outer(payload, strict=True)
            if not verify_mac(self.config.secret, envelope):
                raise AuthenticationError(INVALID_MAC)
            text = self._pipeline.open(envelope)
            return self._pipeline.from_plaintext(text, self._policy, self._flag)
        except EncryptorError:
            raise
        except Exception as e:
            raise wrap_error(e, PayloadFormatError) from e

    decrypt_it = decrypt

    @staticmethod
    def generate_random_key(length: int = 32) -> str:
        return generate_random_key(length)

    def __repr__(self):
        return f"Encryptor({self._pipeline.algorithm.name})"
