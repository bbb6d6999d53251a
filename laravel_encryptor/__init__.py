"""
laravel_encryptor
=================
Laravel-compatible authenticated encryption for Python.

Produces and consumes the payload Laravel's Encrypter uses, so values
encrypted in PHP, Node or Python decrypt on any of the others:

    base64( {"iv": base64(iv), "value": base64(AES-CBC), "mac": hex(HMAC-SHA-256)} )

Encryptors:
    Encryptor       blocking, validates structure + MAC before decrypting
    AsyncEncryptor  asyncio coroutines, failures delivered when awaited

Ciphers: AES-128-CBC (key_length=32) and AES-256-CBC (key_length=64, default).
"""

__version__ = "1.0.0"

from .async_encryptor     import AsyncEncryptor
from .config              import EncryptorConfig
from .core.algorithm      import Algorithm, resolve_algorithm
from .core.envelope       import Envelope, parse_outer, serialize_outer
from .core.primitives     import generate_random_key
from .encryptor           import Encryptor
from .errors              import (AuthenticationError, CipherError,
                                  ConfigurationError, EncryptorError,
                                  PayloadFormatError, SerializationError)
from .serializers         import JsonSerializer, PhpSerializer

__all__ = [
    "Encryptor",
    "AsyncEncryptor",
    "EncryptorConfig",
    "Algorithm",
    "resolve_algorithm",
    "Envelope",
    "parse_outer",
    "serialize_outer",
    "generate_random_key",
    "PhpSerializer",
    "JsonSerializer",
    "EncryptorError",
    "ConfigurationError",
    "PayloadFormatError",
    "AuthenticationError",
    "CipherError",
    "SerializationError",
]
