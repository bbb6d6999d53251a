"""
Error types for laravel_encryptor.

Every failure the codec reports is an EncryptorError subclass, so callers
can catch the whole family or a single kind.
"""

from typing import Optional, Type


class EncryptorError(Exception):
    """Base exception for all encryptor failures."""
    pass


class ConfigurationError(EncryptorError):
    """Raised when the key or key_length selector is unusable."""
    pass


class PayloadFormatError(EncryptorError):
    """Raised when an outer payload cannot be decoded or is structurally invalid."""
    pass


class AuthenticationError(EncryptorError):
    """Raised when the envelope MAC does not verify."""
    pass


class CipherError(EncryptorError):
    """Raised when the AES-CBC primitive fails (key size, IV size, padding)."""
    pass


class SerializationError(EncryptorError):
    """Raised when the serialization bridge cannot encode or decode a value."""
    pass


def wrap_error(exc: BaseException,
               kind: Type[EncryptorError] = EncryptorError,
               message: Optional[str] = None) -> EncryptorError:
    """
    Return exc unchanged if it is already an EncryptorError, otherwise a
    new `kind` built from it. Use as `raise wrap_error(e, Kind) from e`.
    """
    if isinstance(exc, EncryptorError):
        return exc
    return kind(message or str(exc) or exc.__class__.__name__)
