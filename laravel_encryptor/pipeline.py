"""
Shared encrypt/decrypt steps used by Encryptor and AsyncEncryptor.

Everything here is synchronous and CPU-bound. The two encryptors differ
only in where the IV's random bytes come from and in how failures are
reported, so they both drive this one pipeline.
"""

import binascii
import logging

from .core.envelope import Envelope, b64encode_text, encode_envelope
from .core.primitives import cipher_decrypt, cipher_encrypt
from .errors import CipherError, SerializationError, wrap_error
from .serializers import should_decode

logger = logging.getLogger(__name__)


class Pipeline:
    """Binds the secret, algorithm and serializer of one encryptor."""

    def __init__(self, config):
        self.secret       = config.secret
        self.algorithm    = config.algorithm()
        self.serializer   = config.serializer()
        self.random_bytes = config.random_bytes

    def to_plaintext(self, data, serialize: bool) -> str:
        """Text to encrypt: serialized, or numbers as decimal text."""
        if serialize:
            return self.serializer.encode(data)
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return str(data)
        if isinstance(data, str):
            return data
        raise SerializationError(
            f"Cannot encrypt {type(data).__name__} with serialization disabled."
        )

    def seal(self, plaintext: str, iv: bytes) -> str:
        """Encrypt, MAC and outer-encode. Returns the transport payload."""
        ciphertext = cipher_encrypt(self.algorithm, self.secret, iv,
                                    plaintext.encode("utf-8"))
        envelope = encode_envelope(self.secret, iv, b64encode_text(ciphertext))
        logger.debug(f"Sealed {len(ciphertext)}B with {self.algorithm.name}")
        return envelope.serialize_outer()

    def open(self, envelope: Envelope) -> str:
        """Decrypt an envelope's value with its own IV. No MAC check here."""
        try:
            iv         = envelope.iv_bytes()
            ciphertext = envelope.value_bytes()
        except (binascii.Error, ValueError) as e:
            raise CipherError(f"Envelope fields are not valid base64: {e}") from e
        plaintext = cipher_decrypt(self.algorithm, self.secret, iv, ciphertext)
        logger.debug(f"Opened {len(ciphertext)}B with {self.algorithm.name}")
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise wrap_error(e, CipherError, "Decrypted data is not valid UTF-8.") from e

    def from_plaintext(self, text: str, policy: str, flag=None):
        """Run the serializer's decode when the policy says so."""
        if should_decode(policy, flag, text, self.serializer):
            return self.serializer.decode(text)
        return text
