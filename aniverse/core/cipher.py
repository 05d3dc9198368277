"""
Cipher Codec - AES-CBC encryption used by streaming providers.

Providers hide their playback parameters behind AES-CBC with fixed keys.
This module performs the block transform and the byte padding; the keys
and the initialization vector are always supplied by the caller.
"""

import base64
import binascii
from typing import Union

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from aniverse.core.exceptions import CipherInitFailure, InvalidPadding, MalformedCiphertext


BLOCK_SIZE = 16
VALID_KEY_SIZES = (16, 24, 32)

BytesLike = Union[bytes, bytearray, str]


def _to_bytes(value: BytesLike) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


class CipherCodec:
    """Block-cipher encrypt/decrypt with strict padding validation."""

    def __init__(self, block_size: int = BLOCK_SIZE):
        self.block_size = block_size

    def pad(self, data: bytes) -> bytes:
        """
        Pad data to a whole number of blocks.

        Every pad byte carries the pad length; block-aligned input
        receives a full extra block.
        """
        pad_length = self.block_size - (len(data) % self.block_size)
        return bytes(data) + bytes([pad_length]) * pad_length

    def unpad(self, data: bytes) -> bytes:
        """
        Strip and validate padding.

        Raises:
            InvalidPadding: If the buffer is empty or the trailing bytes
                do not form a valid pad
        """
        if not data:
            raise InvalidPadding("Cannot unpad empty data")

        pad_length = data[-1]
        if pad_length == 0 or pad_length > len(data):
            raise InvalidPadding(f"Invalid pad length {pad_length} for {len(data)} bytes")

        if data[-pad_length:] != bytes([pad_length]) * pad_length:
            raise InvalidPadding("Invalid padding bytes")

        return data[:-pad_length]

    def _cipher(self, key: BytesLike, iv: BytesLike) -> Cipher:
        key_bytes = _to_bytes(key)
        iv_bytes = _to_bytes(iv)

        if len(key_bytes) not in VALID_KEY_SIZES:
            raise CipherInitFailure(f"Invalid key length: {len(key_bytes)} bytes")
        if len(iv_bytes) != self.block_size:
            raise CipherInitFailure(f"Invalid IV length: {len(iv_bytes)} bytes, expected {self.block_size}")

        try:
            return Cipher(algorithms.AES(key_bytes), modes.CBC(iv_bytes))
        except ValueError as e:
            raise CipherInitFailure(f"Cipher initialization failed: {e}") from e

    def encrypt(self, plaintext: BytesLike, key: BytesLike, iv: BytesLike) -> str:
        """
        Encrypt plaintext and return base64 text.

        Args:
            plaintext: Data to encrypt (str is encoded as UTF-8)
            key: AES key of 16, 24 or 32 bytes
            iv: Initialization vector of one block

        Returns:
            Base64-encoded ciphertext
        """
        encryptor = self._cipher(key, iv).encryptor()
        ciphertext = encryptor.update(self.pad(_to_bytes(plaintext))) + encryptor.finalize()
        return base64.b64encode(ciphertext).decode("ascii")

    def decrypt(self, ciphertext_b64: str, key: BytesLike, iv: BytesLike) -> bytes:
        """
        Decrypt base64 ciphertext and strip its padding.

        Args:
            ciphertext_b64: Base64-encoded ciphertext
            key: AES key of 16, 24 or 32 bytes
            iv: Initialization vector of one block

        Returns:
            Plaintext bytes

        Raises:
            MalformedCiphertext: If the input is not base64 or not block-aligned
            InvalidPadding: If the decrypted data is not validly padded
            CipherInitFailure: If key or IV have the wrong length
        """
        try:
            ciphertext = base64.b64decode(ciphertext_b64.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise MalformedCiphertext(f"Base64 decode failed: {e}") from e

        if not ciphertext or len(ciphertext) % self.block_size != 0:
            raise MalformedCiphertext(
                f"Ciphertext length {len(ciphertext)} is not a multiple of the block size"
            )

        decryptor = self._cipher(key, iv).decryptor()
        plaintext = decryptor.update(ciphertext) + decryptor.finalize()
        return self.unpad(plaintext)


# Export codec
__all__ = ["CipherCodec", "BLOCK_SIZE"]
