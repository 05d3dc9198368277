import base64

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from aniverse.core.cipher import CipherCodec
from aniverse.core.exceptions import CipherInitFailure, CryptoFailure, InvalidPadding, MalformedCiphertext


KEY = "37911490979715163134003223491201"
IV = "3134003223491201"


class TestPadding:
    @pytest.mark.parametrize("length", [0, 1, 13, 15, 16, 17, 31, 32, 100])
    def test_pad_matches_pkcs7(self, length):
        # Arrange
        codec = CipherCodec()
        data = b"x" * length
        padder = padding.PKCS7(128).padder()
        expected = padder.update(data) + padder.finalize()

        # Act
        padded = codec.pad(data)

        # Assert
        assert padded == expected
        assert len(padded) % 16 == 0

    def test_block_aligned_input_gets_full_block(self):
        codec = CipherCodec()

        padded = codec.pad(b"a" * 16)

        assert padded == b"a" * 16 + b"\x10" * 16

    def test_unpad_strips_padding(self):
        codec = CipherCodec()

        assert codec.unpad(b"abc" + b"\x0d" * 13) == b"abc"

    @pytest.mark.parametrize(
        "data",
        [
            b"",
            b"abc\x00",
            b"ab\x05",
            b"a" * 14 + b"\x01\x02",
        ],
    )
    def test_unpad_rejects_invalid_padding(self, data):
        codec = CipherCodec()

        with pytest.raises(InvalidPadding):
            codec.unpad(data)


class TestEncryptDecrypt:
    @pytest.mark.parametrize("plaintext", ["", "hello", "a" * 16, "id=MTIz&alias=MTIz&token=ünïcode"])
    def test_round_trip(self, plaintext):
        # Arrange
        codec = CipherCodec()

        # Act
        ciphertext = codec.encrypt(plaintext, KEY, IV)
        decrypted = codec.decrypt(ciphertext, KEY, IV)

        # Assert
        assert decrypted == plaintext.encode("utf-8")

    def test_encryption_is_deterministic_for_fixed_key_and_iv(self):
        codec = CipherCodec()

        assert codec.encrypt("MTIz", KEY, IV) == codec.encrypt("MTIz", KEY, IV)

    def test_ciphertext_is_standard_aes_cbc(self):
        # Arrange
        codec = CipherCodec()
        padder = padding.PKCS7(128).padder()
        padded = padder.update(b"episode") + padder.finalize()
        encryptor = Cipher(algorithms.AES(KEY.encode()), modes.CBC(IV.encode())).encryptor()
        expected = base64.b64encode(encryptor.update(padded) + encryptor.finalize()).decode()

        # Act
        ciphertext = codec.encrypt("episode", KEY, IV)

        # Assert
        assert ciphertext == expected

    def test_accepts_bytes_key_and_iv(self):
        codec = CipherCodec()

        ciphertext = codec.encrypt(b"data", KEY.encode(), IV.encode())

        assert codec.decrypt(ciphertext, KEY, IV) == b"data"

    def test_decrypt_rejects_non_base64(self):
        codec = CipherCodec()

        with pytest.raises(MalformedCiphertext):
            codec.decrypt("not base64!!", KEY, IV)

    def test_decrypt_rejects_unaligned_ciphertext(self):
        codec = CipherCodec()
        ciphertext = base64.b64encode(b"x" * 15).decode()

        with pytest.raises(MalformedCiphertext):
            codec.decrypt(ciphertext, KEY, IV)

    def test_decrypt_rejects_empty_ciphertext(self):
        codec = CipherCodec()

        with pytest.raises(MalformedCiphertext):
            codec.decrypt("", KEY, IV)

    def test_decrypt_reports_bad_padding(self):
        # Arrange: a block whose plaintext ends in a zero byte cannot be validly padded
        encryptor = Cipher(algorithms.AES(KEY.encode()), modes.CBC(IV.encode())).encryptor()
        ciphertext = base64.b64encode(encryptor.update(b"\x00" * 16) + encryptor.finalize()).decode()

        # Act / Assert
        with pytest.raises(InvalidPadding):
            CipherCodec().decrypt(ciphertext, KEY, IV)

    @pytest.mark.parametrize(
        "key, iv",
        [
            ("short", IV),
            ("k" * 33, IV),
            (KEY, "short-iv"),
        ],
    )
    def test_rejects_bad_key_material(self, key, iv):
        codec = CipherCodec()

        with pytest.raises(CipherInitFailure):
            codec.encrypt("data", key, iv)

    def test_crypto_errors_share_a_base(self):
        assert issubclass(MalformedCiphertext, CryptoFailure)
        assert issubclass(InvalidPadding, CryptoFailure)
        assert issubclass(CipherInitFailure, CryptoFailure)
