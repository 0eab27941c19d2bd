"""
Unit tests for cryptographic primitives.

Tests cover:
1. Secret generation
2. Commitments (keccak256 over secret bytes)
3. Commitment validation
4. Hex and address helpers
"""

import pytest

from crlottery.crypto import (
    EntropyUnavailableError,
    bytes_to_hex,
    generate_secret,
    generate_ticket_secrets,
    hash_secret,
    hex_to_bytes,
    is_secret_format,
    is_valid_address,
    keccak256,
    sha256,
    validate_secret,
)

ZERO_SECRET = "0x" + "00" * 32
# keccak256 of 32 zero bytes
ZERO_SECRET_HASH = "0x290decd9548b62a8d60345a988386fc84ba6bc95484008f6362f93160ef3e563"


class TestSecretGeneration:
    """Tests for secret generation."""

    def test_secret_format(self):
        """Secret should be 0x + 64 lowercase hex chars."""
        s = generate_secret()
        assert is_secret_format(s)
        assert s == s.lower()

    def test_secrets_are_unique(self):
        assert generate_secret() != generate_secret()

    def test_ticket_secrets_count(self):
        secrets_ = generate_ticket_secrets(5)
        assert len(secrets_) == 5
        assert len(set(secrets_)) == 5

    def test_zero_ticket_secrets(self):
        assert generate_ticket_secrets(0) == []

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            generate_ticket_secrets(-1)

    def test_missing_entropy_source(self, monkeypatch):
        """No CSPRNG should surface as EntropyUnavailableError, never a weak secret."""
        def no_entropy(n):
            raise NotImplementedError

        monkeypatch.setattr("crlottery.crypto.secrets.token_bytes", no_entropy)
        with pytest.raises(EntropyUnavailableError):
            generate_secret()


class TestCommitments:
    """Tests for hash_secret."""

    def test_known_commitment(self):
        assert hash_secret(ZERO_SECRET) == ZERO_SECRET_HASH

    def test_hash_is_over_bytes_not_text(self):
        s = generate_secret()
        assert hash_secret(s) == bytes_to_hex(keccak256(hex_to_bytes(s)))
        assert hash_secret(s) != bytes_to_hex(keccak256(s.encode()))

    def test_deterministic(self):
        s = generate_secret()
        assert hash_secret(s) == hash_secret(s)

    def test_accepts_uppercase_hex(self):
        assert hash_secret("0x" + "AB" * 32) == hash_secret("0x" + "ab" * 32)

    def test_invalid_hex_raises(self):
        with pytest.raises(ValueError):
            hash_secret("0xzz")


class TestValidateSecret:
    """Tests for validate_secret."""

    def test_matching_secret(self):
        s = generate_secret()
        assert validate_secret(s, hash_secret(s)) is True

    def test_case_insensitive_commitment(self):
        assert validate_secret(ZERO_SECRET, ZERO_SECRET_HASH.upper().replace("0X", "0x"))

    def test_wrong_secret(self):
        assert validate_secret(generate_secret(), ZERO_SECRET_HASH) is False

    def test_malformed_secret_returns_false(self):
        assert validate_secret("not hex", ZERO_SECRET_HASH) is False
        assert validate_secret(None, ZERO_SECRET_HASH) is False


class TestHelpers:
    """Tests for hex and address helpers."""

    def test_hex_roundtrip(self):
        data = b"\x00\x01\xfe\xff"
        assert hex_to_bytes(bytes_to_hex(data)) == data
        assert hex_to_bytes("0001feff") == data

    def test_sha256_length(self):
        assert len(sha256(b"lottery")) == 32

    def test_secret_format(self):
        assert is_secret_format(ZERO_SECRET)
        assert not is_secret_format("00" * 32)
        assert not is_secret_format("0x" + "00" * 31)
        assert not is_secret_format(123)

    def test_secret_format_rejects_trailing_newline(self):
        assert not is_secret_format(ZERO_SECRET + "\n")

    def test_address_format(self):
        assert is_valid_address("0x" + "ab" * 20)
        assert not is_valid_address("0x" + "ab" * 19)
        assert not is_valid_address("ab" * 21)
        assert not is_valid_address("0x" + "zz" * 20)
