"""
Cryptographic primitives for crlottery.

This module provides the commitment engine of the commit-reveal lottery:
- Secret generation from the OS CSPRNG
- Keccak-256 commitments over raw secret bytes
- Commitment validation for pasted or restored secrets

Design Notes:
-------------
Commitments are keccak256(secret_bytes), matching what the lottery
contract computes on-chain for both the creator secret and ticket secrets.
Secrets and commitments travel as 0x-prefixed lowercase hex.
"""

import hashlib
import re
import secrets
from typing import List

from Crypto.Hash import keccak

from crlottery.utils.logger import get_logger

logger = get_logger("crypto")


# =============================================================================
# Constants
# =============================================================================

SECRET_SIZE = 32  # bytes
COMMITMENT_SIZE = 32  # bytes

HASH32_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


class EntropyUnavailableError(RuntimeError):
    """No cryptographically secure random source is available."""


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: secret commitments, matching the contract's keccak256.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def sha256(data: bytes) -> bytes:
    """Compute SHA-256 hash."""
    return hashlib.sha256(data).digest()


# =============================================================================
# Utility Functions
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)


def is_valid_address(address: str) -> bool:
    """Check if string is a valid address format."""
    if not isinstance(address, str) or not address.startswith("0x"):
        return False
    if len(address) != 42:  # 0x + 40 hex chars
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def is_secret_format(value: str) -> bool:
    """True for a 0x-prefixed 32-byte hex string (secret or commitment)."""
    return isinstance(value, str) and HASH32_PATTERN.fullmatch(value) is not None


# =============================================================================
# Commitment Engine
# =============================================================================


def generate_secret() -> str:
    """
    Generate a cryptographically secure random secret (32 bytes).

    Returns:
        0x-prefixed hex string

    Raises:
        EntropyUnavailableError: if the OS has no secure random source
    """
    try:
        raw = secrets.token_bytes(SECRET_SIZE)
    except NotImplementedError as exc:
        raise EntropyUnavailableError("No secure random number generator available") from exc
    return bytes_to_hex(raw)


def hash_secret(secret: str) -> str:
    """
    Hash a secret using keccak256.

    The hash is taken over the raw bytes the hex string encodes, not over
    its text.

    Args:
        secret: 0x-prefixed hex string

    Returns:
        0x-prefixed keccak256 commitment

    Raises:
        ValueError: if the secret is not valid hex
    """
    return bytes_to_hex(keccak256(hex_to_bytes(secret)))


def validate_secret(secret: str, commitment: str) -> bool:
    """
    Check that a secret hashes to the expected commitment.

    Comparison is case-insensitive. Malformed input returns False.
    """
    if not isinstance(secret, str) or not isinstance(commitment, str):
        return False
    try:
        return hash_secret(secret).lower() == commitment.lower()
    except ValueError:
        return False


def generate_ticket_secrets(count: int) -> List[str]:
    """
    Generate an array of independent ticket secrets.

    Args:
        count: Number of ticket secrets to generate
    """
    if count < 0:
        raise ValueError("count must be non-negative")
    ticket_secrets = [generate_secret() for _ in range(count)]
    logger.debug(f"Generated {count} ticket secrets")
    return ticket_secrets


__all__ = [
    "SECRET_SIZE",
    "COMMITMENT_SIZE",
    "HASH32_PATTERN",
    "EntropyUnavailableError",
    "keccak256",
    "sha256",
    "bytes_to_hex",
    "hex_to_bytes",
    "is_valid_address",
    "is_secret_format",
    "generate_secret",
    "hash_secret",
    "validate_secret",
    "generate_ticket_secrets",
]
