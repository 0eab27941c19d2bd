"""
Input Validation - Checks on lottery creation parameters and user input.

Every validator returns (is_valid, error_message) so callers can show
the specific problem instead of a generic failure.
"""

from typing import Any, List, Optional, Sequence, Tuple

from crlottery.crypto import is_secret_format

# =============================================================================
# Constants
# =============================================================================

# Maximum safe ETH amount (1 billion ETH in wei)
MAX_SAFE_WEI = 10**27

MAX_UINT64 = 2**64 - 1
MAX_UINT32 = 2**32 - 1
MAX_TICKETS = 10_000


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = 0,
    max_val: int = MAX_UINT64,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Returns:
        (is_valid, error_message)
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_hex_string(value: Any, name: str, expected_bytes: Optional[int] = None) -> Tuple[bool, str]:
    """
    Validate a hex string (with or without 0x prefix).

    Args:
        value: Value to validate
        name: Field name
        expected_bytes: Expected byte length when decoded
    """
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    hex_str = value[2:] if value.startswith("0x") else value

    if len(hex_str) % 2 != 0:
        return False, f"{name} has odd length, invalid hex"

    try:
        bytes.fromhex(hex_str)
    except ValueError:
        return False, f"{name} contains invalid hex characters"

    if expected_bytes is not None:
        actual_bytes = len(hex_str) // 2
        if actual_bytes != expected_bytes:
            return False, f"{name} must be {expected_bytes} bytes, got {actual_bytes}"

    return True, ""


def validate_secret(value: Any, name: str = "secret") -> Tuple[bool, str]:
    """A secret or commitment: 0x followed by 64 hex characters."""
    if not isinstance(value, str) or not is_secret_format(value.strip()):
        return False, f"Invalid {name} format. Expected 32-byte hex string (0x...)"
    return True, ""


def validate_lottery_id(value: Any) -> Tuple[bool, str]:
    return validate_integer(value, "lottery_id", 0, MAX_UINT64)


def validate_ticket_index(value: Any) -> Tuple[bool, str]:
    return validate_integer(value, "ticket_index", 0, MAX_UINT32)


# =============================================================================
# Lottery Creation
# =============================================================================


def validate_prize_sum(prizes: Sequence[int]) -> bool:
    """True if there is at least one prize and the prizes sum above zero."""
    return len(prizes) > 0 and sum(prizes) > 0


def validate_deadlines(commit_deadline: int, reveal_time: int) -> bool:
    """Commit deadline must come strictly before reveal time."""
    return commit_deadline < reveal_time


def validate_ticket_count(tickets: int, prizes: int) -> bool:
    """At least as many tickets as prizes, and at least one of each."""
    return tickets >= prizes and tickets > 0 and prizes > 0


def validate_eth_amount(amount: int) -> bool:
    """Amount in wei within (0, MAX_SAFE_WEI)."""
    return 0 < amount < MAX_SAFE_WEI


def validate_lottery_creation(
    prizes: List[int],
    ticket_count: int,
    commit_deadline: int,
    reveal_time: int,
    total_amount: int,
    now: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate all lottery creation parameters.

    Args:
        prizes: Prize amounts in wei
        ticket_count: Number of tickets to create
        commit_deadline: Unix seconds
        reveal_time: Unix seconds
        total_amount: Value sent with the creation call, in wei
        now: If given, the commit deadline must lie in the future

    Returns:
        (is_valid, error_message)
    """
    if any(isinstance(p, bool) or not isinstance(p, int) or p < 0 for p in prizes):
        return False, "Prizes must be non-negative integers"

    if not validate_prize_sum(prizes):
        return False, "Prize sum must be greater than zero"

    if not validate_ticket_count(ticket_count, len(prizes)):
        return False, "Number of tickets must be greater than or equal to number of prizes"

    if ticket_count > MAX_TICKETS:
        return False, f"Number of tickets must be <= {MAX_TICKETS}"

    if not validate_deadlines(commit_deadline, reveal_time):
        return False, "Commit deadline must be before reveal time"

    if now is not None and commit_deadline <= now:
        return False, "Commit deadline must be in the future"

    if not validate_eth_amount(total_amount):
        return False, "Total amount must be greater than zero and within safe bounds"

    if sum(prizes) != total_amount:
        return False, "Sum of prizes must equal total amount"

    return True, ""


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_integer",
    "validate_hex_string",
    "validate_secret",
    "validate_lottery_id",
    "validate_ticket_index",
    "validate_prize_sum",
    "validate_deadlines",
    "validate_ticket_count",
    "validate_eth_amount",
    "validate_lottery_creation",
    "MAX_SAFE_WEI",
    "MAX_TICKETS",
]
