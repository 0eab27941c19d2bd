"""
Ticket Codes - Portable encoding of a ticket's identity and secret.

A ticket code packs everything a participant needs to commit and later
claim a ticket into one short string:

    [1B version=0x01][8B lottery_id BE][4B ticket_index BE][32B secret]

The 45-byte payload is base58 encoded (Bitcoin alphabet), giving a
~61 character string that survives copy/paste and QR codes.

Participants also paste tickets as share URLs, bare query strings and
"{lottery}-{ticket}-{secret}" composites, so parsing tries each format
in turn. Parsing never raises: malformed input yields None, and the
user-facing `parse_ticket_input` pairs that with a specific message.
"""

import re
import struct
from typing import NamedTuple, Optional, Tuple
from urllib.parse import parse_qs, urlencode, urlsplit

import base58

from crlottery.crypto import HASH32_PATTERN, bytes_to_hex
from crlottery.utils.logger import get_logger

logger = get_logger("codec")


# =============================================================================
# Constants
# =============================================================================

TICKET_CODE_VERSION = 1
TICKET_CODE_SIZE = 45  # bytes
_LAYOUT = struct.Struct(">BQI32s")

MAX_LOTTERY_ID = 2**64 - 1
MAX_TICKET_INDEX = 2**32 - 1

# Compact codes are plain base58; anything with URL syntax is not one
COMPACT_MIN_LENGTH = 50
COMPACT_MAX_LENGTH = 70
URL_CHARACTERS = set("?&=:/")

_SECRET_HEX = re.compile(r"^(0x)?([0-9a-fA-F]{64})$")
_DECIMAL = re.compile(r"^[0-9]+$")

# User-facing parse messages
MSG_EMPTY_INPUT = "Please enter a ticket code"
MSG_TRANSACTION_HASH = (
    "This looks like a transaction hash, not a ticket code. "
    "Ticket codes are shared by the lottery creator."
)
MSG_UNRECOGNIZED = (
    "Unrecognized ticket code. Paste the full code, ticket link, "
    "or lottery-ticket-secret triple you received."
)


# =============================================================================
# Data Structures
# =============================================================================


class TicketData(NamedTuple):
    """A decoded ticket: identity plus its 0x-prefixed secret."""
    lottery_id: int
    ticket_index: int
    secret: str


# =============================================================================
# Binary Codec
# =============================================================================


def encode_ticket_code(lottery_id: int, ticket_index: int, secret: str) -> str:
    """
    Encode a ticket into its compact base58 code.

    Args:
        lottery_id: Lottery ID (u64)
        ticket_index: Ticket index within the lottery (u32)
        secret: 32-byte secret as hex (0x prefix optional)

    Returns:
        base58 ticket code

    Raises:
        ValueError: if any field is out of range
    """
    if not 0 <= lottery_id <= MAX_LOTTERY_ID:
        raise ValueError(f"lottery_id out of range: {lottery_id}")
    if not 0 <= ticket_index <= MAX_TICKET_INDEX:
        raise ValueError(f"ticket_index out of range: {ticket_index}")
    normalized = _normalize_secret(secret)
    if normalized is None:
        raise ValueError("secret must be 32 bytes of hex")

    payload = _LAYOUT.pack(
        TICKET_CODE_VERSION,
        lottery_id,
        ticket_index,
        bytes.fromhex(normalized[2:]),
    )
    return base58.b58encode(payload).decode("ascii")


def decode_ticket_code(code: str) -> Optional[TicketData]:
    """
    Decode a compact ticket code.

    Returns None for invalid base58, a payload that is not exactly
    45 bytes, or an unknown version byte.
    """
    if not isinstance(code, str) or not code:
        return None
    try:
        payload = base58.b58decode(code)
    except ValueError:
        return None

    if len(payload) != TICKET_CODE_SIZE:
        return None

    version, lottery_id, ticket_index, secret = _LAYOUT.unpack(payload)
    if version != TICKET_CODE_VERSION:
        return None

    return TicketData(lottery_id, ticket_index, bytes_to_hex(secret))


# =============================================================================
# Flexible Parsing
# =============================================================================


def _normalize_secret(value: str) -> Optional[str]:
    if not isinstance(value, str):
        return None
    match = _SECRET_HEX.fullmatch(value.strip())
    if not match:
        return None
    return "0x" + match.group(2).lower()


def _parse_uint(value: str, maximum: int) -> Optional[int]:
    value = value.strip()
    if len(value) > len(str(maximum)) or not _DECIMAL.fullmatch(value):
        return None
    number = int(value)
    return number if number <= maximum else None


def _from_fields(lottery: str, ticket: str, secret: str) -> Optional[TicketData]:
    lottery_id = _parse_uint(lottery, MAX_LOTTERY_ID)
    ticket_index = _parse_uint(ticket, MAX_TICKET_INDEX)
    normalized = _normalize_secret(secret)
    if lottery_id is None or ticket_index is None or normalized is None:
        return None
    return TicketData(lottery_id, ticket_index, normalized)


def _from_query(query: str) -> Optional[TicketData]:
    params = parse_qs(query.lstrip("?"))
    try:
        return _from_fields(
            params["lottery"][0],
            params["ticket"][0],
            params["secret"][0],
        )
    except (KeyError, IndexError):
        return None


def _parse_compact(text: str) -> Optional[TicketData]:
    if not COMPACT_MIN_LENGTH <= len(text) <= COMPACT_MAX_LENGTH:
        return None
    if URL_CHARACTERS & set(text):
        return None
    return decode_ticket_code(text)


def _parse_url(text: str) -> Optional[TicketData]:
    if "://" not in text:
        return None
    try:
        parts = urlsplit(text)
    except ValueError:
        return None
    if not parts.query:
        return None
    return _from_query(parts.query)


def _parse_query_string(text: str) -> Optional[TicketData]:
    if "=" not in text or "://" in text:
        return None
    return _from_query(text)


def _parse_composite(text: str) -> Optional[TicketData]:
    parts = text.split("-", 2)
    if len(parts) != 3:
        return None
    return _from_fields(*parts)


_PARSERS = (
    _parse_compact,
    _parse_url,
    _parse_query_string,
    _parse_composite,
)


def parse_flexible_input(text: str) -> Optional[TicketData]:
    """
    Parse a ticket from any supported format.

    Tried in order, first success wins:
    1. Compact base58 code
    2. Full URL with lottery/ticket/secret query params
    3. Bare query string with the same keys
    4. Composite "{lottery}-{ticket}-{secret}"
    """
    if not isinstance(text, str):
        return None
    text = text.strip()
    if not text:
        return None

    for parser in _PARSERS:
        ticket = parser(text)
        if ticket is not None:
            return ticket
    return None


def looks_like_transaction_hash(text: str) -> bool:
    """True for a 0x-prefixed 32-byte hex string."""
    return isinstance(text, str) and HASH32_PATTERN.fullmatch(text.strip()) is not None


def parse_ticket_input(text: str) -> Tuple[Optional[TicketData], str]:
    """
    Parse pasted or scanned ticket input for display to a user.

    Returns:
        (ticket, error_message) - error_message is empty on success
    """
    if not isinstance(text, str) or not text.strip():
        return None, MSG_EMPTY_INPUT

    if looks_like_transaction_hash(text):
        logger.debug("Rejected ticket input shaped like a transaction hash")
        return None, MSG_TRANSACTION_HASH

    ticket = parse_flexible_input(text)
    if ticket is None:
        return None, MSG_UNRECOGNIZED
    return ticket, ""


def to_compact_code(text: str) -> Optional[str]:
    """
    Canonicalize any accepted ticket format into its compact code.

    Compact codes are returned unchanged.
    """
    ticket = parse_flexible_input(text)
    if ticket is None:
        return None
    return encode_ticket_code(*ticket)


def build_ticket_url(base_url: str, lottery_id: int, ticket_index: int, secret: str) -> str:
    """Build the shareable ticket link with lottery/ticket/secret params."""
    normalized = _normalize_secret(secret)
    if normalized is None:
        raise ValueError("secret must be 32 bytes of hex")
    query = urlencode({
        "lottery": str(lottery_id),
        "ticket": str(ticket_index),
        "secret": normalized,
    })
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{query}"


__all__ = [
    "TicketData",
    "TICKET_CODE_VERSION",
    "TICKET_CODE_SIZE",
    "MAX_LOTTERY_ID",
    "MAX_TICKET_INDEX",
    "MSG_EMPTY_INPUT",
    "MSG_TRANSACTION_HASH",
    "MSG_UNRECOGNIZED",
    "encode_ticket_code",
    "decode_ticket_code",
    "parse_flexible_input",
    "parse_ticket_input",
    "looks_like_transaction_hash",
    "to_compact_code",
    "build_ticket_url",
]
