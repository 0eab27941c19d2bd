"""
Unit tests for ticket codes and flexible ticket input parsing.
"""

import struct

import base58
import pytest

from crlottery.core.codec import (
    MSG_EMPTY_INPUT,
    MSG_TRANSACTION_HASH,
    MSG_UNRECOGNIZED,
    TicketData,
    build_ticket_url,
    decode_ticket_code,
    encode_ticket_code,
    parse_flexible_input,
    parse_ticket_input,
    to_compact_code,
)
from crlottery.crypto import generate_secret

SECRET = "0x" + "11" * 31 + "22"
EXPECTED = TicketData(42, 3, SECRET)


class TestEncodeDecode:
    """Tests for the binary codec."""

    def test_roundtrip(self):
        code = encode_ticket_code(42, 3, SECRET)
        assert decode_ticket_code(code) == EXPECTED

    def test_roundtrip_extremes(self):
        s = generate_secret()
        code = encode_ticket_code(2**64 - 1, 2**32 - 1, s)
        assert decode_ticket_code(code) == TicketData(2**64 - 1, 2**32 - 1, s)

    def test_code_length(self):
        """A 45-byte payload starting with 0x01 encodes to about 61 chars."""
        code = encode_ticket_code(42, 3, SECRET)
        assert 58 <= len(code) <= 61

    def test_secret_normalized_to_lowercase(self):
        code = encode_ticket_code(1, 0, SECRET.upper().replace("0X", "0x"))
        assert decode_ticket_code(code).secret == SECRET

    def test_secret_without_prefix(self):
        assert encode_ticket_code(42, 3, SECRET[2:]) == encode_ticket_code(42, 3, SECRET)

    @pytest.mark.parametrize("lottery_id, ticket_index", [(-1, 0), (2**64, 0), (0, -1), (0, 2**32)])
    def test_out_of_range_rejected(self, lottery_id, ticket_index):
        with pytest.raises(ValueError):
            encode_ticket_code(lottery_id, ticket_index, SECRET)

    def test_bad_secret_rejected(self):
        with pytest.raises(ValueError):
            encode_ticket_code(1, 0, "0x1234")


class TestDecodeRejection:
    """Malformed codes decode to None."""

    def test_invalid_base58(self):
        assert decode_ticket_code("0OIl") is None

    def test_wrong_length(self):
        assert decode_ticket_code(base58.b58encode(b"\x01" * 44).decode()) is None
        assert decode_ticket_code(base58.b58encode(b"\x01" * 46).decode()) is None

    def test_wrong_version(self):
        payload = struct.pack(">BQI32s", 2, 42, 3, bytes.fromhex(SECRET[2:]))
        assert decode_ticket_code(base58.b58encode(payload).decode()) is None

    def test_empty(self):
        assert decode_ticket_code("") is None
        assert decode_ticket_code(None) is None


class TestFlexibleInput:
    """Each accepted format parses to the same ticket."""

    def test_compact(self):
        code = encode_ticket_code(42, 3, SECRET)
        assert parse_flexible_input(f"  {code}\n") == EXPECTED

    def test_url(self):
        url = f"https://lottery.example/claim?lottery=42&ticket=3&secret={SECRET}"
        assert parse_flexible_input(url) == EXPECTED

    def test_query_string(self):
        assert parse_flexible_input(f"lottery=42&ticket=3&secret={SECRET}") == EXPECTED
        assert parse_flexible_input(f"?lottery=42&ticket=3&secret={SECRET}") == EXPECTED

    def test_composite(self):
        assert parse_flexible_input(f"42-3-{SECRET}") == EXPECTED
        assert parse_flexible_input(f"42-3-{SECRET[2:]}") == EXPECTED

    def test_url_missing_param(self):
        assert parse_flexible_input(f"https://x.org/claim?lottery=42&secret={SECRET}") is None

    def test_composite_bad_numbers(self):
        assert parse_flexible_input(f"x-3-{SECRET}") is None
        assert parse_flexible_input(f"-1-3-{SECRET}") is None
        assert parse_flexible_input(f"{'9' * 400}-3-{SECRET}") is None

    def test_garbage(self):
        assert parse_flexible_input("hello world") is None
        assert parse_flexible_input("") is None


class TestParseTicketInput:
    """User-facing parse results."""

    def test_success(self):
        ticket, err = parse_ticket_input(f"42-3-{SECRET}")
        assert ticket == EXPECTED
        assert err == ""

    def test_empty(self):
        assert parse_ticket_input("   ") == (None, MSG_EMPTY_INPUT)

    def test_transaction_hash(self):
        ticket, err = parse_ticket_input("0x" + "ab" * 32)
        assert ticket is None
        assert err == MSG_TRANSACTION_HASH
        assert "transaction hash" in err

    def test_unrecognized(self):
        assert parse_ticket_input("nope") == (None, MSG_UNRECOGNIZED)


class TestSharing:
    """Canonical codes and share links."""

    def test_to_compact_code_from_url(self):
        url = f"https://x.org/claim?lottery=42&ticket=3&secret={SECRET}"
        assert to_compact_code(url) == encode_ticket_code(42, 3, SECRET)

    def test_to_compact_code_keeps_compact(self):
        code = encode_ticket_code(42, 3, SECRET)
        assert to_compact_code(code) == code

    def test_to_compact_code_invalid(self):
        assert to_compact_code("nope") is None

    def test_build_ticket_url(self):
        url = build_ticket_url("https://x.org/claim", 42, 3, SECRET)
        assert url == f"https://x.org/claim?lottery=42&ticket=3&secret={SECRET}"
        assert parse_flexible_input(url) == EXPECTED

    def test_build_ticket_url_existing_query(self):
        url = build_ticket_url("https://x.org/claim?ref=a", 42, 3, SECRET)
        assert url.startswith("https://x.org/claim?ref=a&lottery=42")

    def test_build_ticket_url_bad_secret(self):
        with pytest.raises(ValueError):
            build_ticket_url("https://x.org", 1, 0, "0x12")
