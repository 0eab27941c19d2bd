"""
Ticket code module.

Compact base58 ticket codes and flexible parsing of pasted tickets.
"""

from crlottery.core.codec.ticket_code import (
    TicketData,
    TICKET_CODE_VERSION,
    TICKET_CODE_SIZE,
    MAX_LOTTERY_ID,
    MAX_TICKET_INDEX,
    MSG_EMPTY_INPUT,
    MSG_TRANSACTION_HASH,
    MSG_UNRECOGNIZED,
    encode_ticket_code,
    decode_ticket_code,
    parse_flexible_input,
    parse_ticket_input,
    looks_like_transaction_hash,
    to_compact_code,
    build_ticket_url,
)

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
