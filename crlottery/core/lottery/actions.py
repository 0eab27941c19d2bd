"""
Contract call payloads for the four user actions.

The engine never talks to a node; it builds the (function, args) pair a
wallet client submits.
"""

from dataclasses import dataclass
from typing import Tuple

from crlottery.crypto import hash_secret, hex_to_bytes, is_secret_format


@dataclass(frozen=True)
class ContractCall:
    """A write call to the lottery contract."""
    function_name: str
    args: Tuple


def _secret_bytes(secret: str) -> bytes:
    if not is_secret_format(secret):
        raise ValueError("secret must be 0x + 64 hex chars")
    return hex_to_bytes(secret)


def commit_ticket_call(lottery_id: int, ticket_index: int, ticket_secret: str) -> ContractCall:
    """commitTicket(lotteryId, ticketIndex, secretHash) - only the hash leaves the client."""
    _secret_bytes(ticket_secret)
    return ContractCall("commitTicket", (lottery_id, ticket_index, hash_secret(ticket_secret)))


def reveal_lottery_call(lottery_id: int, creator_secret: str) -> ContractCall:
    """revealLottery(lotteryId, secretBytes)"""
    return ContractCall("revealLottery", (lottery_id, _secret_bytes(creator_secret)))


def claim_prize_call(lottery_id: int, ticket_index: int, ticket_secret: str) -> ContractCall:
    """claimPrize(lotteryId, ticketIndex, secretBytes)"""
    return ContractCall("claimPrize", (lottery_id, ticket_index, _secret_bytes(ticket_secret)))


def refund_lottery_call(lottery_id: int) -> ContractCall:
    """refundLottery(lotteryId)"""
    return ContractCall("refundLottery", (lottery_id,))
