"""
Lottery Models - Typed views of the lottery contract's read surface.

Contract reads come back either as positional tuples or as keyed
objects depending on the ABI decoder. They are normalized here, once,
into frozen pydantic models; everything downstream sees one shape.

Positional layouts (as returned by the LotteryFactory contract):
    getLotteryStatus(id) -> (state, commitDeadline, revealTime, claimDeadline, createdAt)
    lotteries(id)        -> (creator, creatorCommitment, totalPrizePool, commitDeadline,
                             randomnessBlock, revealTime, claimDeadline, randomSeed,
                             state, createdAt, sponsoredGasPool, sponsoredGasUsed)
    tickets(id, index)   -> (holder, committed, redeemed, prizeAmount)
"""

from enum import IntEnum
from typing import Any, Mapping, Optional, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from crlottery.crypto import is_secret_format, is_valid_address

ZERO_ADDRESS = "0x" + "00" * 20
ZERO_HASH = "0x" + "00" * 32


class LotteryState(IntEnum):
    """On-chain lottery state. Only ever advances."""
    PENDING = 0
    COMMIT_OPEN = 1
    REVEAL_OPEN = 2
    FINALIZED = 3


def coerce_state(value: Any) -> Optional[LotteryState]:
    """Map a raw contract state value to LotteryState, or None if unknown."""
    if isinstance(value, bool):
        return None
    try:
        return LotteryState(int(value))
    except (TypeError, ValueError):
        return None


LOTTERY_STATUS_FIELDS = ("state", "commitDeadline", "revealTime", "claimDeadline", "createdAt")
LOTTERY_FIELDS = (
    "creator",
    "creatorCommitment",
    "totalPrizePool",
    "commitDeadline",
    "randomnessBlock",
    "revealTime",
    "claimDeadline",
    "randomSeed",
    "state",
    "createdAt",
    "sponsoredGasPool",
    "sponsoredGasUsed",
)


def _positional(data: Any, names: Sequence[str]) -> Any:
    """Turn a positional contract result into a keyed mapping."""
    if isinstance(data, (list, tuple)):
        return {name: value for name, value in zip(names, data)}
    return data


class Ticket(BaseModel):
    """One ticket of a lottery, as reported by the contract."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    lottery_id: int = Field(default=0, alias="lotteryId", ge=0)
    index: int = Field(default=0, ge=0)
    holder: str = ZERO_ADDRESS
    committed: bool = False
    redeemed: bool = False
    prize_amount: int = Field(default=0, alias="prizeAmount", ge=0)

    @model_validator(mode="after")
    def _redeemed_implies_committed(self):
        if self.redeemed and not self.committed:
            raise ValueError("ticket cannot be redeemed without being committed")
        return self

    @field_validator("holder")
    @classmethod
    def _check_holder(cls, v: str) -> str:
        if not is_valid_address(v):
            raise ValueError(f"invalid holder address: {v!r}")
        return v

    @classmethod
    def from_contract(cls, result: Any, lottery_id: int = 0, index: int = 0) -> "Ticket":
        """Normalize a tickets(id, index) result (tuple or mapping)."""
        data = _positional(result, ("holder", "committed", "redeemed", "prizeAmount"))
        if not isinstance(data, Mapping):
            raise ValueError(f"unexpected ticket result: {type(result).__name__}")
        return cls.model_validate({"lotteryId": lottery_id, "index": index, **data})


class Lottery(BaseModel):
    """A lottery, mirrored read-only from the contract."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(ge=0)
    creator: str = ZERO_ADDRESS
    creator_commitment: str = Field(default=ZERO_HASH, alias="creatorCommitment")
    total_prize_pool: int = Field(default=0, alias="totalPrizePool", ge=0)
    number_of_tickets: int = Field(default=0, alias="numberOfTickets", ge=0)
    commit_deadline: int = Field(alias="commitDeadline", ge=0)
    reveal_time: int = Field(alias="revealTime", ge=0)
    randomness_block: int = Field(default=0, alias="randomnessBlock", ge=0)  # 0 until commits close
    claim_deadline: int = Field(default=0, alias="claimDeadline", ge=0)
    state: LotteryState = LotteryState.PENDING
    created_at: int = Field(default=0, alias="createdAt", ge=0)
    random_seed: str = Field(default=ZERO_HASH, alias="randomSeed")
    sponsored_gas_pool: int = Field(default=0, alias="sponsoredGasPool", ge=0)
    sponsored_gas_used: int = Field(default=0, alias="sponsoredGasUsed", ge=0)

    @field_validator("creator_commitment", "random_seed")
    @classmethod
    def _check_hash(cls, v: str, info: ValidationInfo) -> str:
        if not is_secret_format(v):
            raise ValueError(f"{info.field_name} must be 0x + 64 hex chars")
        return v.lower()

    @field_validator("state", mode="before")
    @classmethod
    def _check_state(cls, v: Any) -> LotteryState:
        state = coerce_state(v)
        if state is None:
            raise ValueError(f"unknown lottery state: {v!r}")
        return state

    @property
    def has_claim_window(self) -> bool:
        return self.claim_deadline > 0

    @property
    def has_randomness_block(self) -> bool:
        return self.randomness_block > 0

    @classmethod
    def from_contract(
        cls,
        lottery_id: int,
        status: Any = None,
        details: Any = None,
        number_of_tickets: int = 0,
    ) -> "Lottery":
        """
        Normalize getLotteryStatus and lotteries() results into one model.

        Either read alone is enough for the deadlines and state; where
        both are given, getLotteryStatus wins.

        Args:
            lottery_id: Lottery ID the reads were made for
            status: getLotteryStatus tuple or mapping
            details: lotteries() tuple or mapping
            number_of_tickets: Length of getLotteryTickets()
        """
        status = _positional(status or {}, LOTTERY_STATUS_FIELDS)
        details = _positional(details or {}, LOTTERY_FIELDS)
        if not isinstance(status, Mapping) or not isinstance(details, Mapping):
            raise ValueError("unexpected lottery result shape")
        return cls.model_validate({
            **details,
            **status,
            "id": lottery_id,
            "numberOfTickets": number_of_tickets,
        })


class ChainState(BaseModel):
    """Everything one poll read from the contract."""
    model_config = ConfigDict(frozen=True)

    lottery: Lottery
    committed_count: int = Field(default=0, ge=0)
    ticket: Optional[Ticket] = None  # The viewer's ticket, if any
    randomness_block: Optional[int] = Field(default=None, ge=0)  # None until commits close

    @model_validator(mode="before")
    @classmethod
    def _randomness_block_from_lottery(cls, data: Any) -> Any:
        if not isinstance(data, Mapping) or data.get("randomness_block") is not None:
            return data
        lottery = data.get("lottery")
        if isinstance(lottery, Lottery):
            block = lottery.randomness_block
        elif isinstance(lottery, Mapping):
            block = lottery.get("randomnessBlock", lottery.get("randomness_block"))
        else:
            return data
        if block:
            data = {**data, "randomness_block": block}
        return data

    @model_validator(mode="after")
    def _ticket_belongs_to_lottery(self):
        if self.ticket is not None and self.ticket.lottery_id != self.lottery.id:
            raise ValueError("ticket belongs to a different lottery")
        return self
