"""
State snapshots - one pure evaluation per poll tick.

An external scheduler reads the contract every few seconds and calls
`tick` with the fresh ChainState, the local clock and the latest block
number. The snapshot is rebuilt from scratch each time; stale snapshots
are simply dropped by the caller.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional

from crlottery.core.blocktime import BlockTimeEstimate
from crlottery.core.config import LotteryConfig
from crlottery.core.lottery.models import ChainState
from crlottery.core.lottery.state_machine import (
    Action,
    ActionCheck,
    BlockCountdown,
    Deadline,
    Phase,
    block_countdown,
    can_claim,
    can_commit,
    can_refund,
    can_reveal,
    classify_phase,
    countdowns,
    next_deadline,
    reveal_block_window,
)


@dataclass(frozen=True)
class StateSnapshot:
    """Phase, action eligibility and countdowns at one instant."""
    now: int
    block_number: Optional[int]
    phase: Phase
    checks: Mapping[Action, ActionCheck]
    countdowns: Mapping[str, int]
    next_deadline: Optional[Deadline] = None
    block_countdown: Optional[BlockCountdown] = None
    eligible_actions: FrozenSet[Action] = field(init=False)

    def __post_init__(self):
        # Read-only views over private copies
        object.__setattr__(self, "checks", MappingProxyType(dict(self.checks)))
        object.__setattr__(self, "countdowns", MappingProxyType(dict(self.countdowns)))
        eligible = frozenset(a for a, check in self.checks.items() if check.allowed)
        object.__setattr__(self, "eligible_actions", eligible)

    def can(self, action: Action) -> bool:
        return action in self.eligible_actions


def tick(
    now: int,
    block_number: Optional[int],
    chain_state: ChainState,
    estimate: Optional[BlockTimeEstimate] = None,
    config: Optional[LotteryConfig] = None,
) -> StateSnapshot:
    """
    Evaluate a lottery at `now`.

    Args:
        now: Local unix time in seconds
        block_number: Latest known block number, if any. With a known
            randomness block it also bounds the reveal window.
        chain_state: Normalized contract reads from this poll
        estimate: Block time estimate, needed for the block countdown
        config: Engine configuration (refund grace period)
    """
    config = config or LotteryConfig()
    lottery = chain_state.lottery
    ticket = chain_state.ticket
    grace = config.refund_grace_period

    checks = {
        Action.COMMIT: can_commit(lottery.state, now, lottery.commit_deadline, ticket),
        Action.REVEAL: reveal_block_window(
            can_reveal(
                lottery.state,
                now,
                lottery.commit_deadline,
                lottery.reveal_time,
                chain_state.committed_count,
            ),
            block_number,
            chain_state.randomness_block,
        ),
        Action.CLAIM: can_claim(lottery.state, now, lottery.claim_deadline, ticket),
        Action.REFUND: can_refund(lottery.state, now, lottery.reveal_time, grace),
    }

    blocks = None
    if (
        chain_state.randomness_block is not None
        and block_number is not None
        and estimate is not None
    ):
        blocks = block_countdown(chain_state.randomness_block, block_number, estimate)

    return StateSnapshot(
        now=now,
        block_number=block_number,
        phase=classify_phase(
            lottery.state,
            now,
            lottery.commit_deadline,
            lottery.reveal_time,
            lottery.claim_deadline,
        ),
        checks=checks,
        countdowns=countdowns(
            now,
            lottery.commit_deadline,
            lottery.reveal_time,
            lottery.claim_deadline,
            grace,
        ),
        next_deadline=next_deadline(
            lottery.state,
            now,
            lottery.commit_deadline,
            lottery.reveal_time,
            lottery.claim_deadline,
        ),
        block_countdown=blocks,
    )
