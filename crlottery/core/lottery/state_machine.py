"""
Lottery State Machine - Client-side phase and eligibility classification.

The lottery contract owns every state transition. This module only
classifies: given the contract-reported state, the deadlines and the
local clock, which phase is the lottery in and which actions would the
contract accept right now?

Lifecycle:
1. Pending        - created, not yet open
2. CommitOpen     - participants commit ticket hashes
3. AwaitingReveal - CommitOpen on-chain, but the commit deadline has passed
4. RevealOpen     - creator revealed; winners claim prizes
5. Finalized      - closed

Every check is advisory. A local "eligible" can still be rejected by the
contract (clock skew, a block not yet mined), so checks only ever err
toward denying, and a denial always names each unmet condition.

All functions are total: they never raise, and time deltas clamp at 0
since the wall clock is not assumed monotonic.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from crlottery.core.blocktime import BlockTimeEstimate, Confidence
from crlottery.core.config import REFUND_GRACE_PERIOD
from crlottery.core.lottery.models import LotteryState, Ticket, coerce_state


# =============================================================================
# Constants
# =============================================================================

# States in which the creator has not yet revealed
UNREVEALED_STATES = frozenset({LotteryState.PENDING, LotteryState.COMMIT_OPEN})

LABEL_COMMIT_DEADLINE = "Commit Deadline"
LABEL_REVEAL_TIME = "Reveal Time"
LABEL_CLAIM_DEADLINE = "Claim Deadline"

# Blocks after the randomness block whose hash the contract can still read
BLOCKHASH_WINDOW = 256

# Block countdown urgency thresholds (blocks remaining)
URGENT_BLOCKS = 5
WARNING_BLOCKS = 10


# =============================================================================
# Enums
# =============================================================================


class Phase(str, Enum):
    """Client-side lifecycle phase."""
    PENDING = "Pending"
    COMMIT_OPEN = "CommitOpen"
    AWAITING_REVEAL = "AwaitingReveal"
    REVEAL_OPEN = "RevealOpen"
    FINALIZED = "Finalized"


class Action(str, Enum):
    """Actions a user can submit to the contract."""
    COMMIT = "commit"
    REVEAL = "reveal"
    CLAIM = "claim"
    REFUND = "refund"


class Condition(str, Enum):
    """A precondition of an action, named by what must hold."""
    STATE_COMMIT_OPEN = "state_commit_open"
    STATE_UNREVEALED = "state_unrevealed"
    STATE_REVEALED = "state_revealed"
    BEFORE_COMMIT_DEADLINE = "before_commit_deadline"
    COMMIT_DEADLINE_PASSED = "commit_deadline_passed"
    REVEAL_TIME_REACHED = "reveal_time_reached"
    HAS_COMMITTED_TICKETS = "has_committed_tickets"
    REFUND_GRACE_ELAPSED = "refund_grace_elapsed"
    HAS_TICKET = "has_ticket"
    TICKET_NOT_COMMITTED = "ticket_not_committed"
    TICKET_COMMITTED = "ticket_committed"
    TICKET_NOT_REDEEMED = "ticket_not_redeemed"
    TICKET_HAS_PRIZE = "ticket_has_prize"
    BEFORE_CLAIM_DEADLINE = "before_claim_deadline"
    RANDOMNESS_BLOCK_REACHED = "randomness_block_reached"
    BLOCKHASH_AVAILABLE = "blockhash_available"


CONDITION_MESSAGES: Dict[Condition, str] = {
    Condition.STATE_COMMIT_OPEN: "Lottery is not accepting commits",
    Condition.STATE_UNREVEALED: "Lottery has already been revealed",
    Condition.STATE_REVEALED: "Lottery has not been revealed yet",
    Condition.BEFORE_COMMIT_DEADLINE: "Commit period has ended",
    Condition.COMMIT_DEADLINE_PASSED: "Commit period must be closed before revealing",
    Condition.REVEAL_TIME_REACHED: "Reveal time has not been reached",
    Condition.HAS_COMMITTED_TICKETS: "No tickets have been committed",
    Condition.REFUND_GRACE_ELAPSED: "Refund opens once the grace period after reveal time has passed",
    Condition.HAS_TICKET: "No ticket selected",
    Condition.TICKET_NOT_COMMITTED: "This ticket has already been committed",
    Condition.TICKET_COMMITTED: "You must commit before claiming",
    Condition.TICKET_NOT_REDEEMED: "Prize already claimed",
    Condition.TICKET_HAS_PRIZE: "This ticket did not win a prize",
    Condition.BEFORE_CLAIM_DEADLINE: "Claim deadline has passed",
    Condition.RANDOMNESS_BLOCK_REACHED: "Please wait for randomness block to arrive",
    Condition.BLOCKHASH_AVAILABLE: (
        "Blockhash has expired (more than 256 blocks old), the lottery can be refunded"
    ),
}


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class ActionCheck:
    """
    Result of an eligibility check.

    Truthy only when no condition is unmet.
    """
    action: Action
    unmet: Tuple[Condition, ...] = ()

    @property
    def allowed(self) -> bool:
        return not self.unmet

    def __bool__(self) -> bool:
        return self.allowed

    @property
    def reasons(self) -> Tuple[str, ...]:
        """User-facing message for each unmet condition."""
        return tuple(CONDITION_MESSAGES[c] for c in self.unmet)

    def fails(self, condition: Condition) -> bool:
        return condition in self.unmet


@dataclass(frozen=True)
class Deadline:
    """The next deadline a user should watch."""
    label: str
    timestamp: int


@dataclass(frozen=True)
class BlockCountdown:
    """Blocks remaining to a target block, with a time estimate."""
    target_block: int
    blocks_remaining: int
    estimated_seconds: float
    urgency: str  # "green", "yellow", "red"
    approximate: bool  # True when the block time estimate has low confidence

    @property
    def reached(self) -> bool:
        return self.blocks_remaining == 0


def _build(action: Action, conditions) -> ActionCheck:
    return ActionCheck(action=action, unmet=tuple(c for c, ok in conditions if not ok))


def _remaining(target: int, now: int) -> int:
    return max(0, int(target) - int(now))


# =============================================================================
# Phase Classification
# =============================================================================


def classify_phase(
    state: Any,
    now: int,
    commit_deadline: int,
    reveal_time: int = 0,
    claim_deadline: int = 0,
) -> Phase:
    """
    Classify a lottery's phase.

    The contract state decides first; only within CommitOpen does the
    clock split CommitOpen from AwaitingReveal. Unknown state values
    classify as Pending.
    """
    lottery_state = coerce_state(state)

    if lottery_state == LotteryState.COMMIT_OPEN:
        if now >= commit_deadline:
            return Phase.AWAITING_REVEAL
        return Phase.COMMIT_OPEN
    if lottery_state == LotteryState.REVEAL_OPEN:
        return Phase.REVEAL_OPEN
    if lottery_state == LotteryState.FINALIZED:
        return Phase.FINALIZED
    return Phase.PENDING


# =============================================================================
# Eligibility
# =============================================================================


def can_reveal(
    state: Any,
    now: int,
    commit_deadline: int,
    reveal_time: int,
    committed_count: int,
) -> ActionCheck:
    """
    Check whether the creator can reveal.

    All four conditions are required independently:
    unrevealed state, commit deadline passed, reveal time reached and at
    least one committed ticket.
    """
    return _build(Action.REVEAL, (
        (Condition.STATE_UNREVEALED, coerce_state(state) in UNREVEALED_STATES),
        (Condition.COMMIT_DEADLINE_PASSED, now >= commit_deadline),
        (Condition.REVEAL_TIME_REACHED, now >= reveal_time),
        (Condition.HAS_COMMITTED_TICKETS, committed_count >= 1),
    ))


def reveal_block_window(
    check: ActionCheck,
    current_block: Optional[int],
    randomness_block: Optional[int],
) -> ActionCheck:
    """
    Add the randomness block conditions to a reveal check.

    The contract reveals from the randomness block's hash, so it needs
    that block mined and still within the last BLOCKHASH_WINDOW blocks.
    Both bounds are inclusive. When either block number is unknown, or
    the randomness block is unset (0), the check is returned unchanged.
    """
    if current_block is None or not randomness_block:
        return check
    window = _build(check.action, (
        (Condition.RANDOMNESS_BLOCK_REACHED, current_block >= randomness_block),
        (Condition.BLOCKHASH_AVAILABLE, current_block <= randomness_block + BLOCKHASH_WINDOW),
    ))
    return ActionCheck(action=check.action, unmet=check.unmet + window.unmet)


def refund_available_at(reveal_time: int, grace_period: int = REFUND_GRACE_PERIOD) -> int:
    """Timestamp from which an unrevealed lottery can be refunded."""
    return int(reveal_time) + grace_period


def can_refund(
    state: Any,
    now: int,
    reveal_time: int,
    grace_period: int = REFUND_GRACE_PERIOD,
) -> ActionCheck:
    """
    Check whether an unrevealed lottery can be refunded.

    Protects participants when the creator never reveals (e.g. lost the
    secret): anyone may refund once the grace period after reveal time
    has fully elapsed.
    """
    return _build(Action.REFUND, (
        (Condition.STATE_UNREVEALED, coerce_state(state) in UNREVEALED_STATES),
        (Condition.REFUND_GRACE_ELAPSED, now >= refund_available_at(reveal_time, grace_period)),
    ))


def can_commit(
    state: Any,
    now: int,
    commit_deadline: int,
    ticket: Optional[Ticket],
) -> ActionCheck:
    """Check whether a ticket can be committed."""
    return _build(Action.COMMIT, (
        (Condition.STATE_COMMIT_OPEN, coerce_state(state) == LotteryState.COMMIT_OPEN),
        (Condition.BEFORE_COMMIT_DEADLINE, now < commit_deadline),
        (Condition.HAS_TICKET, ticket is not None),
        (Condition.TICKET_NOT_COMMITTED, ticket is None or not ticket.committed),
    ))


def can_claim(
    state: Any,
    now: int,
    claim_deadline: int,
    ticket: Optional[Ticket],
) -> ActionCheck:
    """
    Check whether a ticket's prize can be claimed.

    A claim deadline of 0 means the claim window is unbounded.
    """
    has_ticket = ticket is not None
    return _build(Action.CLAIM, (
        (Condition.STATE_REVEALED, coerce_state(state) == LotteryState.REVEAL_OPEN),
        (Condition.HAS_TICKET, has_ticket),
        (Condition.TICKET_COMMITTED, not has_ticket or ticket.committed),
        (Condition.TICKET_NOT_REDEEMED, not has_ticket or not ticket.redeemed),
        (Condition.TICKET_HAS_PRIZE, not has_ticket or ticket.prize_amount > 0),
        (Condition.BEFORE_CLAIM_DEADLINE, claim_deadline <= 0 or now < claim_deadline),
    ))


# =============================================================================
# Deadlines & Countdowns
# =============================================================================


def next_deadline(
    state: Any,
    now: int,
    commit_deadline: int,
    reveal_time: int,
    claim_deadline: int = 0,
) -> Optional[Deadline]:
    """
    The next upcoming deadline, in priority order:
    1. Commit deadline, while commits are open
    2. Reveal time, once commits closed and before reveal
    3. Claim deadline, once revealed and a claim window is set
    """
    lottery_state = coerce_state(state)

    if lottery_state in UNREVEALED_STATES:
        if now < commit_deadline:
            return Deadline(LABEL_COMMIT_DEADLINE, int(commit_deadline))
        if now < reveal_time:
            return Deadline(LABEL_REVEAL_TIME, int(reveal_time))
        return None

    if lottery_state == LotteryState.REVEAL_OPEN and claim_deadline > 0 and now < claim_deadline:
        return Deadline(LABEL_CLAIM_DEADLINE, int(claim_deadline))

    return None


def countdowns(
    now: int,
    commit_deadline: int,
    reveal_time: int,
    claim_deadline: int = 0,
    grace_period: int = REFUND_GRACE_PERIOD,
) -> Dict[str, int]:
    """Seconds remaining to each deadline, clamped at 0."""
    result = {
        "commit": _remaining(commit_deadline, now),
        "reveal": _remaining(reveal_time, now),
        "refund": _remaining(refund_available_at(reveal_time, grace_period), now),
    }
    if claim_deadline > 0:
        result["claim"] = _remaining(claim_deadline, now)
    return result


def block_countdown(
    target_block: int,
    current_block: int,
    estimate: BlockTimeEstimate,
) -> BlockCountdown:
    """Blocks remaining to `target_block` and the estimated time that takes."""
    blocks_remaining = _remaining(target_block, current_block)

    if blocks_remaining <= URGENT_BLOCKS:
        urgency = "red"
    elif blocks_remaining <= WARNING_BLOCKS:
        urgency = "yellow"
    else:
        urgency = "green"

    return BlockCountdown(
        target_block=int(target_block),
        blocks_remaining=blocks_remaining,
        estimated_seconds=estimate.seconds_for(blocks_remaining),
        urgency=urgency,
        approximate=estimate.confidence == Confidence.LOW,
    )
