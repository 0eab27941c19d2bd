"""
Unit tests for per-tick state snapshots.
"""

import dataclasses

import pytest

from crlottery.core.blocktime import BlockTimeEstimate, Confidence
from crlottery.core.config import LotteryConfig
from crlottery.core.lottery import (
    Action,
    ChainState,
    Condition,
    Lottery,
    Phase,
    Ticket,
    tick,
)

T = 1_700_000_000
COMMIT = T
REVEAL = T + 3600


def chain_state(state, committed_count=0, ticket=None, randomness_block=None, claim_deadline=0):
    lottery = Lottery(
        id=5,
        commit_deadline=COMMIT,
        reveal_time=REVEAL,
        claim_deadline=claim_deadline,
        state=state,
    )
    return ChainState(
        lottery=lottery,
        committed_count=committed_count,
        ticket=ticket,
        randomness_block=randomness_block,
    )


class TestTick:
    """Tests for tick()."""

    def test_commit_period(self):
        snapshot = tick(COMMIT - 60, None, chain_state(1, ticket=Ticket(lottery_id=5)))
        assert snapshot.phase == Phase.COMMIT_OPEN
        assert snapshot.eligible_actions == frozenset({Action.COMMIT})
        assert snapshot.next_deadline.label == "Commit Deadline"
        assert snapshot.countdowns["commit"] == 60

    def test_awaiting_reveal(self):
        snapshot = tick(COMMIT + 1, None, chain_state(1, committed_count=2))
        assert snapshot.phase == Phase.AWAITING_REVEAL
        assert not snapshot.can(Action.REVEAL)
        assert snapshot.checks[Action.REVEAL].unmet == (Condition.REVEAL_TIME_REACHED,)
        assert snapshot.next_deadline.label == "Reveal Time"

    def test_reveal_ready(self):
        snapshot = tick(REVEAL, None, chain_state(1, committed_count=2))
        assert snapshot.can(Action.REVEAL)
        assert not snapshot.can(Action.REFUND)
        assert snapshot.next_deadline is None

    def test_refund_after_grace(self):
        snapshot = tick(REVEAL + 86400, None, chain_state(1, committed_count=0))
        assert snapshot.eligible_actions == frozenset({Action.REFUND})

    def test_configured_grace(self):
        config = LotteryConfig(refund_grace_period=60)
        snapshot = tick(REVEAL + 60, None, chain_state(1), config=config)
        assert snapshot.can(Action.REFUND)
        assert snapshot.countdowns["refund"] == 0

    def test_claim(self):
        winner = Ticket(lottery_id=5, committed=True, prize_amount=10)
        snapshot = tick(REVEAL + 10, None, chain_state(2, ticket=winner, claim_deadline=REVEAL + 100))
        assert snapshot.phase == Phase.REVEAL_OPEN
        assert snapshot.eligible_actions == frozenset({Action.CLAIM})
        assert snapshot.countdowns["claim"] == 90

    def test_block_countdown(self):
        estimate = BlockTimeEstimate(12.0, Confidence.HIGH, 20)
        snapshot = tick(REVEAL, 95, chain_state(2, randomness_block=100), estimate=estimate)
        assert snapshot.block_number == 95
        assert snapshot.block_countdown.blocks_remaining == 5
        assert snapshot.block_countdown.urgency == "red"
        assert snapshot.block_countdown.estimated_seconds == 60.0

    def test_block_countdown_needs_estimate(self):
        snapshot = tick(REVEAL, 95, chain_state(2, randomness_block=100))
        assert snapshot.block_countdown is None

    def test_snapshot_is_frozen(self):
        snapshot = tick(T, None, chain_state(0))
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.phase = Phase.FINALIZED

    def test_finalized_allows_nothing(self):
        snapshot = tick(REVEAL + 86400 * 10, None, chain_state(3, committed_count=4))
        assert snapshot.phase == Phase.FINALIZED
        assert snapshot.eligible_actions == frozenset()

    def test_checks_are_read_only(self):
        snapshot = tick(T, None, chain_state(1, ticket=Ticket(lottery_id=5)))
        with pytest.raises(TypeError):
            snapshot.checks[Action.REVEAL] = snapshot.checks[Action.COMMIT]
        with pytest.raises(TypeError):
            snapshot.countdowns["commit"] = 0


class TestRevealBlockWindow:
    """tick() bounds reveal by the randomness block when both blocks are known."""

    @pytest.mark.parametrize("block, allowed, unmet", [
        (99, False, Condition.RANDOMNESS_BLOCK_REACHED),
        (100, True, None),
        (356, True, None),
        (357, False, Condition.BLOCKHASH_AVAILABLE),
        (400, False, Condition.BLOCKHASH_AVAILABLE),
    ])
    def test_edges(self, block, allowed, unmet):
        state = chain_state(1, committed_count=2, randomness_block=100)
        snapshot = tick(REVEAL, block, state)
        assert snapshot.can(Action.REVEAL) is allowed
        if unmet is not None:
            assert snapshot.checks[Action.REVEAL].unmet == (unmet,)

    def test_not_reached_with_countdown(self):
        estimate = BlockTimeEstimate(12.0, Confidence.HIGH, 20)
        state = chain_state(1, committed_count=2, randomness_block=100)
        snapshot = tick(REVEAL, 95, state, estimate=estimate)
        assert not snapshot.can(Action.REVEAL)
        assert snapshot.block_countdown.blocks_remaining == 5

    def test_randomness_block_from_lottery(self):
        lottery = Lottery(
            id=5,
            commit_deadline=COMMIT,
            reveal_time=REVEAL,
            state=1,
            randomness_block=100,
        )
        snapshot = tick(REVEAL, 400, ChainState(lottery=lottery, committed_count=2))
        assert snapshot.checks[Action.REVEAL].fails(Condition.BLOCKHASH_AVAILABLE)

    def test_unknown_block_number(self):
        state = chain_state(1, committed_count=2, randomness_block=100)
        assert tick(REVEAL, None, state).can(Action.REVEAL)
