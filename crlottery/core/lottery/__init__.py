"""
Lottery Module.

Client-side view of the commit-reveal lottery contract:
- Typed, normalized contract reads
- Phase classification and per-condition action eligibility
- Deadline and block countdowns
- Per-tick state snapshots
- Outward contract call payloads and rejection messages
"""

from crlottery.core.lottery.models import (
    LotteryState,
    Lottery,
    Ticket,
    ChainState,
    coerce_state,
)

from crlottery.core.lottery.state_machine import (
    BLOCKHASH_WINDOW,
    Phase,
    Action,
    Condition,
    ActionCheck,
    Deadline,
    BlockCountdown,
    CONDITION_MESSAGES,
    classify_phase,
    can_reveal,
    reveal_block_window,
    can_refund,
    can_commit,
    can_claim,
    refund_available_at,
    next_deadline,
    countdowns,
    block_countdown,
)

from crlottery.core.lottery.snapshot import StateSnapshot, tick

from crlottery.core.lottery.actions import (
    ContractCall,
    commit_ticket_call,
    reveal_lottery_call,
    claim_prize_call,
    refund_lottery_call,
)

from crlottery.core.lottery.contract_errors import (
    ContractError,
    find_contract_error,
    parse_contract_error,
    is_user_rejection,
    is_network_error,
    format_error_for_display,
    explain_rejection,
)

__all__ = [
    # Models
    "LotteryState",
    "Lottery",
    "Ticket",
    "ChainState",
    "coerce_state",
    # State machine
    "Phase",
    "Action",
    "Condition",
    "ActionCheck",
    "Deadline",
    "BlockCountdown",
    "BLOCKHASH_WINDOW",
    "CONDITION_MESSAGES",
    "classify_phase",
    "can_reveal",
    "reveal_block_window",
    "can_refund",
    "can_commit",
    "can_claim",
    "refund_available_at",
    "next_deadline",
    "countdowns",
    "block_countdown",
    # Snapshot
    "StateSnapshot",
    "tick",
    # Actions
    "ContractCall",
    "commit_ticket_call",
    "reveal_lottery_call",
    "claim_prize_call",
    "refund_lottery_call",
    # Errors
    "ContractError",
    "find_contract_error",
    "parse_contract_error",
    "is_user_rejection",
    "is_network_error",
    "format_error_for_display",
    "explain_rejection",
]
