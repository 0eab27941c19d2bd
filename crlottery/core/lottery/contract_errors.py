"""
Contract rejection handling.

Maps the lottery contract's custom errors and common wallet failures to
user-facing messages. The contract is authoritative: when it rejects an
action the local checks called eligible, its message is what the user
sees, and the disagreement is logged.
"""

from enum import Enum
from typing import Optional, Tuple

from crlottery.core.lottery.state_machine import ActionCheck
from crlottery.utils.logger import get_logger

logger = get_logger("lottery.errors")


class ContractError(str, Enum):
    """Custom errors raised by the LotteryFactory contract."""
    COMMIT_DEADLINE_PASSED = "CommitDeadlinePassed"
    COMMIT_PERIOD_NOT_CLOSED = "CommitPeriodNotClosed"
    RANDOMNESS_BLOCK_NOT_REACHED = "RandomnessBlockNotReached"
    BLOCKHASH_EXPIRED = "BlockhashExpired"
    BLOCKHASH_UNAVAILABLE = "BlockhashUnavailable"
    INVALID_CREATOR_SECRET = "InvalidCreatorSecret"
    TICKET_NOT_COMMITTED = "TicketNotCommitted"
    TICKET_ALREADY_REDEEMED = "TicketAlreadyRedeemed"
    TICKET_ALREADY_COMMITTED = "TicketAlreadyCommitted"
    INVALID_TICKET_SECRET = "InvalidTicketSecret"
    INVALID_TICKET_INDEX = "InvalidTicketIndex"
    CLAIM_DEADLINE_PASSED = "ClaimDeadlinePassed"
    INSUFFICIENT_PRIZE_POOL = "InsufficientPrizePool"
    UNAUTHORIZED_CALLER = "UnauthorizedCaller"
    INVALID_PRIZE_SUM = "InvalidPrizeSum"
    INVALID_DEADLINES = "InvalidDeadlines"
    INVALID_ARRAY_LENGTHS = "InvalidArrayLengths"


CONTRACT_ERROR_MESSAGES = {
    ContractError.COMMIT_DEADLINE_PASSED: "Commit period has ended",
    ContractError.COMMIT_PERIOD_NOT_CLOSED: "Commit period must be closed before revealing",
    ContractError.RANDOMNESS_BLOCK_NOT_REACHED: "Please wait for randomness block to arrive",
    ContractError.BLOCKHASH_EXPIRED: "Reveal window expired, lottery can be refunded",
    ContractError.BLOCKHASH_UNAVAILABLE: "Block hash unavailable, please try again",
    ContractError.INVALID_CREATOR_SECRET: "Invalid creator secret",
    ContractError.TICKET_NOT_COMMITTED: "You must commit before claiming",
    ContractError.TICKET_ALREADY_REDEEMED: "Prize already claimed",
    ContractError.TICKET_ALREADY_COMMITTED: "This ticket has already been committed",
    ContractError.INVALID_TICKET_SECRET: "Invalid ticket secret",
    ContractError.INVALID_TICKET_INDEX: "Invalid ticket index",
    ContractError.CLAIM_DEADLINE_PASSED: "Claim deadline has passed",
    ContractError.INSUFFICIENT_PRIZE_POOL: "Insufficient prize pool",
    ContractError.UNAUTHORIZED_CALLER: "You are not authorized to perform this action",
    ContractError.INVALID_PRIZE_SUM: "Prize sum must equal total amount",
    ContractError.INVALID_DEADLINES: "Deadlines must be in correct order",
    ContractError.INVALID_ARRAY_LENGTHS: "Array lengths must match",
}


def find_contract_error(error_message: str) -> Optional[ContractError]:
    """Identify which custom error a raw revert message carries."""
    for error in ContractError:
        if error.value in error_message:
            return error
    return None


def parse_contract_error(error_message: str) -> str:
    """
    Turn a raw contract or wallet error into a user-facing message.

    Unrecognized messages are returned unchanged.
    """
    error = find_contract_error(error_message)
    if error is not None:
        return CONTRACT_ERROR_MESSAGES[error]

    lowered = error_message.lower()
    if "user rejected" in lowered:
        return "Transaction cancelled"
    if "insufficient funds" in lowered:
        return "Insufficient ETH for transaction"
    if "network" in lowered:
        return "Network error, please try again"
    if "nonce" in lowered:
        return "Transaction nonce error, please try again"

    return error_message


def is_user_rejection(error_message: str) -> bool:
    lowered = error_message.lower()
    return "user rejected" in lowered or "user denied" in lowered


def is_network_error(error_message: str) -> bool:
    lowered = error_message.lower()
    return "network" in lowered or "connection" in lowered


def format_error_for_display(
    error_message: str,
    blocks_remaining: Optional[int] = None,
) -> Tuple[str, str]:
    """
    Format an error for display.

    Returns:
        (title, description)
    """
    if not error_message:
        return "", ""

    message = parse_contract_error(error_message)
    if "randomness block" in message and blocks_remaining is not None:
        message = f"{message} ({blocks_remaining} blocks remaining)"

    if is_user_rejection(error_message):
        title = "Transaction Cancelled"
    elif is_network_error(error_message):
        title = "Network Error"
    elif "deadline" in message.lower() or "expired" in message.lower():
        title = "Deadline Error"
    elif "Invalid" in message:
        title = "Validation Error"
    else:
        title = "Error"

    return title, message


def explain_rejection(check: ActionCheck, error_message: str) -> str:
    """
    Message to show when the contract rejected an action.

    The contract's verdict always wins. A rejection of an action the
    local check considered eligible is logged, since it means the local
    view (clock, cached state) has drifted.
    """
    message = parse_contract_error(error_message)
    if check.allowed and not is_user_rejection(error_message):
        logger.warning(
            f"Contract rejected {check.action.value} that local checks allowed: {message}"
        )
    return message
