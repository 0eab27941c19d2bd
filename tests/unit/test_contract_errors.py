"""
Unit tests for contract rejection messages and call payloads.
"""

import logging

import pytest

from crlottery.core.lottery import (
    Action,
    ActionCheck,
    Condition,
    ContractError,
    claim_prize_call,
    commit_ticket_call,
    explain_rejection,
    find_contract_error,
    format_error_for_display,
    is_network_error,
    is_user_rejection,
    parse_contract_error,
    refund_lottery_call,
    reveal_lottery_call,
)
from crlottery.crypto import hash_secret

SECRET = "0x" + "11" * 31 + "22"


class TestParseContractError:

    def test_custom_error(self):
        raw = 'execution reverted: custom error "CommitDeadlinePassed()"'
        assert find_contract_error(raw) == ContractError.COMMIT_DEADLINE_PASSED
        assert parse_contract_error(raw) == "Commit period has ended"

    def test_every_error_has_message(self):
        for error in ContractError:
            assert parse_contract_error(f"reverted with {error.value}") != f"reverted with {error.value}"

    @pytest.mark.parametrize("raw, message", [
        ("User rejected the request.", "Transaction cancelled"),
        ("insufficient funds for gas * price + value", "Insufficient ETH for transaction"),
        ("network changed: 1 => 5", "Network error, please try again"),
        ("nonce too low", "Transaction nonce error, please try again"),
    ])
    def test_wallet_errors(self, raw, message):
        assert parse_contract_error(raw) == message

    def test_unknown_passes_through(self):
        assert parse_contract_error("something odd") == "something odd"

    def test_classifiers(self):
        assert is_user_rejection("User denied transaction signature")
        assert not is_user_rejection("nonce too low")
        assert is_network_error("connection refused")


class TestFormatErrorForDisplay:

    def test_empty(self):
        assert format_error_for_display("") == ("", "")

    def test_randomness_block_with_blocks(self):
        title, message = format_error_for_display("RandomnessBlockNotReached", blocks_remaining=4)
        assert title == "Error"
        assert message == "Please wait for randomness block to arrive (4 blocks remaining)"

    @pytest.mark.parametrize("raw, title", [
        ("User rejected the request.", "Transaction Cancelled"),
        ("network timeout", "Network Error"),
        ("ClaimDeadlinePassed", "Deadline Error"),
        ("BlockhashExpired", "Deadline Error"),
        ("InvalidTicketSecret", "Validation Error"),
        ("TicketAlreadyRedeemed", "Error"),
    ])
    def test_titles(self, raw, title):
        assert format_error_for_display(raw)[0] == title


class TestExplainRejection:

    def test_contract_message_wins(self):
        check = ActionCheck(Action.CLAIM)
        assert explain_rejection(check, "TicketAlreadyRedeemed") == "Prize already claimed"

    def test_disagreement_logged(self, caplog):
        check = ActionCheck(Action.REVEAL)
        with caplog.at_level(logging.WARNING, logger="crlottery"):
            explain_rejection(check, "CommitPeriodNotClosed")
        assert "local checks allowed" in caplog.text

    def test_expected_rejection_not_logged(self, caplog):
        check = ActionCheck(Action.REVEAL, (Condition.REVEAL_TIME_REACHED,))
        with caplog.at_level(logging.WARNING, logger="crlottery"):
            explain_rejection(check, "RandomnessBlockNotReached")
        assert caplog.text == ""


class TestContractCalls:

    def test_commit_sends_hash_only(self):
        call = commit_ticket_call(42, 3, SECRET)
        assert call.function_name == "commitTicket"
        assert call.args == (42, 3, hash_secret(SECRET))

    def test_reveal_sends_secret_bytes(self):
        call = reveal_lottery_call(42, SECRET)
        assert call.function_name == "revealLottery"
        assert call.args == (42, bytes.fromhex(SECRET[2:]))

    def test_claim_sends_secret_bytes(self):
        call = claim_prize_call(42, 3, SECRET)
        assert call.args == (42, 3, bytes.fromhex(SECRET[2:]))

    def test_refund(self):
        assert refund_lottery_call(42).args == (42,)

    @pytest.mark.parametrize("builder", [
        lambda s: commit_ticket_call(1, 0, s),
        lambda s: reveal_lottery_call(1, s),
        lambda s: claim_prize_call(1, 0, s),
    ])
    def test_bad_secret_rejected(self, builder):
        with pytest.raises(ValueError):
            builder("0x1234")
