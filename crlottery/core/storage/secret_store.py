"""
Secret Store - Local custody of lottery and ticket secrets.

Two maps live behind the KeyValueStore port:

- "lottery-creator-secrets": lotteryId -> {creatorSecret, ticketSecrets, createdAt}
  kept by a lottery's creator, who must later reveal the creator secret.
- "participant-tickets": "{lotteryId}_{ticketIndex}" -> {lotteryId, ticketIndex,
  ticketSecret, savedAt} kept by participants so they can claim later.

Each map is stored as one JSON document and rewritten whole on every
change, so readers always see a complete snapshot (single-writer model).
A recovery secret pasted by a user is checked against the on-chain
commitment before it is saved.
"""

import time
from typing import Callable, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from crlottery.crypto import is_secret_format, validate_secret
from crlottery.core.storage.port import KeyValueStore, load_json, save_json
from crlottery.utils.logger import get_logger

logger = get_logger("storage.secrets")


CREATOR_SECRETS_KEY = "lottery-creator-secrets"
PARTICIPANT_TICKETS_KEY = "participant-tickets"
COMMITTED_MARKER_PREFIX = "committed_"

LotteryKey = Union[int, str]


def _now_ms() -> int:
    return int(time.time() * 1000)


# =============================================================================
# Records
# =============================================================================


class LotterySecretRecord(BaseModel):
    """A creator's secrets for one lottery."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    creator_secret: str = Field(alias="creatorSecret")
    ticket_secrets: List[str] = Field(default_factory=list, alias="ticketSecrets")
    created_at: int = Field(alias="createdAt")


class ParticipantTicketRecord(BaseModel):
    """A participant's saved ticket secret."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    lottery_id: str = Field(alias="lotteryId")
    ticket_index: int = Field(alias="ticketIndex", ge=0)
    ticket_secret: str = Field(alias="ticketSecret")
    saved_at: int = Field(alias="savedAt")


def _load_records(store: KeyValueStore, key: str, model) -> Dict[str, BaseModel]:
    raw = load_json(store, key, {})
    if not isinstance(raw, dict):
        logger.warning(f"Ignoring malformed {key} map")
        return {}
    records = {}
    for record_key, value in raw.items():
        try:
            records[record_key] = model.model_validate(value)
        except ValidationError:
            logger.warning(f"Skipping malformed {key} entry {record_key!r}")
    return records


def _dump_records(store: KeyValueStore, key: str, records: Dict[str, BaseModel]) -> None:
    save_json(store, key, {k: r.model_dump(by_alias=True) for k, r in records.items()})


# =============================================================================
# Creator Secrets
# =============================================================================


class SecretStore:
    """
    Keyed persistence of creator and ticket secrets per lottery.

    Args:
        store: Persistence port
        clock: Returns epoch milliseconds (injectable for tests)
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], int] = _now_ms):
        self.store = store
        self.clock = clock

    def _load(self) -> Dict[str, LotterySecretRecord]:
        return _load_records(self.store, CREATOR_SECRETS_KEY, LotterySecretRecord)

    def _write(self, records: Dict[str, LotterySecretRecord]) -> None:
        _dump_records(self.store, CREATOR_SECRETS_KEY, records)

    def save(
        self,
        lottery_id: LotteryKey,
        creator_secret: str,
        ticket_secrets: Optional[List[str]] = None,
    ) -> LotterySecretRecord:
        """Save secrets for a lottery, replacing any earlier entry."""
        record = LotterySecretRecord(
            creator_secret=creator_secret,
            ticket_secrets=list(ticket_secrets or []),
            created_at=self.clock(),
        )
        records = self._load()
        records[str(lottery_id)] = record
        self._write(records)
        logger.debug(f"Saved secrets for lottery {lottery_id} ({len(record.ticket_secrets)} tickets)")
        return record

    def get(self, lottery_id: LotteryKey) -> Optional[str]:
        """Get the creator secret for a lottery."""
        record = self.get_record(lottery_id)
        return record.creator_secret if record else None

    def get_record(self, lottery_id: LotteryKey) -> Optional[LotterySecretRecord]:
        """Get all secret data for a lottery (creator + tickets)."""
        return self._load().get(str(lottery_id))

    def get_ticket_secrets(self, lottery_id: LotteryKey) -> List[str]:
        record = self.get_record(lottery_id)
        return list(record.ticket_secrets) if record else []

    def get_all(self) -> Dict[str, LotterySecretRecord]:
        return self._load()

    def has(self, lottery_id: LotteryKey) -> bool:
        return str(lottery_id) in self._load()

    def lottery_ids(self) -> List[str]:
        return list(self._load())

    def remove(self, lottery_id: LotteryKey) -> bool:
        """Remove a lottery's secrets. Returns False if none were stored."""
        records = self._load()
        if records.pop(str(lottery_id), None) is None:
            return False
        self._write(records)
        logger.debug(f"Removed secrets for lottery {lottery_id}")
        return True

    def clear(self) -> None:
        self.store.delete(CREATOR_SECRETS_KEY)

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def validate(secret: str, commitment: str) -> bool:
        """Validate a secret against a commitment hash."""
        return validate_secret(secret, commitment)

    def restore(
        self,
        lottery_id: LotteryKey,
        secret: str,
        commitment: str,
    ) -> Tuple[bool, str]:
        """
        Save a pasted recovery secret after checking it.

        Existing ticket secrets for the lottery are kept.

        Returns:
            (success, error_message)
        """
        secret = (secret or "").strip()
        if not secret:
            return False, "Please enter a secret"

        if not is_secret_format(secret):
            return False, "Invalid secret format. Expected 32-byte hex string (0x...)"

        if not self.validate(secret, commitment):
            logger.warning(f"Recovery secret for lottery {lottery_id} does not match commitment")
            return False, "Secret does not match the lottery commitment. Please check and try again."

        self.save(lottery_id, secret, self.get_ticket_secrets(lottery_id))
        return True, ""


# =============================================================================
# Participant Tickets
# =============================================================================


class ParticipantTicketStore:
    """
    Saved ticket secrets, so participants need not re-enter codes to claim.

    Args:
        store: Persistence port
        clock: Returns epoch milliseconds (injectable for tests)
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], int] = _now_ms):
        self.store = store
        self.clock = clock

    @staticmethod
    def ticket_key(lottery_id: LotteryKey, ticket_index: int) -> str:
        return f"{lottery_id}_{ticket_index}"

    def _load(self) -> Dict[str, ParticipantTicketRecord]:
        return _load_records(self.store, PARTICIPANT_TICKETS_KEY, ParticipantTicketRecord)

    def _write(self, records: Dict[str, ParticipantTicketRecord]) -> None:
        _dump_records(self.store, PARTICIPANT_TICKETS_KEY, records)

    def save_ticket(
        self,
        lottery_id: LotteryKey,
        ticket_index: int,
        ticket_secret: str,
    ) -> ParticipantTicketRecord:
        record = ParticipantTicketRecord(
            lottery_id=str(lottery_id),
            ticket_index=ticket_index,
            ticket_secret=ticket_secret,
            saved_at=self.clock(),
        )
        records = self._load()
        records[self.ticket_key(lottery_id, ticket_index)] = record
        self._write(records)
        return record

    def get_ticket(self, lottery_id: LotteryKey, ticket_index: int) -> Optional[ParticipantTicketRecord]:
        return self._load().get(self.ticket_key(lottery_id, ticket_index))

    def get_ticket_secret(self, lottery_id: LotteryKey, ticket_index: int) -> Optional[str]:
        record = self.get_ticket(lottery_id, ticket_index)
        return record.ticket_secret if record else None

    def has_ticket(self, lottery_id: LotteryKey, ticket_index: int) -> bool:
        return self.ticket_key(lottery_id, ticket_index) in self._load()

    def remove_ticket(self, lottery_id: LotteryKey, ticket_index: int) -> bool:
        """Remove a ticket (e.g., after claiming)."""
        records = self._load()
        if records.pop(self.ticket_key(lottery_id, ticket_index), None) is None:
            return False
        self._write(records)
        return True

    def get_all_tickets(self) -> List[ParticipantTicketRecord]:
        return list(self._load().values())

    def clear(self) -> None:
        self.store.delete(PARTICIPANT_TICKETS_KEY)

    # Local "already committed" markers; the contract's ticket.committed wins

    def mark_committed(self, lottery_id: LotteryKey, ticket_index: int) -> None:
        key = COMMITTED_MARKER_PREFIX + self.ticket_key(lottery_id, ticket_index)
        save_json(self.store, key, True)

    def is_marked_committed(self, lottery_id: LotteryKey, ticket_index: int) -> bool:
        key = COMMITTED_MARKER_PREFIX + self.ticket_key(lottery_id, ticket_index)
        return load_json(self.store, key, False) is True
