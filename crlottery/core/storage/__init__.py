"""
Local Storage Module.

Provides the key-value persistence port and what is kept behind it:
- Creator secrets and ticket secrets (SecretStore)
- Participant ticket secrets (ParticipantTicketStore)
- SQLite and in-memory backends
"""

from crlottery.core.storage.port import (
    KeyValueStore,
    MemoryStore,
    PersistenceError,
    load_json,
    save_json,
)
from crlottery.core.storage.sqlite_adapter import SQLiteAdapter
from crlottery.core.storage.secret_store import (
    SecretStore,
    ParticipantTicketStore,
    LotterySecretRecord,
    ParticipantTicketRecord,
    CREATOR_SECRETS_KEY,
    PARTICIPANT_TICKETS_KEY,
)

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "PersistenceError",
    "load_json",
    "save_json",
    "SQLiteAdapter",
    "SecretStore",
    "ParticipantTicketStore",
    "LotterySecretRecord",
    "ParticipantTicketRecord",
    "CREATOR_SECRETS_KEY",
    "PARTICIPANT_TICKETS_KEY",
]
