"""Mini README: Core expense ledger package.

The ledger records titled integer amounts for a single owner, tombstones
removed entries without compacting its index, and publishes notifications
after every successful add or remove. State lives behind a pluggable store
so the same ledger runs in memory for tests and on a JSON file for the CLI.
"""

from .errors import (
    InvalidArgument,
    LedgerError,
    LedgerOverflowError,
    LedgerStoreError,
    NotFound,
    Unauthorized,
)
from .ledger import ExpenseLedger
from .models import MAX_AMOUNT, EntryStatus, Expense, LedgerEntry, LedgerState, is_null_identity
from .notifications import ExpenseAdded, ExpenseRemoved, NotificationBus, NotificationLog
from .store import InMemoryLedgerStore, JsonFileLedgerStore, LedgerStore

__all__ = [
    "EntryStatus",
    "Expense",
    "ExpenseAdded",
    "ExpenseLedger",
    "ExpenseRemoved",
    "InMemoryLedgerStore",
    "InvalidArgument",
    "JsonFileLedgerStore",
    "LedgerEntry",
    "LedgerError",
    "LedgerOverflowError",
    "LedgerState",
    "LedgerStore",
    "LedgerStoreError",
    "MAX_AMOUNT",
    "NotFound",
    "NotificationBus",
    "NotificationLog",
    "Unauthorized",
    "is_null_identity",
]
