"""Mini README: Data model for the single-owner expense ledger.

Structure:
    * Expense - immutable entry carrying id, title, amount and timestamp.
    * EntryStatus / LedgerEntry - explicit live/absent slot in the id map.
    * LedgerState - owner, id counter, id map and the enumeration index.
    * is_null_identity - recognises identities that may never own a ledger.

Deleted entries are tombstoned: their slot flips to ``ABSENT`` while the id
stays in ``expense_ids`` forever. The index is never compacted, which keeps
deletes O(1) and ids stable at the price of O(n) aggregation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

MAX_AMOUNT = 2**256 - 1
FIRST_EXPENSE_ID = 1

_ZERO_ADDRESS = re.compile(r"^(0x)?0+$", re.IGNORECASE)


def is_null_identity(identity: Optional[str]) -> bool:
    """Return True for the empty identity or an all-zero address."""

    if identity is None:
        return True
    stripped = str(identity).strip()
    return not stripped or bool(_ZERO_ADDRESS.match(stripped))


@dataclass(frozen=True, slots=True)
class Expense:
    """A recorded expense. Never mutated after creation."""

    id: int
    title: str
    amount: int
    timestamp: int

    def as_dict(self) -> Dict[str, Any]:
        """Export the expense with serialisable values."""

        return {
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Expense":
        return cls(
            id=int(payload["id"]),
            title=str(payload["title"]),
            amount=int(payload["amount"]),
            timestamp=int(payload["timestamp"]),
        )


class EntryStatus(str, Enum):
    """Lifecycle of a slot in the id map."""

    LIVE = "live"
    ABSENT = "absent"


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """Slot in the id map: either a live expense or a tombstone."""

    status: EntryStatus
    expense: Optional[Expense] = None

    @classmethod
    def live(cls, expense: Expense) -> "LedgerEntry":
        return cls(status=EntryStatus.LIVE, expense=expense)

    @classmethod
    def absent(cls) -> "LedgerEntry":
        return cls(status=EntryStatus.ABSENT)

    @property
    def is_live(self) -> bool:
        return self.status is EntryStatus.LIVE


ABSENT_ENTRY = LedgerEntry.absent()


@dataclass(slots=True)
class LedgerState:
    """All mutable state of one ledger instance."""

    owner: str
    next_id: int = FIRST_EXPENSE_ID
    expenses: Dict[int, LedgerEntry] = field(default_factory=dict)
    expense_ids: List[int] = field(default_factory=list)

    def entry(self, expense_id: int) -> LedgerEntry:
        """Return the slot for ``expense_id``; unknown ids are absent."""

        return self.expenses.get(expense_id, ABSENT_ENTRY)

    def copy(self) -> "LedgerState":
        """Return a working copy; entries are immutable so a shallow copy suffices."""

        return LedgerState(
            owner=self.owner,
            next_id=self.next_id,
            expenses=dict(self.expenses),
            expense_ids=list(self.expense_ids),
        )

    def as_dict(self) -> Dict[str, Any]:
        """Serialise the state, tombstones included, for persistence."""

        return {
            "owner": self.owner,
            "next_id": self.next_id,
            "expense_ids": list(self.expense_ids),
            "expenses": {
                str(expense_id): (
                    {"status": entry.status.value, "expense": entry.expense.as_dict()}
                    if entry.is_live
                    else {"status": entry.status.value}
                )
                for expense_id, entry in self.expenses.items()
            },
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "LedgerState":
        """Rebuild state written by :meth:`as_dict`.

        Raises ``ValueError`` when the payload could hand out an id twice:
        a missing counter, a counter not above every issued id, duplicate
        ids in the index, or a live entry filed under another id.
        """

        if "next_id" not in payload:
            raise ValueError("Ledger state is missing 'next_id'.")
        next_id = int(payload["next_id"])
        expense_ids = [int(expense_id) for expense_id in payload.get("expense_ids", [])]
        if len(set(expense_ids)) != len(expense_ids):
            raise ValueError("Ledger state lists an expense id more than once.")
        if next_id < FIRST_EXPENSE_ID or next_id <= max(expense_ids, default=0):
            raise ValueError(f"next_id {next_id} does not exceed every issued id.")
        if any(expense_id < FIRST_EXPENSE_ID for expense_id in expense_ids):
            raise ValueError("Ledger state contains a non-positive expense id.")

        issued = set(expense_ids)
        expenses: Dict[int, LedgerEntry] = {}
        for raw_id, raw_entry in payload.get("expenses", {}).items():
            expense_id = int(raw_id)
            if expense_id not in issued:
                raise ValueError(f"Expense {expense_id} is missing from the id index.")
            status = EntryStatus(raw_entry["status"])
            if status is EntryStatus.LIVE:
                expense = Expense.from_dict(raw_entry["expense"])
                if expense.id != expense_id:
                    raise ValueError(f"Expense {expense.id} is stored under id {expense_id}.")
                expenses[expense_id] = LedgerEntry.live(expense)
            else:
                expenses[expense_id] = ABSENT_ENTRY
        return cls(
            owner=str(payload["owner"]),
            next_id=next_id,
            expenses=expenses,
            expense_ids=expense_ids,
        )
