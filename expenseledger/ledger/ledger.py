"""Mini README: Single-owner expense ledger.

Structure:
    * ExpenseLedger - owner-gated add/remove, public reads and aggregation.

Ids come from a counter that starts at 1 and only ever grows, so an id is
never handed out twice. Removing an expense tombstones its slot but keeps the
id in the enumeration index; readers of ``get_expense_ids`` must re-check each
id with ``get_expense`` and tolerate ``NotFound``. ``total_expenses`` does the
same filtering internally.

Each mutation runs in one store transaction: preconditions are checked first,
the working copy is committed, and only then is the notification published.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Optional

from ..logging_utils import get_logger
from .errors import InvalidArgument, LedgerOverflowError, NotFound, Unauthorized
from .models import MAX_AMOUNT, Expense, LedgerEntry, LedgerState, is_null_identity
from .notifications import ExpenseAdded, ExpenseRemoved, NotificationBus
from .store import InMemoryLedgerStore, LedgerStore

LOGGER = get_logger(__name__)

Clock = Callable[[], int]


def _system_clock() -> int:
    return int(time.time())


class ExpenseLedger:
    """Manage expenses on behalf of a single owner."""

    def __init__(
        self,
        store: LedgerStore,
        *,
        clock: Optional[Clock] = None,
        notifications: Optional[NotificationBus] = None,
    ) -> None:
        self._store = store
        self._clock = clock or _system_clock
        self.notifications = notifications or NotificationBus()
        LOGGER.debug("Expense ledger initialised on %s", type(store).__name__)

    @classmethod
    def create(
        cls,
        owner: str,
        *,
        clock: Optional[Clock] = None,
        notifications: Optional[NotificationBus] = None,
    ) -> "ExpenseLedger":
        """Build a fresh in-memory ledger owned by ``owner``."""

        if is_null_identity(owner):
            raise InvalidArgument("A ledger cannot be owned by the null identity.")
        return cls(InMemoryLedgerStore(owner), clock=clock, notifications=notifications)

    @property
    def owner(self) -> str:
        return self._store.snapshot().owner

    @staticmethod
    def _require_owner(state: LedgerState, caller: Optional[str]) -> None:
        if caller is None or caller != state.owner:
            LOGGER.warning("Rejected call from %r: not the ledger owner", caller)
            raise Unauthorized(f"Caller {caller!r} is not the ledger owner.")

    @staticmethod
    def _require_live(state: LedgerState, expense_id: int) -> Expense:
        entry = state.entry(expense_id)
        if not entry.is_live:
            raise NotFound(f"Expense {expense_id} not found")
        return entry.expense

    @staticmethod
    def _check_amount(amount: Any) -> int:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidArgument(f"Amount must be an integer, got {type(amount).__name__}.")
        if amount < 0 or amount > MAX_AMOUNT:
            raise InvalidArgument(f"Amount {amount} is outside 0..{MAX_AMOUNT}.")
        return amount

    def add_expense(self, caller: Optional[str], title: str, amount: int) -> int:
        """Record a new expense and return its id."""

        with self._store.transaction() as state:
            self._require_owner(state, caller)
            amount = self._check_amount(amount)
            expense = Expense(
                id=state.next_id,
                title=title,
                amount=amount,
                timestamp=int(self._clock()),
            )
            state.next_id += 1
            state.expenses[expense.id] = LedgerEntry.live(expense)
            state.expense_ids.append(expense.id)

        LOGGER.info("Added expense %s (%r, amount=%s)", expense.id, expense.title, expense.amount)
        self.notifications.publish(
            ExpenseAdded(
                id=expense.id,
                title=expense.title,
                amount=expense.amount,
                timestamp=expense.timestamp,
            )
        )
        return expense.id

    def remove_expense(self, caller: Optional[str], expense_id: int) -> None:
        """Tombstone a live expense. The id stays in the enumeration index."""

        with self._store.transaction() as state:
            self._require_owner(state, caller)
            self._require_live(state, expense_id)
            state.expenses[expense_id] = LedgerEntry.absent()

        LOGGER.info("Removed expense %s", expense_id)
        self.notifications.publish(ExpenseRemoved(id=expense_id))

    def get_expense(self, expense_id: int) -> Expense:
        """Return a live expense, raising ``NotFound`` for tombstones and unknown ids."""

        return self._require_live(self._store.snapshot(), expense_id)

    def get_expense_ids(self) -> List[int]:
        """Return every id ever issued, in insertion order, tombstones included."""

        return list(self._store.snapshot().expense_ids)

    def list_expenses(self) -> List[Expense]:
        """Return live expenses in insertion order."""

        state = self._store.snapshot()
        return [
            state.entry(expense_id).expense
            for expense_id in state.expense_ids
            if state.entry(expense_id).is_live
        ]

    def total_expenses(self) -> int:
        """Sum the amounts of live expenses, skipping tombstones."""

        return self._total(self._store.snapshot())

    @staticmethod
    def _total(state: LedgerState) -> int:
        total = 0
        for expense_id in state.expense_ids:
            entry = state.entry(expense_id)
            if not entry.is_live:
                continue
            total += entry.expense.amount
            if total > MAX_AMOUNT:
                raise LedgerOverflowError(f"Total exceeds {MAX_AMOUNT} at expense {expense_id}.")
        return total

    def transfer_ownership(self, caller: Optional[str], new_owner: str) -> None:
        """Hand the ledger to ``new_owner``. Publishes no notification."""

        with self._store.transaction() as state:
            self._require_owner(state, caller)
            if is_null_identity(new_owner):
                raise InvalidArgument("New owner must not be the null identity.")
            previous_owner = state.owner
            state.owner = new_owner

        LOGGER.info("Ownership transferred from %r to %r", previous_owner, new_owner)

    def export_snapshot(self) -> Dict[str, Any]:
        """Export the ledger for JSON responses."""

        state = self._store.snapshot()
        live = [
            state.entry(expense_id).expense.as_dict()
            for expense_id in state.expense_ids
            if state.entry(expense_id).is_live
        ]
        return {
            "owner": state.owner,
            "next_id": state.next_id,
            "expense_ids": list(state.expense_ids),
            "expenses": live,
            "total": self._total(state),
        }
