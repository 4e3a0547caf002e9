"""Mini README: State stores backing the expense ledger.

Structure:
    * LedgerStore - abstract store with transactional read-modify-write.
    * InMemoryLedgerStore - keeps the state object in process memory.
    * JsonFileLedgerStore - persists the state as a JSON document.

``transaction`` serialises callers on a re-entrant lock, yields a working
copy of the state and saves it only when the ``with`` block finishes
cleanly. An exception inside the block discards the copy, so a rejected
operation never leaves partial changes behind.
"""

from __future__ import annotations

import json
import os
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ..logging_utils import get_logger
from .errors import LedgerStoreError
from .models import LedgerState

LOGGER = get_logger(__name__)


class LedgerStore(ABC):
    """Base interface for ledger state persistence."""

    def __init__(self) -> None:
        self._lock = threading.RLock()

    @abstractmethod
    def load(self) -> LedgerState:
        """Return the committed state."""

    @abstractmethod
    def save(self, state: LedgerState) -> None:
        """Replace the committed state with ``state``."""

    def snapshot(self) -> LedgerState:
        """Return a consistent copy of the committed state for reading."""

        with self._lock:
            return self.load().copy()

    @contextmanager
    def transaction(self) -> Iterator[LedgerState]:
        """Yield a working copy and commit it if the block succeeds."""

        with self._lock:
            working = self.load().copy()
            yield working
            self.save(working)


class InMemoryLedgerStore(LedgerStore):
    """Store that keeps the ledger state in memory."""

    def __init__(self, owner: Optional[str] = None, *, state: Optional[LedgerState] = None) -> None:
        super().__init__()
        if state is None:
            if owner is None:
                raise ValueError("Either an owner or an initial state is required.")
            state = LedgerState(owner=owner)
        self._state = state

    def load(self) -> LedgerState:
        return self._state

    def save(self, state: LedgerState) -> None:
        self._state = state


class JsonFileLedgerStore(LedgerStore):
    """Store that persists the ledger state in a JSON file."""

    def __init__(self, path: Path, owner: str) -> None:
        super().__init__()
        self.path = Path(path)
        self._owner = owner

    def load(self) -> LedgerState:
        if not self.path.exists():
            LOGGER.debug("No state at %s, starting fresh ledger for %s", self.path, self._owner)
            return LedgerState(owner=self._owner)
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return LedgerState.from_dict(payload)
        except (AttributeError, ValueError, KeyError, TypeError) as error:
            raise LedgerStoreError(f"Ledger state at {self.path} is unreadable: {error}") from error

    def save(self, state: LedgerState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            temp_path.write_text(json.dumps(state.as_dict(), indent=2), encoding="utf-8")
            os.replace(temp_path, self.path)
        finally:
            temp_path.unlink(missing_ok=True)
        LOGGER.debug("Persisted ledger state to %s", self.path)
