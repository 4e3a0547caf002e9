"""Mini README: Exceptions raised by the expense ledger.

Every rejection happens before the ledger state is touched, so callers can
treat each of these as "nothing changed". The classes also inherit from the
closest built-in exception so generic handlers keep working.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all ledger failures."""


class Unauthorized(LedgerError, PermissionError):
    """The caller is not the ledger owner."""


class NotFound(LedgerError, LookupError):
    """No live expense exists for the requested id."""


class InvalidArgument(LedgerError, ValueError):
    """An argument is outside the range the ledger accepts."""


class LedgerOverflowError(LedgerError, OverflowError):
    """The aggregate exceeded the widest amount the ledger can represent."""


class LedgerStoreError(LedgerError):
    """Persisted ledger state could not be read back."""
