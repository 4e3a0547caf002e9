"""Mini README: Package initializer for the expenseledger service.

The package exposes a single-owner expense ledger together with the thin
HTTP and CLI surfaces that drive it. Only the most commonly used names are
re-exported here so ``import expenseledger`` stays cheap and free of web
framework imports.
"""

from .ledger import Expense, ExpenseLedger
from .logging_utils import get_logger

__all__ = ["Expense", "ExpenseLedger", "get_logger"]

__version__ = "0.1.0"
