"""Mini README: Notifications published by the ledger after each mutation.

Structure:
    * ExpenseAdded / ExpenseRemoved - payloads for successful add/remove.
    * NotificationBus - ordered fan-out to subscriber callables.
    * NotificationLog - subscriber that keeps the most recent notifications.

The bus delivers synchronously, in subscription order, once per successful
call. Ownership transfers publish nothing.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Deque, Dict, List, Optional, Union

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ExpenseAdded:
    """Emitted once a new expense has been stored."""

    name: ClassVar[str] = "ExpenseAdded"

    id: int
    title: str
    amount: int
    timestamp: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class ExpenseRemoved:
    """Emitted once an expense has been tombstoned."""

    name: ClassVar[str] = "ExpenseRemoved"

    id: int

    def as_dict(self) -> Dict[str, Any]:
        return {"event": self.name, "id": self.id}


Notification = Union[ExpenseAdded, ExpenseRemoved]
Subscriber = Callable[[Notification], None]


class NotificationBus:
    """Deliver notifications to registered subscribers."""

    def __init__(self) -> None:
        self._subscribers: List[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        """Register a callable; subscribing twice has no extra effect."""

        if subscriber not in self._subscribers:
            self._subscribers.append(subscriber)
            LOGGER.debug("Subscribed %r (%s total)", subscriber, len(self._subscribers))

    @property
    def subscribers(self) -> List[Subscriber]:
        return list(self._subscribers)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    def publish(self, notification: Notification) -> None:
        """Hand ``notification`` to each subscriber in order.

        The ledger publishes after committing, so a failing subscriber is
        logged and skipped; it cannot undo the call or starve later subscribers.
        """

        LOGGER.debug("Publishing %s to %s subscribers", notification.name, len(self._subscribers))
        for subscriber in list(self._subscribers):
            try:
                subscriber(notification)
            except Exception as exc:
                LOGGER.exception(
                    "Subscriber %r failed on %s %s: %s", subscriber, notification.name, notification.id, exc
                )


class NotificationLog:
    """Subscriber that records notifications for dashboards and tests.

    With ``max_entries`` set, only the newest notifications are kept.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self._entries: Deque[Notification] = deque(maxlen=max_entries)

    def __call__(self, notification: Notification) -> None:
        self._entries.append(notification)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[Notification]:
        return list(self._entries)

    def export(self) -> List[Dict[str, Any]]:
        """Return recorded notifications as JSON-ready dictionaries."""

        return [entry.as_dict() for entry in self._entries]

    def clear(self) -> None:
        self._entries.clear()
