"""Push notification of state snapshots to subscribers."""

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from ulid import ULID

from ...domain import PageState

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

StateListener = Callable[[PageState[T]], None]


class Subscription:
    """Handle returned by ListenerRegistry.subscribe.

    Calling unsubscribe more than once is harmless.
    """

    __slots__ = ("id", "_registry")

    def __init__(self, registry: "ListenerRegistry") -> None:
        self.id = ULID()
        self._registry: ListenerRegistry | None = registry

    @property
    def active(self) -> bool:
        return self._registry is not None and self.id in self._registry

    def unsubscribe(self) -> None:
        if self._registry is not None:
            self._registry.remove(self)
            self._registry = None


class ListenerRegistry(Generic[T]):
    """Ordered set of listeners notified synchronously on every publication.

    Listeners are called in subscription order. A listener that raises is
    logged and skipped; the remaining listeners still receive the snapshot.
    """

    def __init__(self) -> None:
        self._listeners: dict[ULID, StateListener[T]] = {}

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, subscription_id: object) -> bool:
        return subscription_id in self._listeners

    def subscribe(self, listener: StateListener[T]) -> Subscription:
        subscription = Subscription(self)
        self._listeners[subscription.id] = listener
        return subscription

    def remove(self, subscription: Subscription) -> None:
        self._listeners.pop(subscription.id, None)

    def clear(self) -> None:
        self._listeners.clear()

    def notify(self, state: PageState[T]) -> None:
        # Copy so listeners may unsubscribe while being notified
        for subscription_id, listener in list(self._listeners.items()):
            try:
                listener(state)
            except Exception:
                LOGGER.exception(
                    "State listener failed",
                    extra={"subscription_id": str(subscription_id)},
                )
