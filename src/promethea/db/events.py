# ABOUTME: In-process "library changed" signal for views and caches.
# ABOUTME: Listeners are called after each committed write; nothing is persisted.

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class ChangeNotifier:
    """Fan-out of a payload-free change signal to subscribed listeners.

    Delivery is synchronous on the thread that committed the write. A
    listener that raises is logged and skipped; the rest still run.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def notify(self) -> None:
        """Call every currently subscribed listener once."""
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.warning("Library change listener %r failed", listener, exc_info=True)
