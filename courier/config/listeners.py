"""Change notification for configuration updates."""

from threading import Lock
from typing import Callable, List, Protocol, Union, runtime_checkable

from loguru import logger


@runtime_checkable
class ConfigurationChangeListener(Protocol):
    """Object notified with the canonical key of every changed setting."""

    def config_changed(self, key: str) -> None:
        ...


Listener = Union[ConfigurationChangeListener, Callable[[str], None]]


class ChangeNotifier:
    """Ordered registry of change listeners.

    Listeners are called synchronously in registration order. The registry
    is copied under the lock before each fan-out and the copy is iterated
    without holding it, so listeners may add or remove listeners while being
    notified; such changes apply from the next notification on.
    """

    def __init__(self):
        self._listeners: List[Listener] = []
        self._lock = Lock()

    def add_listener(self, listener: Listener) -> None:
        """Register a listener. The same listener may be registered twice."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        """Remove the first registration of a listener, compared by identity."""
        with self._lock:
            for index, registered in enumerate(self._listeners):
                if registered is listener:
                    del self._listeners[index]
                    return

    def listeners(self) -> List[Listener]:
        """Snapshot of the registered listeners."""
        with self._lock:
            return list(self._listeners)

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)

    def notify(self, key: str) -> None:
        """Call every listener with the changed key.

        A failing listener is logged and does not stop the others.
        """
        snapshot = self.listeners()
        if not snapshot:
            return

        key = str(key)
        logger.info(f"Configuration parameter '{key}' changed, notifying {len(snapshot)} listeners")
        for listener in snapshot:
            try:
                if isinstance(listener, ConfigurationChangeListener):
                    listener.config_changed(key)
                else:
                    listener(key)
            except Exception:
                logger.exception(f"Listener {listener!r} failed handling change of '{key}'")
