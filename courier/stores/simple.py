from threading import Lock
from typing import Any, Dict, List, Optional, Tuple

from .base import MailStore, QueueStore


class SimpleMailStore(MailStore):
    """In-memory mail store used when no other store is configured."""

    def __init__(self):
        self._messages: Dict[str, Any] = {}
        self._lock = Lock()

    def get(self, mail_id: str) -> Optional[Any]:
        with self._lock:
            return self._messages.get(mail_id)

    def set(self, mail_id: str, message: Any) -> None:
        with self._lock:
            self._messages[mail_id] = message

    def remove(self, mail_id: str) -> None:
        with self._lock:
            self._messages.pop(mail_id, None)

    def get_mail_ids(self) -> List[str]:
        with self._lock:
            return list(self._messages)


class SimpleQueueStore(QueueStore):
    """In-memory queue store used when no other store is configured."""

    def __init__(self):
        self._queue: Dict[str, Tuple[List[str], int]] = {}
        self._lock = Lock()

    def add(self, mail_id: str, recipients: List[str], expiry: int = -1) -> None:
        with self._lock:
            self._queue[mail_id] = (list(recipients), expiry)

    def remove(self, mail_id: str) -> None:
        with self._lock:
            self._queue.pop(mail_id, None)

    def get_recipients(self, mail_id: str) -> List[str]:
        with self._lock:
            recipients, _ = self._queue.get(mail_id, ([], -1))
            return list(recipients)

    def size(self) -> int:
        with self._lock:
            return len(self._queue)
