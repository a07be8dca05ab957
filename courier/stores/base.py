from abc import ABC, abstractmethod
from typing import Any, List, Optional


class MailStore(ABC):
    """Storage for message bodies, keyed by mail id."""

    @abstractmethod
    def get(self, mail_id: str) -> Optional[Any]:
        """Get a message by id, None if unknown."""
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def set(self, mail_id: str, message: Any) -> None:
        """Store a message under an id, replacing any previous one."""
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def remove(self, mail_id: str) -> None:
        """Drop a message. Unknown ids are ignored."""
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def get_mail_ids(self) -> List[str]:
        """List the ids of all stored messages."""
        raise NotImplementedError("Subclasses must implement this method.")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class QueueStore(ABC):
    """Storage for pending deliveries, one entry per mail id and recipient."""

    @abstractmethod
    def add(self, mail_id: str, recipients: List[str], expiry: int = -1) -> None:
        """Queue a message for the given recipients."""
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def remove(self, mail_id: str) -> None:
        """Remove every queue entry of a message."""
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def get_recipients(self, mail_id: str) -> List[str]:
        """Recipients still pending for a message."""
        raise NotImplementedError("Subclasses must implement this method.")

    @abstractmethod
    def size(self) -> int:
        """Number of queued messages."""
        raise NotImplementedError("Subclasses must implement this method.")

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
