"""Abstract key-value backend. The conversation store persists through this."""

from abc import ABC, abstractmethod


class BaseKeyValueBackend(ABC):
    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored text for a key, or None if absent."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store text under a key, replacing any previous value."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Removing a missing key is a no-op."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        ...

    def close(self) -> None:
        """Release any resources held by the backend."""
