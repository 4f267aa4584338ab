"""
Port interfaces (ABCs) for the security bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional


class SessionStore(ABC):
    """Port for a key-value store indexed by session identifier.

    Each session owns its own slots. The store is shared by concurrent
    requests, so implementations must make every method safe to call
    from multiple threads.
    """

    @abstractmethod
    def get(self, session_id: str, key: str) -> Optional[str]:
        """Return the value stored for a session slot, or None."""
        raise NotImplementedError

    @abstractmethod
    def set(self, session_id: str, key: str, value: str) -> None:
        """Store a value in a session slot."""
        raise NotImplementedError

    @abstractmethod
    def get_or_create(
        self, session_id: str, key: str, factory: Callable[[], str]
    ) -> str:
        """Return the slot value, creating it with factory() if absent.

        The check and the write happen atomically, so two concurrent
        requests of one session always observe the same value.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, session_id: str, key: str) -> None:
        """Remove a session slot. Missing slots are ignored."""
        raise NotImplementedError

    @abstractmethod
    def clear_session(self, session_id: str) -> None:
        """Drop every slot owned by a session."""
        raise NotImplementedError
