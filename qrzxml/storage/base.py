"""Session storage protocol"""

from typing import Protocol

from ..core.types import Session


class SessionStore(Protocol):
    """Protocol for persisting a session outside the process"""

    async def load(self, username: str) -> Session | None:
        """Load the session for a username, None if missing or stale"""
        ...

    async def save(self, username: str, session: Session) -> None:
        """Save the session for a username"""
        ...

    async def clear(self, username: str) -> None:
        """Forget the session for a username"""
        ...
