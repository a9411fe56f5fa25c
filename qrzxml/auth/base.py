"""Authenticator protocol"""

from typing import Protocol

from ..core.types import Credentials, Session


class Authenticator(Protocol):
    """Protocol for exchanging credentials for a session"""

    async def login(self, credentials: Credentials) -> Session:
        """
        Login and return a new session.
        Raises AuthenticationFailed when the credentials are rejected.
        """
        ...
