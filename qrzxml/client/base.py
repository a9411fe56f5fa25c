"""Transport protocol"""

from collections.abc import Mapping
from typing import Protocol


class Transport(Protocol):
    """Protocol for the HTTP layer under the session manager"""

    async def send(
        self,
        method: str,
        url: str,
        params: Mapping[str, str],
        timeout: float,
    ) -> bytes:
        """
        Send one request and return the raw body.
        Raises TransportError on network, timeout, TLS or HTTP-status failure.
        """
        ...
