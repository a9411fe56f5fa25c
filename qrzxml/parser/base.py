"""Response decoder protocol"""

from typing import Protocol

from ..core.types import Envelope


class ResponseDecoder(Protocol):
    """Protocol for turning a raw body into an envelope"""

    def decode(self, body: bytes) -> Envelope:
        """Decode raw response bytes

        Args:
            body: Raw response body from the transport

        Returns:
            Envelope with status, reason, session block and typed payload

        Raises:
            DecodeError: if the body is not a usable envelope
        """
        ...
