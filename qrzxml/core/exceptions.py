"""Custom exceptions for the QRZ XML client"""


class QrzError(Exception):
    """Base exception for the QRZ XML client"""

    @property
    def should_reauthenticate(self) -> bool:
        """Whether a fresh login could clear this error"""
        return isinstance(self, (SessionExpired, NoSessionKey))

    @property
    def is_retryable(self) -> bool:
        """Whether the same request may succeed if sent again later"""
        return isinstance(self, (TransportError, SessionExpired, RateLimitExceeded))

    @property
    def is_permission_error(self) -> bool:
        """Whether the account lacks access rather than the request being wrong"""
        return isinstance(self, (SubscriptionRequired, ConnectionRefused))


class TransportError(QrzError):
    """Network, timeout, TLS or HTTP-status failure"""

    def __init__(self, detail: str, status_code: int | None = None):
        self.detail = detail
        self.status_code = status_code
        msg = f"Network error: {detail}"
        if status_code is not None:
            msg += f" (HTTP {status_code})"
        super().__init__(msg)


class DecodeError(QrzError):
    """Response body is not a valid QRZ envelope"""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"XML parsing error: {detail}")


class AuthenticationFailed(QrzError):
    """Credentials rejected by the login endpoint"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Authentication failed: {reason}")


class NoSessionKey(AuthenticationFailed):
    """Login answered without a session key"""

    def __init__(self, reason: str = "No session key received"):
        super().__init__(reason)


class SessionExpired(QrzError):
    """Session key rejected by the server, re-authentication required"""

    def __init__(self, reason: str | None = None):
        self.reason = reason
        super().__init__(
            f"Session expired or invalid: {reason}"
            if reason
            else "Session expired or invalid - re-authentication required"
        )


class ApiError(QrzError):
    """Server reported an error the client has no specific kind for"""

    def __init__(self, reason: str, message: str | None = None):
        self.reason = reason
        super().__init__(message or f"QRZ API error: {reason}")


class CallsignNotFound(ApiError):
    """Callsign has no record"""

    def __init__(self, callsign: str, reason: str = "Not found"):
        self.callsign = callsign
        super().__init__(reason, f"Callsign not found: {callsign}")


class DxccNotFound(ApiError):
    """DXCC entity has no record"""

    def __init__(self, entity: str, reason: str = "Not found"):
        self.entity = entity
        super().__init__(reason, f"DXCC entity not found: {entity}")


class SubscriptionRequired(ApiError):
    """Data requires an XML subscription"""

    def __init__(self, reason: str = "Subscription required"):
        super().__init__(reason, "A subscription is required to access this data")


class ConnectionRefused(ApiError):
    """Service is refusing connections for this account"""

    def __init__(self, reason: str = "Connection refused"):
        super().__init__(
            reason, "QRZ service is refusing connections - try again in 24 hours"
        )


class RateLimitExceeded(ApiError):
    """Too many lookups"""

    def __init__(self, reason: str = "Rate limit exceeded"):
        super().__init__(reason, f"Rate limit exceeded: {reason}")


class UnexpectedResponse(QrzError):
    """Envelope was OK but did not carry the expected record"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Unexpected API response: {message}")


class InvalidInput(QrzError):
    """Caller supplied an unusable argument"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Invalid input: {message}")


class InvalidApiVersion(InvalidInput):
    """API version string is not usable in a URL"""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Invalid API version: {version!r}")


class ConfigError(QrzError):
    """Configuration could not be loaded"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
