"""QRZ.com XML data client with managed sessions"""

from .core.exceptions import (
    ApiError,
    AuthenticationFailed,
    CallsignNotFound,
    ConfigError,
    ConnectionRefused,
    DecodeError,
    DxccNotFound,
    InvalidApiVersion,
    InvalidInput,
    NoSessionKey,
    QrzError,
    RateLimitExceeded,
    SessionExpired,
    SubscriptionRequired,
    TransportError,
    UnexpectedResponse,
)
from .core.reasons import ReasonClassifier, ReasonRule
from .core.types import (
    DEFAULT_BASE_URL,
    DEFAULT_USER_AGENT,
    ApiVersion,
    BiographyData,
    CallsignInfo,
    ClientConfig,
    Credentials,
    DxccInfo,
    Envelope,
    ResponseStatus,
    Session,
    SessionInfo,
    __version__,
)
from .providers.qrz.provider import QrzXmlClient
from .session.manager import SessionManager
from .storage.json_file import JsonFileSessionStore

__all__ = [
    "ApiError",
    "ApiVersion",
    "AuthenticationFailed",
    "BiographyData",
    "CallsignInfo",
    "CallsignNotFound",
    "ClientConfig",
    "ConfigError",
    "ConnectionRefused",
    "Credentials",
    "DEFAULT_BASE_URL",
    "DEFAULT_USER_AGENT",
    "DecodeError",
    "DxccInfo",
    "DxccNotFound",
    "Envelope",
    "InvalidApiVersion",
    "InvalidInput",
    "JsonFileSessionStore",
    "NoSessionKey",
    "QrzError",
    "QrzXmlClient",
    "RateLimitExceeded",
    "ReasonClassifier",
    "ReasonRule",
    "ResponseStatus",
    "Session",
    "SessionExpired",
    "SessionInfo",
    "SessionManager",
    "SubscriptionRequired",
    "TransportError",
    "UnexpectedResponse",
    "__version__",
]
