"""QRZ authenticator"""

import logging

from ...client.base import Transport
from ...core.exceptions import AuthenticationFailed
from ...core.reasons import ReasonClassifier
from ...core.types import ClientConfig, Credentials, ResponseStatus, Session
from .parser import LoginDecoder

logger = logging.getLogger(__name__)


class QrzAuthenticator:
    """Username/password login against the XML endpoint"""

    def __init__(
        self,
        transport: Transport,
        url: str,
        config: ClientConfig,
        classifier: ReasonClassifier | None = None,
    ):
        self._transport = transport
        self._url = url
        self._config = config
        self._classifier = classifier or ReasonClassifier()
        self._decoder = LoginDecoder()

    async def login(self, credentials: Credentials) -> Session:
        """Login via username + password"""
        if not credentials.username or not credentials.password:
            raise AuthenticationFailed("Username / password required")

        params = {
            "username": credentials.username,
            "password": credentials.password,
            "agent": self._config.user_agent,
        }

        logger.debug("[QRZ login] Sending login request")
        body = await self._transport.send(
            "GET", self._url, params, self._config.timeout_seconds
        )
        envelope = self._decoder.decode(body)

        if envelope.status is ResponseStatus.AUTH_ERROR:
            logger.error(f"[QRZ login] Rejected: {envelope.reason}")
            error = self._classifier.classify(
                envelope.reason, default=AuthenticationFailed
            )
            if not isinstance(error, AuthenticationFailed):
                error = AuthenticationFailed(envelope.reason)
            raise error
        if envelope.status is ResponseStatus.FAIL:
            logger.error(f"[QRZ login] Failed: {envelope.reason}")
            raise self._classifier.classify(envelope.reason)

        info = envelope.session
        logger.info(
            "[QRZ login] Authenticated"
            f" (lookups today: {info.count}, subscription: {info.sub_exp})"
        )
        if info.message:
            logger.info(f"[QRZ login] Server message: {info.message}")

        return Session(
            token=info.key,
            lookups_today=info.count,
            subscription_raw=info.sub_exp,
        )
