"""QRZ XML lookup client"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from ...client.base import Transport
from ...config import Settings, load_settings
from ...core.exceptions import InvalidInput, QrzError, TransportError, UnexpectedResponse
from ...core.reasons import ReasonClassifier
from ...core.types import (
    ApiVersion,
    BiographyData,
    CallsignInfo,
    ClientConfig,
    Credentials,
    DxccInfo,
    Session,
)
from ...session.manager import SessionManager
from ...storage.base import SessionStore
from .auth import QrzAuthenticator
from .client import CurlTransport
from .parser import BiographyDecoder, CallsignDecoder, DxccDecoder, DxccListDecoder

logger = logging.getLogger(__name__)


def _normalize_callsign(callsign: str) -> str:
    callsign = (callsign or "").strip().upper()
    if not callsign:
        raise InvalidInput("Callsign cannot be empty")
    return callsign


class QrzXmlClient:
    """QRZ.com XML data client"""

    def __init__(
        self,
        username: str,
        password: str,
        api_version: ApiVersion | None = None,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
        classifier: ReasonClassifier | None = None,
    ):
        """
        Create a client. No network activity happens until the first call.

        Args:
            username: QRZ username
            password: QRZ password
            api_version: Protocol version, current by default
            config: Transport settings, defaults when omitted
            transport: Replacement transport (tests, custom HTTP stacks)
            classifier: Reason table, the default rules when omitted
        """
        self.api_version = api_version or ApiVersion.current()
        self.config = config or ClientConfig()
        self.username = username

        url = self.api_version.build_url(self.config.base_url)
        classifier = classifier or ReasonClassifier()
        transport = transport or CurlTransport(self.config)

        self._session = SessionManager(
            credentials=Credentials(username, password),
            authenticator=QrzAuthenticator(transport, url, self.config, classifier),
            transport=transport,
            url=url,
            config=self.config,
            classifier=classifier,
        )

        logger.debug(f"QRZ client using {url}")

    @classmethod
    def with_config(
        cls,
        username: str,
        password: str,
        api_version: ApiVersion,
        config: ClientConfig,
    ) -> "QrzXmlClient":
        return cls(username, password, api_version, config)

    @classmethod
    def from_settings(cls, settings: Settings) -> "QrzXmlClient":
        return cls(
            settings.username,
            settings.password,
            settings.api_version,
            settings.config,
        )

    @classmethod
    def from_config_file(cls, config_path: str | Path = "config.json") -> "QrzXmlClient":
        """Build a client from the "providers.qrz" section of a config file"""
        return cls.from_settings(load_settings(config_path))

    @property
    def url(self) -> str:
        return self._session.url

    @property
    def session_manager(self) -> SessionManager:
        return self._session

    # ==================== Session ====================

    async def authenticate(self) -> None:
        """Log in now instead of on the first lookup"""
        logger.info("Authenticating with QRZ.com")
        await self._session.login()

    async def reauthenticate(self) -> None:
        await self._session.reauthenticate()

    def is_authenticated(self) -> bool:
        return self._session.is_authenticated()

    def session_info(self) -> tuple[int | None, datetime | None] | None:
        return self._session.session_info()

    @property
    def session(self) -> Session | None:
        return self._session.session

    def restore_session(self, session: Session) -> None:
        self._session.restore_session(session)

    async def restore_from(self, store: SessionStore) -> bool:
        """Install a cached session from `store`; False when none is usable"""
        session = await store.load(self.username)
        if session is None:
            return False
        self._session.restore_session(session)
        return True

    async def persist_to(self, store: SessionStore) -> None:
        """Save the current session to `store`, if there is one"""
        session = self._session.session
        if session is not None:
            await store.save(self.username, session)

    # ==================== Lookups ====================

    async def lookup_callsign(self, callsign: str) -> CallsignInfo:
        """Look up a callsign record"""
        callsign = _normalize_callsign(callsign)
        logger.debug(f"Looking up callsign: {callsign}")

        envelope = await self._session.call("", {"callsign": callsign}, CallsignDecoder())
        if envelope.payload is None:
            raise UnexpectedResponse("No callsign data in response")

        logger.info(f"Looked up callsign: {envelope.payload.call}")
        return envelope.payload

    async def lookup_dxcc_entity(self, entity: int) -> DxccInfo:
        """Look up a DXCC entity by number"""
        if isinstance(entity, bool) or not isinstance(entity, int) or entity < 0:
            raise InvalidInput(f"DXCC entity must be a non-negative integer, got {entity!r}")
        logger.debug(f"Looking up DXCC entity: {entity}")

        envelope = await self._session.call("", {"dxcc": str(entity)}, DxccDecoder())
        if envelope.payload is None:
            raise UnexpectedResponse("No DXCC data in response")

        logger.info(f"Looked up DXCC entity: {entity} - {envelope.payload.name}")
        return envelope.payload

    async def lookup_dxcc_by_callsign(self, callsign: str) -> DxccInfo:
        """Look up the DXCC entity a callsign prefix belongs to"""
        callsign = _normalize_callsign(callsign)
        logger.debug(f"Looking up DXCC entity for callsign: {callsign}")

        envelope = await self._session.call("", {"dxcc": callsign}, DxccDecoder())
        if envelope.payload is None:
            raise UnexpectedResponse("No DXCC data in response")

        info = envelope.payload
        logger.info(f"Looked up DXCC entity for {callsign}: {info.dxcc} - {info.name}")
        return info

    async def lookup_all_dxcc_entities(self) -> list[DxccInfo]:
        """Fetch every DXCC entity; heavy on the server, use sparingly"""
        logger.warning("Fetching all DXCC entities")
        envelope = await self._session.call("", {"dxcc": "all"}, DxccListDecoder())
        if not envelope.payload:
            raise UnexpectedResponse("No DXCC data in response")
        return envelope.payload

    async def lookup_biography(self, callsign: str) -> BiographyData:
        """Fetch the biography HTML for a callsign"""
        callsign = _normalize_callsign(callsign)
        logger.debug(f"Fetching biography for callsign: {callsign}")

        envelope = await self._session.call("", {"html": callsign}, BiographyDecoder(callsign))
        if envelope.payload is None:
            raise UnexpectedResponse("No biography data in response")
        return envelope.payload

    async def lookup_callsigns(
        self, callsigns: list[str], concurrency: int = 5
    ) -> dict[str, CallsignInfo | QrzError]:
        """
        Look up many callsigns concurrently.

        Transport failures are retried up to config.max_retries times per
        callsign; every other error is returned in place of the record.
        """
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def one(callsign: str) -> CallsignInfo | QrzError:
            last_error: QrzError | None = None
            async with semaphore:
                for attempt in range(self.config.max_retries + 1):
                    try:
                        return await self.lookup_callsign(callsign)
                    except TransportError as e:
                        logger.warning(
                            f"Lookup of {callsign} failed (attempt {attempt + 1}): {e}"
                        )
                        last_error = e
                    except QrzError as e:
                        return e
            return last_error

        unique = list(dict.fromkeys(c.strip().upper() for c in callsigns))
        results = await asyncio.gather(*(one(c) for c in unique))
        return dict(zip(unique, results))
