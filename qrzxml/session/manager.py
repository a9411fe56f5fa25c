"""Session manager: login, token cache and transparent re-authentication"""

import asyncio
import concurrent.futures
import logging
import threading
from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime
from urllib.parse import urljoin

from ..auth.base import Authenticator
from ..client.base import Transport
from ..core.exceptions import AuthenticationFailed, SessionExpired
from ..core.reasons import ReasonClassifier
from ..core.types import ClientConfig, Credentials, Envelope, ResponseStatus, Session
from ..parser.base import ResponseDecoder

logger = logging.getLogger(__name__)

SESSION_PARAM = "s"


class SessionManager:
    """Owns the credentials and the single cached session

    The session slot and the in-flight login are guarded by a thread lock
    that is never held across an await, so one manager can be shared by
    many tasks and by several threads each running its own event loop.

    Only one login runs at a time. Callers that find the session missing
    while a login is in flight wait for that login and see its outcome.
    The login runs in its own task, so cancelling a waiter never cancels
    the login the other waiters depend on. If the loop that owns the login
    task shuts down first, the remaining waiters start a fresh login on
    their own loops.
    """

    def __init__(
        self,
        credentials: Credentials,
        authenticator: Authenticator,
        transport: Transport,
        url: str,
        config: ClientConfig,
        classifier: ReasonClassifier | None = None,
    ):
        self._credentials = credentials
        self._authenticator = authenticator
        self._transport = transport
        self._url = url
        self._config = config
        self._classifier = classifier or ReasonClassifier()

        self._lock = threading.Lock()
        self._session: Session | None = None
        self._login: concurrent.futures.Future | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def url(self) -> str:
        return self._url

    @property
    def session(self) -> Session | None:
        """Current session snapshot, for callers that persist the token"""
        with self._lock:
            return self._session

    def is_authenticated(self) -> bool:
        return self.session is not None

    def session_info(self) -> tuple[int | None, datetime | None] | None:
        """(lookups today, subscription expiration), or None before login"""
        session = self.session
        if session is None:
            return None
        return session.lookups_today, session.subscription_expiration

    def restore_session(self, session: Session) -> None:
        """Install a session obtained from external storage"""
        with self._lock:
            self._session = session
        logger.info("Restored cached session")

    def invalidate(self, token: str | None = None) -> bool:
        """Drop the session; with `token`, only if it is still the cached one"""
        with self._lock:
            if self._session is None:
                return False
            if token is not None and self._session.token != token:
                return False
            self._session = None
            return True

    async def ensure_session(self) -> Session:
        """Return the cached session, logging in (or joining a login) if absent"""
        with self._lock:
            if self._session is not None:
                return self._session
            future = self._login or self._start_login()
        return await self._wait(future)

    async def login(self) -> Session:
        """Log in and replace the cached session"""
        with self._lock:
            future = self._login or self._start_login()
        return await self._wait(future)

    async def reauthenticate(self) -> Session:
        """Drop any cached session and log in again"""
        self.invalidate()
        logger.info("Forcing re-authentication")
        return await self.login()

    async def call(
        self,
        endpoint: str,
        params: Mapping[str, str],
        decoder: ResponseDecoder,
    ) -> Envelope:
        """Send an authenticated request and return the decoded envelope

        `endpoint` is joined onto the client URL; "" targets the URL itself.
        A rejected session is re-established once and the request repeated
        once. A second rejection, or any FAIL, raises the classified error.
        """
        url = urljoin(self._url, endpoint) if endpoint else self._url
        session = await self.ensure_session()

        try:
            return await self._attempt(url, params, decoder, session)
        except SessionExpired as e:
            logger.warning(f"Session rejected ({e.reason}), re-authenticating")
            self.invalidate(session.token)

        session = await self.ensure_session()
        try:
            return await self._attempt(url, params, decoder, session)
        except SessionExpired as e:
            logger.error(f"Session rejected again after fresh login: {e.reason}")
            raise self._classifier.classify(
                e.reason, params, default=AuthenticationFailed
            ) from None

    async def _attempt(
        self,
        url: str,
        params: Mapping[str, str],
        decoder: ResponseDecoder,
        session: Session,
    ) -> Envelope:
        query = {**params, SESSION_PARAM: session.token}
        body = await self._transport.send(
            "GET", url, query, self._config.timeout_seconds
        )
        envelope = decoder.decode(body)
        self._record_count(session.token, envelope.session.count)

        if envelope.status is ResponseStatus.OK:
            return envelope
        if envelope.status is ResponseStatus.AUTH_ERROR:
            raise SessionExpired(envelope.reason)
        raise self._classifier.classify(envelope.reason, params)

    def _record_count(self, token: str, count: int | None) -> None:
        if count is None:
            return
        with self._lock:
            if self._session is not None and self._session.token == token:
                self._session = replace(self._session, lookups_today=count)

    def _start_login(self) -> concurrent.futures.Future:
        # Caller holds self._lock
        future: concurrent.futures.Future = concurrent.futures.Future()
        self._login = future
        task = asyncio.get_running_loop().create_task(self._run_login(future))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return future

    async def _run_login(self, future: concurrent.futures.Future) -> None:
        try:
            session = await self._authenticator.login(self._credentials)
        except asyncio.CancelledError:
            self._finish_login(future)
            future.cancel()
            raise
        except Exception as e:
            self._finish_login(future)
            future.set_exception(e)
        else:
            self._finish_login(future, session)
            future.set_result(session)

    def _finish_login(
        self, future: concurrent.futures.Future, session: Session | None = None
    ) -> None:
        with self._lock:
            if self._login is future:
                self._login = None
            if session is not None:
                self._session = session

    async def _wait(self, future: concurrent.futures.Future) -> Session:
        while True:
            try:
                return await asyncio.shield(asyncio.wrap_future(future))
            except asyncio.CancelledError:
                task = asyncio.current_task()
                if not future.cancelled() or (task is not None and task.cancelling()):
                    raise

            # The login was cancelled with its owning loop, not by this waiter
            logger.warning("Shared login abandoned by its event loop, logging in again")
            with self._lock:
                if self._session is not None:
                    return self._session
                future = self._login or self._start_login()
