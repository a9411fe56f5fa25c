"""QRZ HTTP transport"""

import logging
from collections.abc import Mapping

from curl_cffi import CurlError
from curl_cffi.requests import AsyncSession

from ...core.exceptions import TransportError
from ...core.types import ClientConfig

logger = logging.getLogger(__name__)

BASE_HEADERS = {
    "Accept": "text/xml, application/xml, text/html",
    "Accept-Encoding": "gzip",
    "accept-charset": "UTF-8",
}


class CurlTransport:
    """curl_cffi transport; one AsyncSession per request"""

    def __init__(self, config: ClientConfig):
        self._headers = {**BASE_HEADERS, "User-Agent": config.user_agent}

    async def send(
        self,
        method: str,
        url: str,
        params: Mapping[str, str],
        timeout: float,
    ) -> bytes:
        """Send request, return body bytes"""
        try:
            async with AsyncSession(headers=self._headers) as session:
                resp = await session.request(
                    method.upper(),
                    url,
                    params=dict(params),
                    timeout=timeout,
                )
        except CurlError as e:
            logger.warning(f"[QRZ transport] {method} {url} failed: {e}")
            raise TransportError(str(e)) from e

        if resp.status_code >= 400:
            logger.warning(f"[QRZ transport] {method} {url} returned {resp.status_code}")
            raise TransportError(
                f"{method} {url} failed", status_code=resp.status_code
            )

        logger.debug(f"[QRZ transport] {resp.status_code}, {len(resp.content)} bytes")
        return resp.content
