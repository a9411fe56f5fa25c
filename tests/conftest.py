"""Shared fixtures: canned QRZ responses and a scripted transport"""

import asyncio

import pytest

from qrzxml import ApiVersion, ClientConfig, QrzXmlClient
from qrzxml.core.exceptions import TransportError

LOGIN_OK = """<?xml version="1.0" ?>
<QRZDatabase version="1.34" xmlns="http://xmldata.qrz.com">
  <Session>
    <Key>{key}</Key>
    <Count>{count}</Count>
    <SubExp>Wed Jan 1 12:34:03 2025</SubExp>
    <GMTime>Sun Aug 16 03:51:47 2024</GMTime>
  </Session>
</QRZDatabase>"""

LOGIN_BAD_PASSWORD = """<?xml version="1.0" ?>
<QRZDatabase version="1.34">
  <Session>
    <Error>Username/password incorrect</Error>
    <GMTime>Sun Aug 16 03:56:47 2024</GMTime>
  </Session>
</QRZDatabase>"""

CALLSIGN_AA7BQ = """<?xml version="1.0" ?>
<QRZDatabase version="1.34" xmlns="http://xmldata.qrz.com">
  <Callsign>
    <call>AA7BQ</call>
    <aliases>N6UFT,KJ6RK</aliases>
    <dxcc>291</dxcc>
    <fname>FRED</fname>
    <name>LLOYD</name>
    <addr1>123 TEST ST</addr1>
    <addr2>TESTVILLE</addr2>
    <state>AZ</state>
    <country>United States</country>
    <lat>34.12345</lat>
    <lon>-112.12345</lon>
    <grid>DM32af</grid>
    <class>E</class>
    <eqsl>Y</eqsl>
    <mqsl>N</mqsl>
    <lotw>Y</lotw>
    <cqzone>3</cqzone>
    <ituzone>2</ituzone>
    <TimeZone>Mountain</TimeZone>
    <nickname>Test Op</nickname>
  </Callsign>
  <Session>
    <Key>{key}</Key>
    <Count>43</Count>
    <SubExp>Wed Jan 1 12:34:03 2025</SubExp>
  </Session>
</QRZDatabase>"""

DXCC_291 = """<?xml version="1.0" ?>
<QRZDatabase version="1.34">
  <DXCC>
    <dxcc>291</dxcc>
    <cc>US</cc>
    <ccc>USA</ccc>
    <name>United States</name>
    <continent>NA</continent>
    <ituzone>6</ituzone>
    <cqzone>3</cqzone>
    <timezone>-5</timezone>
    <lat>37.788081</lat>
    <lon>-97.470703</lon>
  </DXCC>
  <Session>
    <Key>{key}</Key>
    <Count>44</Count>
  </Session>
</QRZDatabase>"""

NOT_FOUND = """<?xml version="1.0" ?>
<QRZDatabase version="1.34">
  <Session>
    <Error>Not found: {call}</Error>
    <Key>{key}</Key>
  </Session>
</QRZDatabase>"""

SESSION_TIMEOUT = """<?xml version="1.0" ?>
<QRZDatabase version="1.34">
  <Session>
    <Error>Session Timeout</Error>
  </Session>
</QRZDatabase>"""

SUBSCRIPTION_REQUIRED = """<?xml version="1.0" ?>
<QRZDatabase version="1.34">
  <Session>
    <Error>A subscription is required to access the complete record.</Error>
    <Key>{key}</Key>
  </Session>
</QRZDatabase>"""


def login_ok(key: str = "ABC123", count: int = 42) -> str:
    return LOGIN_OK.format(key=key, count=count)


class FakeTransport:
    """Scripted transport

    Login requests (those carrying "username") and data requests are served
    from separate queues; the last entry repeats. An entry may be a body,
    an exception to raise, or a callable taking the params.
    """

    def __init__(self, login=None, data=None, login_delay: float = 0.0):
        self.requests: list[tuple[str, str, dict]] = []
        self.login_bodies = list(login or [login_ok()])
        self.data_bodies = list(data or [])
        self.login_delay = login_delay

    async def send(self, method, url, params, timeout):
        params = dict(params)
        self.requests.append((method, url, params))
        if "username" in params:
            if self.login_delay:
                await asyncio.sleep(self.login_delay)
            entry = self._next(self.login_bodies)
        else:
            await asyncio.sleep(0)
            entry = self._next(self.data_bodies)

        if callable(entry):
            entry = entry(params)
        if isinstance(entry, Exception):
            raise entry
        return entry.encode("utf-8")

    @staticmethod
    def _next(queue):
        if not queue:
            raise TransportError("no scripted response")
        return queue.pop(0) if len(queue) > 1 else queue[0]

    @property
    def logins(self) -> list[dict]:
        return [p for _, _, p in self.requests if "username" in p]

    @property
    def data_requests(self) -> list[dict]:
        return [p for _, _, p in self.requests if "username" not in p]


TEST_CONFIG = ClientConfig(
    base_url="http://qrz.test/xml",
    user_agent="qrz-test/1.0",
    timeout_seconds=5,
    max_retries=1,
)


def make_client(transport: FakeTransport, **kwargs) -> QrzXmlClient:
    return QrzXmlClient(
        "testuser",
        "testpass",
        kwargs.pop("api_version", ApiVersion.current()),
        kwargs.pop("config", TEST_CONFIG),
        transport=transport,
        **kwargs,
    )


@pytest.fixture
def transport():
    return FakeTransport()
