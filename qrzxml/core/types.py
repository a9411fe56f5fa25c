"""Core data types for the QRZ XML client"""

import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any
from urllib.parse import urljoin

from .exceptions import InvalidApiVersion

__version__ = "0.1.0"

DEFAULT_BASE_URL = "https://xmldata.qrz.com/xml"
DEFAULT_USER_AGENT = f"qrzxml-py/{__version__}"

SUBEXP_FORMAT = "%a %b %d %H:%M:%S %Y"  # e.g. "Wed Jan 1 12:34:03 2025"

_VERSION_RE = re.compile(r"^\d+(\.\d+)*$")


class ResponseStatus(Enum):
    """Status discriminant carried by every decoded envelope"""

    OK = auto()
    AUTH_ERROR = auto()  # Session or credentials rejected
    FAIL = auto()  # Any other server-reported error


@dataclass(frozen=True)
class ApiVersion:
    """Protocol version placed in the request path"""

    version: str | None = "current"  # None means legacy (no version segment)

    @classmethod
    def current(cls) -> "ApiVersion":
        return cls("current")

    @classmethod
    def legacy(cls) -> "ApiVersion":
        return cls(None)

    @classmethod
    def specific(cls, version: str) -> "ApiVersion":
        version = str(version or "").strip()
        if not _VERSION_RE.match(version):
            raise InvalidApiVersion(version)
        return cls(version)

    @classmethod
    def parse(cls, value: str | None) -> "ApiVersion":
        """Build from a config/CLI value: "current", "legacy" or "1.34" """
        if value is None or value == "current":
            return cls.current()
        if value in ("legacy", ""):
            return cls.legacy()
        return cls.specific(value)

    @property
    def is_legacy(self) -> bool:
        return self.version is None

    def build_url(self, base_url: str) -> str:
        """Resolve the endpoint URL for this version

        "https://xmldata.qrz.com/xml" becomes ".../xml/current/" or
        ".../xml/1.34/"; legacy keeps the base as given.
        """
        base = base_url.rstrip("/")
        if self.is_legacy:
            return base
        return urljoin(base, f"xml/{self.version}/")

    def __str__(self) -> str:
        return self.version or ""


@dataclass(frozen=True)
class Credentials:
    """Login credentials, immutable for the client's lifetime"""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class ClientConfig:
    """Transport configuration snapshot"""

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = 30.0
    max_retries: int = 3  # Caller-level retries of TransportError in bulk lookups


def parse_subscription_date(value: str | None) -> datetime | None:
    """Parse the SubExp field; "non-subscriber" and friends give None"""
    if not value:
        return None
    try:
        return datetime.strptime(" ".join(value.split()), SUBEXP_FORMAT)
    except ValueError:
        return None


@dataclass(frozen=True)
class Session:
    """Server-issued session key plus the metadata returned with it"""

    token: str
    lookups_today: int | None = None
    subscription_raw: str | None = None
    obtained_at: float = field(default_factory=time.time)

    @property
    def subscription_expiration(self) -> datetime | None:
        return parse_subscription_date(self.subscription_raw)


@dataclass
class SessionInfo:
    """The <Session> block present in every response"""

    key: str | None = None
    count: int | None = None
    sub_exp: str | None = None
    gm_time: str | None = None
    message: str | None = None
    error: str | None = None

    @property
    def has_valid_session(self) -> bool:
        return self.key is not None

    @property
    def has_error(self) -> bool:
        return self.error is not None


@dataclass
class Envelope:
    """Decoded response: status, reason and the endpoint-specific payload"""

    status: ResponseStatus
    reason: str | None = None
    session: SessionInfo = field(default_factory=SessionInfo)
    payload: Any = None
    version: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ResponseStatus.OK


def _yes(value: str | None) -> bool | None:
    if value is None:
        return None
    return value.strip().lower() == "y"


@dataclass
class CallsignInfo:
    """Callsign record"""

    call: str
    xref: str | None = None  # Call that was queried when it differs from `call`
    aliases: str | None = None
    dxcc: int | None = None
    fname: str | None = None
    name: str | None = None
    addr1: str | None = None
    addr2: str | None = None
    state: str | None = None
    zip: str | None = None
    country: str | None = None
    ccode: int | None = None
    lat: float | None = None
    lon: float | None = None
    grid: str | None = None
    county: str | None = None
    fips: str | None = None
    land: str | None = None
    efdate: str | None = None
    expdate: str | None = None
    p_call: str | None = None
    license_class: str | None = None  # <class>
    codes: str | None = None
    qslmgr: str | None = None
    email: str | None = None
    url: str | None = None
    u_views: int | None = None
    bio: str | None = None
    biodate: str | None = None
    image: str | None = None
    imageinfo: str | None = None
    serial: int | None = None
    moddate: str | None = None
    msa: str | None = None
    area_code: str | None = None
    time_zone: str | None = None
    gmt_offset: str | None = None
    dst: str | None = None
    eqsl: str | None = None
    mqsl: str | None = None
    cqzone: int | None = None
    ituzone: int | None = None
    born: int | None = None
    user: str | None = None
    lotw: str | None = None
    iota: str | None = None
    geoloc: str | None = None
    attn: str | None = None
    nickname: str | None = None
    name_fmt: str | None = None

    def full_name(self) -> str | None:
        parts = [p for p in (self.fname, self.name) if p]
        return " ".join(parts) if parts else None

    def coordinates(self) -> tuple[float, float] | None:
        if self.lat is None or self.lon is None:
            return None
        return self.lat, self.lon

    def accepts_eqsl(self) -> bool | None:
        return _yes(self.eqsl)

    def returns_paper_qsl(self) -> bool | None:
        return _yes(self.mqsl)

    def accepts_lotw(self) -> bool | None:
        return _yes(self.lotw)


@dataclass
class DxccInfo:
    """DXCC entity record"""

    dxcc: int
    name: str
    cc: str | None = None  # ISO-3166 alpha-2
    ccc: str | None = None  # ISO-3166 alpha-3
    continent: str | None = None
    ituzone: int | None = None
    cqzone: int | None = None
    timezone: str | None = None
    lat: float | None = None
    lon: float | None = None
    notes: str | None = None

    def coordinates(self) -> tuple[float, float] | None:
        if self.lat is None or self.lon is None:
            return None
        return self.lat, self.lon

    def timezone_hours(self) -> float | None:
        """UTC offset in hours; "545" means +5:45"""
        if not self.timezone:
            return None
        tz = self.timezone.strip()
        sign = -1 if tz.startswith("-") else 1
        digits = tz.lstrip("+-")
        if len(digits) >= 3 and digits.isdigit():
            return sign * (int(digits[:-2]) + int(digits[-2:]) / 60)
        try:
            return sign * float(digits)
        except ValueError:
            return None


@dataclass
class BiographyData:
    """Biography HTML for a callsign"""

    callsign: str
    html_content: str

    @property
    def html(self) -> str:
        return self.html_content

    def is_empty(self) -> bool:
        return not self.html_content.strip()
