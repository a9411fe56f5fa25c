"""QRZ XML response decoders"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import fields

from ...core.exceptions import DecodeError
from ...core.types import (
    BiographyData,
    CallsignInfo,
    DxccInfo,
    Envelope,
    ResponseStatus,
    SessionInfo,
)

logger = logging.getLogger(__name__)

# Error text that means the session or the credentials were rejected
AUTH_ERROR_MARKERS = ("session", "password", "username")
NO_SESSION_KEY = "No session key received"

# XML tag -> dataclass attribute where they differ
CALLSIGN_TAGS = {
    "class": "license_class",
    "MSA": "msa",
    "AreaCode": "area_code",
    "TimeZone": "time_zone",
    "GMTOffset": "gmt_offset",
    "DST": "dst",
}
CALLSIGN_INT_FIELDS = {"dxcc", "ccode", "u_views", "serial", "cqzone", "ituzone", "born"}
DXCC_INT_FIELDS = {"dxcc", "ituzone", "cqzone"}
FLOAT_FIELDS = {"lat", "lon"}


def _local(tag: str) -> str:
    """Strip the "{http://xmldata.qrz.com}" namespace prefix"""
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element) -> dict[str, str]:
    """Map child tag to stripped text, skipping empty elements"""
    values = {}
    for child in element:
        text = (child.text or "").strip()
        if text:
            values[_local(child.tag)] = text
    return values


def _find(root: ET.Element, name: str) -> ET.Element | None:
    for child in root:
        if _local(child.tag) == name:
            return child
    return None


def _find_all(root: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in root if _local(child.tag) == name]


def _number(record: str, name: str, value: str, cast: type):
    try:
        return cast(value)
    except ValueError:
        raise DecodeError(f"{record}.{name}: expected {cast.__name__}, got {value!r}")


def _build_record(
    cls: type,
    values: dict[str, str],
    renames: dict[str, str],
    int_fields: set[str],
):
    """Build a record dataclass from child-element text"""
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for tag, text in values.items():
        name = renames.get(tag, tag)
        if name not in known:
            continue
        if name in int_fields:
            kwargs[name] = _number(cls.__name__, name, text, int)
        elif name in FLOAT_FIELDS:
            kwargs[name] = _number(cls.__name__, name, text, float)
        else:
            kwargs[name] = text
    return cls(**kwargs)


def parse_session(element: ET.Element) -> SessionInfo:
    values = _children(element)
    count = values.get("Count")
    return SessionInfo(
        key=values.get("Key"),
        count=_number("Session", "Count", count, int) if count is not None else None,
        sub_exp=values.get("SubExp"),
        gm_time=values.get("GMTime"),
        message=values.get("Message"),
        error=values.get("Error"),
    )


def classify_status(session: SessionInfo) -> tuple[ResponseStatus, str | None]:
    """Derive the envelope status from the <Session> block"""
    if session.error is not None:
        text = session.error.lower()
        if any(marker in text for marker in AUTH_ERROR_MARKERS):
            return ResponseStatus.AUTH_ERROR, session.error
        return ResponseStatus.FAIL, session.error
    if session.key is None:
        return ResponseStatus.AUTH_ERROR, NO_SESSION_KEY
    return ResponseStatus.OK, None


def parse_root(body: bytes | str) -> ET.Element:
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        logger.error(f"[QRZ decode] Malformed XML: {e}")
        raise DecodeError(str(e)) from e
    if _local(root.tag) != "QRZDatabase":
        raise DecodeError(f"unexpected root element <{_local(root.tag)}>")
    return root


def parse_envelope(root: ET.Element) -> Envelope:
    """Read the session block and status; payload is left to the decoder"""
    session_el = _find(root, "Session")
    if session_el is None:
        raise DecodeError("missing <Session> block")
    session = parse_session(session_el)
    status, reason = classify_status(session)
    return Envelope(
        status=status,
        reason=reason,
        session=session,
        version=root.get("version"),
    )


def parse_callsign(element: ET.Element) -> CallsignInfo:
    values = _children(element)
    if "call" not in values:
        raise DecodeError("<Callsign> without <call>")
    return _build_record(CallsignInfo, values, CALLSIGN_TAGS, CALLSIGN_INT_FIELDS)


def parse_dxcc(element: ET.Element) -> DxccInfo:
    values = _children(element)
    if "dxcc" not in values or "name" not in values:
        raise DecodeError("<DXCC> without <dxcc> or <name>")
    return _build_record(DxccInfo, values, {}, DXCC_INT_FIELDS)


class LoginDecoder:
    """Login response: session block only"""

    def decode(self, body: bytes) -> Envelope:
        envelope = parse_envelope(parse_root(body))
        envelope.payload = envelope.session
        return envelope


class CallsignDecoder:
    """Callsign lookup; payload is CallsignInfo or None"""

    def decode(self, body: bytes) -> Envelope:
        root = parse_root(body)
        envelope = parse_envelope(root)
        element = _find(root, "Callsign")
        if element is not None:
            envelope.payload = parse_callsign(element)
        return envelope


class DxccDecoder:
    """Single DXCC lookup; payload is DxccInfo or None"""

    def decode(self, body: bytes) -> Envelope:
        root = parse_root(body)
        envelope = parse_envelope(root)
        element = _find(root, "DXCC")
        if element is not None:
            envelope.payload = parse_dxcc(element)
        return envelope


class DxccListDecoder:
    """dxcc=all; payload is a list of DxccInfo"""

    def decode(self, body: bytes) -> Envelope:
        root = parse_root(body)
        envelope = parse_envelope(root)
        envelope.payload = [parse_dxcc(el) for el in _find_all(root, "DXCC")]
        return envelope


class BiographyDecoder:
    """Biography comes back as HTML; errors still arrive as an XML envelope"""

    def __init__(self, callsign: str):
        self.callsign = callsign

    def decode(self, body: bytes) -> Envelope:
        text = body.decode("utf-8", errors="replace")
        if text.lstrip().startswith("<?xml"):
            try:
                root = parse_root(body)
            except DecodeError:
                logger.debug("[QRZ decode] Biography starts with <?xml but is not an envelope")
            else:
                envelope = parse_envelope(root)
                # The html response carries no key; only an explicit error counts
                if envelope.session.error is None:
                    envelope.status = ResponseStatus.OK
                    envelope.reason = None
                    envelope.payload = BiographyData(self.callsign, text)
                return envelope

        return Envelope(
            status=ResponseStatus.OK,
            payload=BiographyData(self.callsign, text),
        )
