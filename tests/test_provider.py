"""Lookup methods on QrzXmlClient"""

import asyncio
import logging

import pytest

from conftest import (
    CALLSIGN_AA7BQ,
    DXCC_291,
    NOT_FOUND,
    SESSION_TIMEOUT,
    SUBSCRIPTION_REQUIRED,
    TEST_CONFIG,
    FakeTransport,
    login_ok,
    make_client,
)
from qrzxml import (
    ApiVersion,
    CallsignNotFound,
    DxccNotFound,
    InvalidInput,
    JsonFileSessionStore,
    QrzXmlClient,
    SubscriptionRequired,
    TransportError,
    UnexpectedResponse,
)


def test_default_construction_uses_current_endpoint():
    client = QrzXmlClient("user", "pass", transport=FakeTransport())
    assert client.url == "https://xmldata.qrz.com/xml/current/"
    assert client.is_authenticated() is False


def test_with_config_legacy_endpoint():
    configured = QrzXmlClient.with_config("u", "p", ApiVersion.legacy(), TEST_CONFIG)
    assert configured.url == "http://qrz.test/xml"

    transport = FakeTransport(data=[DXCC_291.format(key="ABC123")])
    client = make_client(transport, api_version=ApiVersion.legacy())

    asyncio.run(client.lookup_dxcc_entity(291))

    assert {url for _, url, _ in transport.requests} == {"http://qrz.test/xml"}


def test_lookup_dxcc_entity():
    transport = FakeTransport(data=[DXCC_291.format(key="ABC123")])
    client = make_client(transport)

    info = asyncio.run(client.lookup_dxcc_entity(291))

    assert info.name == "United States"
    assert transport.data_requests == [{"dxcc": "291", "s": "ABC123"}]


def test_lookup_dxcc_by_callsign():
    transport = FakeTransport(data=[DXCC_291.format(key="ABC123")])
    client = make_client(transport)

    info = asyncio.run(client.lookup_dxcc_by_callsign("w1aw"))

    assert info.dxcc == 291
    assert transport.data_requests[0]["dxcc"] == "W1AW"


def test_dxcc_not_found():
    transport = FakeTransport(data=[NOT_FOUND.format(call="999", key="ABC123")])
    client = make_client(transport)

    with pytest.raises(DxccNotFound) as exc:
        asyncio.run(client.lookup_dxcc_entity(999))

    assert exc.value.entity == "999"


def test_lookup_all_dxcc_entities():
    body = """<QRZDatabase>
      <DXCC><dxcc>1</dxcc><name>Canada</name></DXCC>
      <DXCC><dxcc>291</dxcc><name>United States</name></DXCC>
      <Session><Key>ABC123</Key></Session>
    </QRZDatabase>"""
    transport = FakeTransport(data=[body])
    client = make_client(transport)

    entities = asyncio.run(client.lookup_all_dxcc_entities())

    assert [e.name for e in entities] == ["Canada", "United States"]
    assert transport.data_requests[0]["dxcc"] == "all"


def test_biography_retries_after_session_timeout():
    transport = FakeTransport(
        login=[login_ok("OLD"), login_ok("NEW")],
        data=[SESSION_TIMEOUT, "<html><p>Hello from AA7BQ</p></html>"],
    )
    client = make_client(transport)

    bio = asyncio.run(client.lookup_biography("aa7bq"))

    assert bio.callsign == "AA7BQ"
    assert "Hello from AA7BQ" in bio.html
    assert [p["html"] for p in transport.data_requests] == ["AA7BQ", "AA7BQ"]


def test_subscription_required():
    transport = FakeTransport(data=[SUBSCRIPTION_REQUIRED.format(key="ABC123")])
    client = make_client(transport)

    with pytest.raises(SubscriptionRequired) as exc:
        asyncio.run(client.lookup_callsign("AA7BQ"))

    assert exc.value.is_permission_error


def test_ok_envelope_without_record():
    transport = FakeTransport(data=[login_ok("ABC123")])
    client = make_client(transport)

    with pytest.raises(UnexpectedResponse):
        asyncio.run(client.lookup_callsign("AA7BQ"))


@pytest.mark.parametrize("callsign", ["", "   "])
def test_empty_callsign_rejected_before_network(callsign):
    transport = FakeTransport()
    client = make_client(transport)

    with pytest.raises(InvalidInput):
        asyncio.run(client.lookup_callsign(callsign))
    with pytest.raises(InvalidInput):
        asyncio.run(client.lookup_biography(callsign))

    assert transport.requests == []


@pytest.mark.parametrize("entity", [-1, True, "291"])
def test_bad_dxcc_entity_rejected(entity):
    transport = FakeTransport()
    client = make_client(transport)

    with pytest.raises(InvalidInput):
        asyncio.run(client.lookup_dxcc_entity(entity))

    assert transport.requests == []


def test_lookup_callsigns_mixes_records_and_errors():
    def respond(params):
        if params["callsign"] == "AA7BQ":
            return CALLSIGN_AA7BQ.format(key="ABC123")
        return NOT_FOUND.format(call=params["callsign"], key="ABC123")

    transport = FakeTransport(data=[respond])
    client = make_client(transport)

    results = asyncio.run(client.lookup_callsigns(["aa7bq", "BADCALL", "AA7BQ"]))

    assert list(results) == ["AA7BQ", "BADCALL"]
    assert results["AA7BQ"].call == "AA7BQ"
    assert isinstance(results["BADCALL"], CallsignNotFound)
    assert len(transport.logins) == 1


def test_lookup_callsigns_retries_transport_errors():
    transport = FakeTransport(
        data=[TransportError("reset"), CALLSIGN_AA7BQ.format(key="ABC123")]
    )
    client = make_client(transport)

    results = asyncio.run(client.lookup_callsigns(["AA7BQ"]))

    assert results["AA7BQ"].call == "AA7BQ"
    assert len(transport.data_requests) == 2


def test_lookup_callsigns_gives_up_after_max_retries():
    transport = FakeTransport(data=[TransportError("down")])
    client = make_client(transport)

    results = asyncio.run(client.lookup_callsigns(["AA7BQ"]))

    assert isinstance(results["AA7BQ"], TransportError)
    assert len(transport.data_requests) == TEST_CONFIG.max_retries + 1


def test_session_round_trip_through_store(tmp_path):
    store = JsonFileSessionStore(tmp_path / "sessions.json")
    first = make_client(FakeTransport(login=[login_ok("PERSISTED", count=5)]))

    async def save():
        await first.authenticate()
        await first.persist_to(store)

    asyncio.run(save())

    transport = FakeTransport(data=[CALLSIGN_AA7BQ.format(key="PERSISTED")])
    second = make_client(transport)

    assert asyncio.run(second.restore_from(store)) is True
    asyncio.run(second.lookup_callsign("AA7BQ"))

    assert transport.logins == []
    assert transport.data_requests[0]["s"] == "PERSISTED"


def test_credentials_never_logged(caplog):
    transport = FakeTransport(data=[CALLSIGN_AA7BQ.format(key="ABC123")])
    client = make_client(transport)

    with caplog.at_level(logging.DEBUG, logger="qrzxml"):
        asyncio.run(client.authenticate())
        asyncio.run(client.lookup_callsign("AA7BQ"))

    assert caplog.records
    for record in caplog.records:
        assert "testuser" not in record.getMessage()
        assert "testpass" not in record.getMessage()
