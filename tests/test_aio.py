"""Tests for ``AsyncAppStoreConnectClient`` with a fake aiohttp session."""

from __future__ import annotations

import asyncio
import json
import logging

import aiohttp
import pytest  # type: ignore

from appstoreconnect_api_client import (
    ApiError,
    AsyncAppStoreConnectClient,
    Credentials,
    DecodeError,
    DeviceQuery,
    DevicesResponse,
    InvalidKeyError,
    ProfileCreateRequest,
    ProfileResponse,
    ProfileType,
    Request,
    TransportError,
    UsersResponse,
)
from appstoreconnect_api_client import auth
from tests.conftest import ISSUER_ID, KEY_ID
from tests.helpers import payloads
from tests.helpers.fake_http import FakeAioSession, FakeResponse, header


def make_client(credentials, clock, *replies) -> AsyncAppStoreConnectClient:
    return AsyncAppStoreConnectClient(
        credentials=credentials, session=FakeAioSession(*replies), clock=clock
    )


@pytest.mark.asyncio  # type: ignore
async def test_list_devices_preserves_query_order(credentials, clock) -> None:
    client = make_client(
        credentials, clock, FakeResponse(200, payloads.devices_page(payloads.device()))
    )

    request = Request(
        "GET",
        "/v1/devices",
        query=[("limit", "10"), ("filter[name]", "mini")],
        result=DevicesResponse,
    )
    page = await client.send(request)

    assert request.query == (("limit", "10"), ("filter[name]", "mini"))
    assert isinstance(page, DevicesResponse)
    (call,) = client._session.calls
    assert call["url"] == (
        "https://api.appstoreconnect.apple.com/v1/devices?limit=10&filter%5Bname%5D=mini"
    )
    assert header(call, "Authorization").startswith("Bearer ")
    assert call["timeout"].total == 60.0


@pytest.mark.asyncio  # type: ignore
async def test_create_profile_posts_body(credentials, clock) -> None:
    client = make_client(credentials, clock, FakeResponse(201, {"data": payloads.profile()}))

    profile = await client.create_profile(
        ProfileCreateRequest.build(
            "profileName", ProfileType.IOS_APP_ADHOC, "FJXB650000", ["87792Q0000"], ["25D9760000"]
        )
    )

    assert isinstance(profile, ProfileResponse)
    (call,) = client._session.calls
    assert call["method"] == "POST"
    assert header(call, "Content-Type") == "application/json"
    assert json.loads(call["data"])["data"]["type"] == "profiles"


@pytest.mark.asyncio  # type: ignore
async def test_error_envelope_raises_api_error(credentials, clock) -> None:
    client = make_client(
        credentials, clock, FakeResponse(401, payloads.errors(401, "NOT_AUTHORIZED"))
    )

    with pytest.raises(ApiError) as excinfo:
        await client.list_users()

    assert excinfo.value.status == 401
    assert excinfo.value.codes == ["NOT_AUTHORIZED"]


@pytest.mark.asyncio  # type: ignore
async def test_unparseable_error_raises_decode_error(credentials, clock) -> None:
    client = make_client(credentials, clock, FakeResponse(503, "Service Unavailable"))

    with pytest.raises(DecodeError) as excinfo:
        await client.list_apps()

    assert excinfo.value.status == 503
    assert excinfo.value.body == "Service Unavailable"


@pytest.mark.asyncio  # type: ignore
@pytest.mark.parametrize(
    "failure", [aiohttp.ClientConnectionError("reset"), asyncio.TimeoutError()]
)
async def test_transport_failures_are_wrapped(credentials, clock, failure) -> None:
    client = make_client(credentials, clock, failure)

    with pytest.raises(TransportError):
        await client.list_certificates()


@pytest.mark.asyncio  # type: ignore
async def test_invalid_key_fails_without_network_call(clock) -> None:
    client = make_client(
        Credentials(ISSUER_ID, KEY_ID, b"random bytes, not a key"),
        clock,
        FakeResponse(200, payloads.devices_page()),
    )

    with pytest.raises(InvalidKeyError):
        await client.list_devices()

    assert client._session.calls == []


@pytest.mark.asyncio  # type: ignore
async def test_concurrent_calls_share_one_token(credentials, clock, monkeypatch) -> None:
    signed = []
    real_sign = auth.sign_token

    def counting_sign(*args, **kwargs):
        signed.append(1)
        return real_sign(*args, **kwargs)

    monkeypatch.setattr(auth, "sign_token", counting_sign)
    replies = [FakeResponse(200, payloads.devices_page()) for _ in range(5)]
    client = make_client(credentials, clock, *replies)

    await asyncio.gather(*(client.list_devices(DeviceQuery(limit=5)) for _ in range(5)))

    tokens = {header(call, "Authorization") for call in client._session.calls}
    assert len(signed) == 1
    assert len(tokens) == 1


@pytest.mark.asyncio  # type: ignore
async def test_next_page(credentials, clock) -> None:
    next_url = f"{payloads.API}/v1/users?cursor=Mg"
    first_doc = {"data": [payloads.user()], "links": {"self": "x", "next": next_url}}
    last_doc = {"data": [payloads.user("u2")], "links": {"self": next_url}}
    client = make_client(credentials, clock, FakeResponse(200, first_doc), FakeResponse(200, last_doc))

    first = await client.list_users()
    second = await client.next_page(first)

    assert isinstance(second, UsersResponse)
    assert second.data[0].id == "u2"
    assert client._session.calls[1]["url"] == next_url
    assert await client.next_page(second) is None


@pytest.mark.asyncio  # type: ignore
async def test_delete_and_close(credentials, clock) -> None:
    session = FakeAioSession(FakeResponse(204))
    async with AsyncAppStoreConnectClient(
        credentials=credentials, session=session, clock=clock
    ) as client:
        assert await client.remove_user("u1") is None
    assert session.calls[0]["method"] == "DELETE"
    # Sessions supplied by the caller stay open
    assert session.closed is False


@pytest.mark.asyncio  # type: ignore
async def test_undecodable_error_body_raises_decode_error(credentials, clock) -> None:
    client = make_client(
        credentials, clock, FakeResponse(502, "Passerelle défaillante".encode("latin-1"))
    )

    with pytest.raises(DecodeError) as excinfo:
        await client.list_apps()

    assert excinfo.value.status == 502
    assert excinfo.value.body == "Passerelle d\ufffdfaillante"


@pytest.mark.asyncio  # type: ignore
async def test_debug_log_omits_query_values(credentials, clock, caplog) -> None:
    client = make_client(credentials, clock, FakeResponse(200, payloads.devices_page()))

    with caplog.at_level(logging.DEBUG, logger="appstoreconnect_api_client"):
        await client.list_devices(DeviceQuery(filter_udid="00008020-000000000000002E"))

    assert "GET /v1/devices returned 200" in caplog.text
    assert "00008020" not in caplog.text
