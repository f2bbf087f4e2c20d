"""
backend/tests/test_royale_api_gateway.py

Purpose:
    URL construction, credential injection and verbatim status/body relay of
    the Clash Royale API gateway, against an httpx.MockTransport upstream.
"""

from __future__ import annotations

import sys

import httpx
import pytest

sys.path.insert(0, "backend")

from clash_hub.errors import ConfigurationError, TransportError
from clash_hub.models.proxy import ProxyRequest, UpstreamReply
from clash_hub.providers.http_client import UpstreamClient
from clash_hub.providers.royale_api import RoyaleApiGateway, build_upstream_url, encode_tag_segment

BASE = "https://proxy.royaleapi.dev/v1"


@pytest.mark.parametrize(
    ("request_kwargs", "expected"),
    [
        ({"resource": "players", "tag": "9Q2YJ0U"}, f"{BASE}/players/%239Q2YJ0U"),
        ({"resource": "/players", "tag": "#9Q2YJ0U", "battlelog": True}, f"{BASE}/players/%239Q2YJ0U/battlelog"),
        ({"resource": "clans", "name": "The Crushers"}, f"{BASE}/clans?name=The%20Crushers"),
        (
            {"resource": "clans", "name": "Legends", "location_id": "57000249"},
            f"{BASE}/clans?name=Legends&locationId=57000249",
        ),
        ({"resource": "cards"}, f"{BASE}/cards"),
    ],
)
def test_build_upstream_url(request_kwargs, expected):
    assert build_upstream_url(BASE + "/", ProxyRequest(**request_kwargs)) == expected


def test_tag_segment_encodes_marker_once():
    assert encode_tag_segment("#ABC") == "%23ABC"
    assert encode_tag_segment("A/B") == "%23A%2FB"


def _gateway(handler, token="secret-token") -> RoyaleApiGateway:
    client = UpstreamClient("test", transport=httpx.MockTransport(handler))
    return RoyaleApiGateway(client=client, base_url=BASE, token=token)


@pytest.mark.asyncio
async def test_player_lookup_injects_bearer_token():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"tag": "#9Q2YJ0U", "name": "Ash"})

    gateway = _gateway(handler)
    try:
        reply = await gateway.relay(ProxyRequest(resource="players", tag="9Q2YJ0U"))
    finally:
        await gateway.aclose()

    assert reply.status == 200
    assert reply.parsed() == (True, {"tag": "#9Q2YJ0U", "name": "Ash"})
    assert seen[0].url.raw_path == b"/v1/players/%239Q2YJ0U"
    assert seen[0].headers["Authorization"] == "Bearer secret-token"
    assert seen[0].headers["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_upstream_error_status_and_body_pass_through():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"reason": "notFound"})

    gateway = _gateway(handler)
    try:
        reply = await gateway.relay(ProxyRequest(resource="players", tag="NOPE"))
    finally:
        await gateway.aclose()

    assert reply.status == 404
    assert not reply.ok
    assert reply.parsed() == (True, {"reason": "notFound"})


@pytest.mark.asyncio
async def test_non_json_body_is_kept_as_text():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway", headers={"content-type": "text/plain"})

    gateway = _gateway(handler)
    try:
        reply = await gateway.relay(ProxyRequest(resource="clans", name="x"))
    finally:
        await gateway.aclose()

    assert reply.parsed() == (False, "Bad Gateway")
    assert reply.content_type.startswith("text/plain")


@pytest.mark.asyncio
async def test_missing_token_fails_before_network():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    gateway = _gateway(handler, token="  ")
    try:
        with pytest.raises(ConfigurationError):
            await gateway.relay(ProxyRequest(resource="players", tag="ABC"))
    finally:
        await gateway.aclose()

    assert calls == []


@pytest.mark.asyncio
async def test_unreachable_upstream_is_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    gateway = _gateway(handler)
    try:
        with pytest.raises(TransportError):
            await gateway.relay(ProxyRequest(resource="players", tag="ABC"))
    finally:
        await gateway.aclose()


@pytest.mark.parametrize("body", ['{"x": NaN}', "[Infinity]", "-Infinity"])
def test_reply_with_non_standard_constants_is_not_json(body):
    assert UpstreamReply(status=200, body=body).parsed() == (False, body)
