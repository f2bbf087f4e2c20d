"""
backend/tests/test_hub_client.py

Purpose:
    Typed hub client over a fake gateway, and the mapping of failures to the
    inline messages pages show.
"""

from __future__ import annotations

import sys

import pytest

sys.path.insert(0, "backend")

from conftest import FakeGateway, make_battle

from clash_hub.errors import (
    ClientInputError,
    ConfigurationError,
    ParseError,
    TransportError,
    UpstreamRelayError,
)
from clash_hub.models.proxy import UpstreamReply
from clash_hub.services.hub_client import RoyaleHubClient, failure_message


@pytest.mark.asyncio
async def test_get_player_parses_record():
    gateway = FakeGateway(lambda req: (200, {"tag": "#2PP", "name": "Ash", "expLevel": 13}))
    player = await RoyaleHubClient(gateway).get_player("2PP")

    assert player.tag == "2PP"
    assert player.exp_level == 13
    assert gateway.calls[0].resource == "players"
    assert gateway.calls[0].tag == "2PP"
    assert gateway.calls[0].battlelog is False


@pytest.mark.asyncio
@pytest.mark.parametrize("wrap", [False, True])
async def test_battlelog_accepts_list_or_items_wrapper(wrap):
    battles = [make_battle([1], [0]), make_battle([0], [1])]
    payload = {"items": battles} if wrap else battles
    gateway = FakeGateway(lambda req: (200, payload))

    records = await RoyaleHubClient(gateway).get_battlelog("2PP")

    assert len(records) == 2
    assert gateway.calls[0].battlelog is True


@pytest.mark.asyncio
async def test_search_clans_forwards_location():
    gateway = FakeGateway(lambda req: (200, {"items": [{"tag": "#AAA", "name": "A"}]}))
    clans = await RoyaleHubClient(gateway).search_clans("A", "57000249")

    assert [c.tag for c in clans] == ["AAA"]
    assert gateway.calls[0].name == "A"
    assert gateway.calls[0].location_id == "57000249"


@pytest.mark.asyncio
async def test_non_2xx_raises_relay_error_with_status():
    gateway = FakeGateway(lambda req: (404, {"reason": "notFound"}))
    with pytest.raises(UpstreamRelayError) as info:
        await RoyaleHubClient(gateway).get_clan("ABC")
    assert info.value.status == 404
    assert "notFound" in info.value.body


@pytest.mark.asyncio
async def test_non_json_success_is_parse_error():
    gateway = FakeGateway(lambda req: UpstreamReply(status=200, body="<html>", content_type="text/html"))
    with pytest.raises(ParseError):
        await RoyaleHubClient(gateway).get_player("ABC")


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (UpstreamRelayError(404), "Player #ABC not found - check the tag is correct"),
        (UpstreamRelayError(403), "API access issue - please try again in a moment"),
        (UpstreamRelayError(429), "Too many requests - please wait a moment and try again"),
        (UpstreamRelayError(503), "Clash Royale servers are having issues - try again later"),
        (TransportError("down"), "Connection problem - check your internet and try again"),
        (ParseError("bad"), "Invalid response from server - please try again"),
        (ClientInputError("Please enter a tag to search"), "Please enter a tag to search"),
    ],
)
def test_failure_messages(exc, expected):
    assert failure_message(exc, subject="#ABC") == expected


def test_failure_message_for_clan_and_config():
    assert failure_message(UpstreamRelayError(404), kind="clan") == "Clan not found - check the tag is correct"
    assert "not configured" in failure_message(ConfigurationError("x"))
    assert failure_message(RuntimeError("x"), kind="battle log") == "Could not load battle log data - please try again"


@pytest.mark.asyncio
async def test_list_locations():
    gateway = FakeGateway(lambda req: (200, {"items": [{"id": 57000249, "name": "United States", "isCountry": True}]}))
    locations = await RoyaleHubClient(gateway).list_locations()

    assert [(loc.id, loc.name, loc.is_country) for loc in locations] == [(57000249, "United States", True)]
    assert gateway.calls[0].resource == "locations"
