"""
backend/clash_hub/services/hub_client.py

Purpose:
    Typed consumer of the proxy gateway used by the page controllers:
    turns relayed upstream replies into records, and upstream/transport
    failures into exceptions with user-facing messages.

Dependencies:
    - clash_hub.providers.royale_api
    - clash_hub.models.records
"""

from __future__ import annotations

import logging
from typing import Any

from clash_hub.errors import (
    ClientInputError,
    ConfigurationError,
    ParseError,
    TransportError,
    UpstreamRelayError,
)
from clash_hub.models.proxy import ProxyRequest
from clash_hub.models.records import BattleRecord, ClanRecord, LocationRef, PlayerRecord
from clash_hub.providers.royale_api import RoyaleApiGateway

logger = logging.getLogger("clash_hub.hub_client")


class RoyaleHubClient:
    def __init__(self, gateway: RoyaleApiGateway):
        self._gateway = gateway

    async def _fetch(self, request: ProxyRequest) -> Any:
        reply = await self._gateway.relay(request)
        if not reply.ok:
            raise UpstreamRelayError(reply.status, reply.body)
        is_json, data = reply.parsed()
        if not is_json:
            raise ParseError(f"{request.resource}: upstream body is not JSON")
        return data

    async def get_player(self, tag: str) -> PlayerRecord:
        data = await self._fetch(ProxyRequest(resource="players", tag=tag))
        return PlayerRecord.model_validate(data)

    async def get_battlelog(self, tag: str) -> list[BattleRecord]:
        data = await self._fetch(ProxyRequest(resource="players", tag=tag, battlelog=True))
        # The endpoint returns a bare list; tolerate an {"items": [...]} wrapper.
        items = data if isinstance(data, list) else (data or {}).get("items", [])
        return [BattleRecord.model_validate(item) for item in items]

    async def get_clan(self, tag: str) -> ClanRecord:
        data = await self._fetch(ProxyRequest(resource="clans", tag=tag))
        return ClanRecord.model_validate(data)

    async def search_clans(self, name: str, location_id: str | None = None) -> list[ClanRecord]:
        data = await self._fetch(ProxyRequest(resource="clans", name=name, location_id=location_id or None))
        items = data.get("items", []) if isinstance(data, dict) else data
        return [ClanRecord.model_validate(item) for item in items or []]

    async def list_locations(self) -> list[LocationRef]:
        data = await self._fetch(ProxyRequest(resource="locations"))
        items = data.get("items", []) if isinstance(data, dict) else data
        return [LocationRef.model_validate(item) for item in items or []]


def failure_message(exc: Exception, subject: str | None = None, kind: str = "player") -> str:
    """One inline message for any failure on a page."""
    if isinstance(exc, ClientInputError):
        return str(exc)
    if isinstance(exc, UpstreamRelayError):
        if exc.status == 404:
            if subject:
                return f"{kind.capitalize()} {subject} not found - check the tag is correct"
            return f"{kind.capitalize()} not found - check the tag is correct"
        if exc.status == 403:
            return "API access issue - please try again in a moment"
        if exc.status == 429:
            return "Too many requests - please wait a moment and try again"
        if exc.status >= 500:
            return "Clash Royale servers are having issues - try again later"
        return f"Could not load {kind} data - please try again"
    if isinstance(exc, TransportError):
        return "Connection problem - check your internet and try again"
    if isinstance(exc, ConfigurationError):
        return "The server is not configured correctly - please try again later"
    if isinstance(exc, ParseError):
        return "Invalid response from server - please try again"
    logger.error("Unexpected %s failure: %r", kind, exc)
    return f"Could not load {kind} data - please try again"
