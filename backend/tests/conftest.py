"""
backend/tests/conftest.py

Purpose:
    Shared pytest bootstrap for import paths used by backend and root-level
    tool module tests, plus small upstream fakes shared by gateway, client
    and page tests.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

_THIS_FILE = Path(__file__).resolve()
_BACKEND_DIR = _THIS_FILE.parents[1]
_REPO_ROOT = _THIS_FILE.parents[2]

for candidate in (str(_BACKEND_DIR), str(_REPO_ROOT)):
    if candidate not in sys.path:
        sys.path.insert(0, candidate)

from clash_hub.models.proxy import ProxyRequest, UpstreamReply


class FakeGateway:
    """Stands in for RoyaleApiGateway; replies are picked per request."""

    def __init__(self, responder):
        self._responder = responder
        self.calls: list[ProxyRequest] = []

    async def relay(self, request: ProxyRequest) -> UpstreamReply:
        self.calls.append(request)
        result = self._responder(request)
        if isinstance(result, Exception):
            raise result
        if isinstance(result, UpstreamReply):
            return result
        status, payload = result
        body = payload if isinstance(payload, str) else json.dumps(payload)
        return UpstreamReply(status=status, body=body, content_type="application/json")

    async def aclose(self) -> None:
        return None


def make_battle(team_crowns, opponent_crowns, **extra) -> dict:
    """Battle log item in upstream (camelCase) shape."""
    payload = {
        "battleTime": extra.pop("battleTime", "20250101T120000.000Z"),
        "type": "PvP",
        "gameMode": {"id": 72000006, "name": extra.pop("mode", "Ladder")},
        "arena": {"id": 54000001, "name": extra.pop("arena", "Legendary Arena")},
        "team": [{"tag": f"#P{i}", "name": f"Player{i}", "crowns": c} for i, c in enumerate(team_crowns)],
        "opponent": [
            {"tag": f"#O{i}", "name": f"Opp{i}", "crowns": c, "clan": {"tag": "#CLAN1", "name": "Rivals"}}
            for i, c in enumerate(opponent_crowns)
        ],
    }
    payload.update(extra)
    return payload


@pytest.fixture
def fake_gateway_factory():
    return FakeGateway


@pytest.fixture
def app_env():
    """Running app with a fake upstream; install() swaps the gateway responder.

    new_client() opens another browser (separate cookie jar) on the same app
    without re-running the lifespan.
    """
    from types import SimpleNamespace

    from fastapi.testclient import TestClient

    from clash_hub import main
    from clash_hub.services.hub_client import RoyaleHubClient
    from clash_hub.services.pages import LocationCatalog, PageSessions

    with TestClient(main.app, raise_server_exceptions=False) as client:
        def install(responder) -> FakeGateway:
            gateway = FakeGateway(responder)
            hub_client = RoyaleHubClient(gateway)
            main.app.state.gateway = gateway
            main.app.state.hub_client = hub_client
            main.app.state.page_sessions = PageSessions(hub_client, page_size=15, max_sessions=8)
            main.app.state.location_catalog = LocationCatalog(hub_client)
            return gateway

        def new_client() -> TestClient:
            return TestClient(main.app, raise_server_exceptions=False)

        install(lambda req: (200, {}))

        yield SimpleNamespace(client=client, install=install, new_client=new_client, app=main.app)
